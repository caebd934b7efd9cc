import pytest

from schedsim.errors import EmptyBurstError, ProcessStateError, WorkloadError
from schedsim.models import Process, ProcessSpec, ProcessState


def test_spec_normalizes_bursts_to_tuples():
    spec = ProcessSpec("A", [3, 2], [5])
    assert spec.cpu_bursts == (3, 2)
    assert spec.io_bursts == (5,)


@pytest.mark.parametrize(
    "cpu, io",
    [
        ([], []),
        ([0], []),
        ([3, -1], []),
        ([3], [2.5]),
        ([True], []),
    ],
)
def test_spec_rejects_invalid_bursts(cpu, io):
    with pytest.raises(WorkloadError):
        ProcessSpec("A", cpu, io)


def test_spec_accepts_uneven_phases():
    spec = ProcessSpec("A", [1, 2, 3], [4])
    assert len(spec.cpu_bursts) == 3


def test_process_from_spec_starts_ready():
    p = Process.from_spec(ProcessSpec("A", [3, 2], [5]))
    assert p.state is ProcessState.READY
    assert p.service_time == 10
    assert p.current_cpu_time() == 3
    assert p.current_io_time() == 5
    assert not p.responded


def test_current_burst_on_empty_sequence_raises():
    p = Process("A", cpu_bursts=[], io_bursts=[])
    with pytest.raises(EmptyBurstError):
        p.current_cpu_time()
    with pytest.raises(IndexError):
        p.current_io_time()


def test_decrement_requires_matching_state():
    p = Process("A", cpu_bursts=[3], io_bursts=[2])
    with pytest.raises(ProcessStateError):
        p.decrement_cpu()
    with pytest.raises(ProcessStateError):
        p.decrement_io()

    p.state = ProcessState.RUNNING
    assert p.decrement_cpu() == 2
    assert p.cpu_bursts == [2]


def test_decrement_empty_sequence_is_an_error():
    p = Process("A", cpu_bursts=[3], io_bursts=[])
    p.state = ProcessState.WAITING
    with pytest.raises(EmptyBurstError) as info:
        p.decrement_io()
    assert info.value.kind == "I/O"


def test_pop_removes_front_burst():
    p = Process("A", cpu_bursts=[3, 4], io_bursts=[1])
    assert p.pop_cpu() == 3
    assert p.cpu_bursts == [4]
    assert p.pop_io() == 1
    assert not p.has_io()
    with pytest.raises(EmptyBurstError):
        p.pop_io()


def test_response_time_is_recorded_once():
    p = Process("A", cpu_bursts=[3])
    p.mark_dispatched(4)
    p.state = ProcessState.READY
    p.mark_dispatched(9)
    assert p.responded
    assert p.response_time == 4
    assert p.state is ProcessState.RUNNING


def test_terminate_records_turnaround():
    p = Process("A", cpu_bursts=[])
    p.terminate(12)
    assert p.state is ProcessState.TERMINATED
    assert p.turnaround_time == 12
