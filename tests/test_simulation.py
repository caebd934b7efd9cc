import pytest

from schedsim.algorithms import ALGORITHMS, FCFSScheduler, MLFQScheduler, make_scheduler
from schedsim.config import SimulationConfig
from schedsim.errors import SimulationError, UnknownPolicyError, WorkloadError
from schedsim.models import ProcessSpec, ProcessState
from schedsim.simulation import Simulation, run_algorithm
from schedsim.workload_io import sample_workload


def _by_pid(result):
    return {p.pid: p for p in result.processes}


def test_fcfs_two_cpu_only_processes():
    specs = [ProcessSpec("A", (4,)), ProcessSpec("B", (3,))]
    result = run_algorithm("fcfs", specs)
    procs = _by_pid(result)

    assert procs["A"].response_time == 0
    assert procs["A"].turnaround_time == 4
    assert procs["B"].response_time == 4
    assert procs["B"].turnaround_time == 7
    assert procs["B"].waiting_time == 4
    assert result.system.total_time == 7
    assert result.system.idle_time == 0
    assert result.system.cpu_utilization == 100.0
    assert [(s.pid, s.start_time, s.end_time) for s in result.timeline] == [("A", 0, 4), ("B", 4, 7)]
    assert [s.time for s in result.switches] == [0, 4, 7]


@pytest.mark.parametrize("algorithm", sorted(ALGORITHMS))
def test_single_process_cpu_io_cpu(algorithm):
    result = run_algorithm(algorithm, [ProcessSpec("P", (3, 2), (5,))])
    p = result.processes[0]

    assert p.response_time == 0
    assert p.turnaround_time == 10
    assert p.waiting_time == 0
    assert result.system.idle_time == 5
    assert result.system.cpu_utilization == 50.0
    assert [s.time for s in result.switches] == [0, 3, 8, 10]


def test_context_switch_snapshots():
    seen = []
    sim = Simulation(
        [ProcessSpec("P", (3, 2), (5,))],
        FCFSScheduler(),
        on_switch=seen.append,
    )
    sim.run()

    first, to_io, wake, done = seen
    assert (first.running, first.running_burst) == ("P", 3)
    assert to_io.running is None
    assert to_io.in_io == [("P", 5)]
    assert (wake.running, wake.running_burst) == ("P", 2)
    assert done.terminated == ["P"]
    assert sim.switches == seen


def test_queue_snapshot_lists_remaining_bursts():
    sim = Simulation([ProcessSpec("A", (4,)), ProcessSpec("B", (3,))], FCFSScheduler())
    sim.start()
    assert sim.running().name == "A"
    [view] = sim.queues()
    assert view.label == "Ready Queue"
    assert view.entries == [("B", 3)]


def test_step_reports_each_tick():
    sim = Simulation([ProcessSpec("A", (2,)), ProcessSpec("B", (1,))], FCFSScheduler())
    ticks = [sim.step() for _ in range(3)]
    assert [(t.time, t.context_switch, t.running) for t in ticks] == [
        (1, False, "A"),
        (2, True, "B"),
        (3, True, None),
    ]
    assert sim.all_terminated()


def test_sjf_runs_shortest_burst_first():
    specs = [ProcessSpec("A", (5,)), ProcessSpec("B", (2,)), ProcessSpec("C", (3,))]
    procs = _by_pid(run_algorithm("sjf", specs))

    assert [procs[n].response_time for n in "BCA"] == [0, 2, 5]
    assert [procs[n].turnaround_time for n in "BCA"] == [2, 5, 10]


def test_mlfq_preempts_tier_three_process():
    specs = [ProcessSpec("L", (30,)), ProcessSpec("S", (1, 1), (20,))]
    sim = Simulation(specs, MLFQScheduler())
    result = sim.run()
    procs = _by_pid(result)

    assert procs["S"].response_time == 6
    assert procs["S"].turnaround_time == 28
    assert procs["S"].waiting_time == 6
    assert procs["L"].turnaround_time == 32
    assert procs["L"].waiting_time == 2
    assert sim.processes[0].priority == 3
    assert result.system.idle_time == 0

    preemption = [s for s in result.switches if s.time == 27]
    assert preemption and preemption[0].running == "S"
    assert preemption[0].queues[2].entries == [("L", 4)]


@pytest.mark.parametrize("algorithm", sorted(ALGORITHMS))
def test_sample_workload_invariants(algorithm):
    specs = sample_workload()
    sim = Simulation(specs, make_scheduler(algorithm))
    result = sim.run()

    assert all(p.state is ProcessState.TERMINATED for p in sim.processes)
    assert all(p.responded for p in sim.processes)
    for p in result.processes:
        assert p.turnaround_time >= p.service_time

    system = result.system
    assert 0.0 <= system.cpu_utilization <= 100.0
    assert system.total_time == max(p.turnaround_time for p in result.processes)
    assert system.idle_time + system.cpu_busy_time == system.total_time

    total_cpu = sum(sum(spec.cpu_bursts) for spec in specs)
    assert sum(s.end_time - s.start_time for s in result.timeline) == total_cpu
    assert system.cpu_busy_time == total_cpu


def test_sample_workload_is_deterministic():
    first = run_algorithm("mlfq", sample_workload())
    second = run_algorithm("mlfq", sample_workload())
    assert first.processes == second.processes
    assert first.system == second.system


def test_duplicate_names_rejected():
    with pytest.raises(WorkloadError):
        Simulation([ProcessSpec("A", (1,)), ProcessSpec("A", (2,))], FCFSScheduler())


def test_unknown_policy_rejected():
    with pytest.raises(UnknownPolicyError):
        run_algorithm("round-robin", [ProcessSpec("A", (1,))])


def test_max_time_aborts_run():
    config = SimulationConfig(max_time=5)
    with pytest.raises(SimulationError) as info:
        run_algorithm("fcfs", [ProcessSpec("A", (10,))], config=config)
    assert info.value.time == 5


def test_broken_process_aborts_with_tick():
    sim = Simulation([ProcessSpec("A", (4,))], FCFSScheduler())
    sim.start()
    sim.processes[0].cpu_bursts.clear()
    with pytest.raises(SimulationError, match="t=1") as info:
        sim.step()
    assert info.value.time == 1


def test_empty_workload_finishes_immediately():
    result = run_algorithm("fcfs", [])
    assert result.processes == []
    assert result.system.total_time == 0
    assert result.system.cpu_utilization == 0.0


def test_switch_recording_can_be_disabled():
    config = SimulationConfig(record_switches=False)
    result = run_algorithm("sjf", [ProcessSpec("A", (2,))], config=config)
    assert result.switches == []


def test_step_after_run_leaves_statistics_unchanged():
    sim = Simulation([ProcessSpec("A", (4,)), ProcessSpec("B", (3,))], FCFSScheduler())
    before = sim.run().system

    tick = sim.step()

    assert (tick.time, tick.context_switch, tick.running) == (7, False, None)
    assert sim.time == 7
    assert sim.idle_time == 0
    assert sim.result().system == before


def test_scheduler_reused_across_simulations():
    specs = [ProcessSpec("L", (30,)), ProcessSpec("S", (1, 1), (20,))]
    scheduler = MLFQScheduler()
    first = Simulation(specs, scheduler).run()

    second_sim = Simulation(specs, scheduler)
    assert [p.priority for p in second_sim.processes] == [1, 1]
    assert [len(members) for _, members in scheduler.queues()] == [2, 0, 0]

    second = second_sim.run()
    assert second.processes == first.processes
    assert second.system == first.system
