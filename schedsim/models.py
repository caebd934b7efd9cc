from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .errors import EmptyBurstError, ProcessStateError, WorkloadError


class ProcessState(Enum):
    READY = "ready"
    RUNNING = "running"
    WAITING = "waiting"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class ProcessSpec:
    """
    Workload descriptor: a named process and its CPU and I/O bursts in
    simulation order.
    """

    name: str
    cpu_bursts: Tuple[int, ...]
    io_bursts: Tuple[int, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise WorkloadError("Process name must not be empty")

        cpu = _validate_bursts(self.name, "CPU", self.cpu_bursts)
        io = _validate_bursts(self.name, "I/O", self.io_bursts)
        if not cpu:
            raise WorkloadError(f"Process {self.name!r} needs at least one CPU burst")

        object.__setattr__(self, "cpu_bursts", cpu)
        object.__setattr__(self, "io_bursts", io)


def _validate_bursts(name: str, kind: str, bursts) -> Tuple[int, ...]:
    try:
        values = tuple(bursts)
    except TypeError as exc:
        raise WorkloadError(f"{kind} bursts of {name!r} must be a sequence, got {bursts!r}") from exc

    for value in values:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise WorkloadError(f"{kind} bursts of {name!r} must be positive integers, got {value!r}")
    return values


@dataclass
class Process:
    """
    A simulated process. The front of each burst list is the remaining
    time of the current burst of that kind.
    """

    name: str
    cpu_bursts: List[int]
    io_bursts: List[int] = field(default_factory=list)
    state: ProcessState = ProcessState.READY
    # Scheduling class as published by the active scheduler (tier for MLFQ,
    # current burst length for SJF, unused by FCFS).
    priority: int = 0
    responded: bool = False
    response_time: int = 0
    waiting_time: int = 0
    turnaround_time: int = 0
    service_time: int = field(init=False)

    def __post_init__(self) -> None:
        self.cpu_bursts = list(self.cpu_bursts)
        self.io_bursts = list(self.io_bursts)
        self.service_time = sum(self.cpu_bursts) + sum(self.io_bursts)

    @classmethod
    def from_spec(cls, spec: ProcessSpec) -> "Process":
        return cls(name=spec.name, cpu_bursts=list(spec.cpu_bursts), io_bursts=list(spec.io_bursts))

    def current_cpu_time(self) -> int:
        if not self.cpu_bursts:
            raise EmptyBurstError(self.name, "CPU")
        return self.cpu_bursts[0]

    def current_io_time(self) -> int:
        if not self.io_bursts:
            raise EmptyBurstError(self.name, "I/O")
        return self.io_bursts[0]

    def decrement_cpu(self) -> int:
        """
        Consume one unit of the current CPU burst and return what is left.
        Only a RUNNING process can consume CPU time.
        """
        if self.state is not ProcessState.RUNNING:
            raise ProcessStateError(self.name, self.state.name, "RUNNING", "consume CPU time")
        if not self.cpu_bursts:
            raise EmptyBurstError(self.name, "CPU", "decrement")
        self.cpu_bursts[0] -= 1
        return self.cpu_bursts[0]

    def decrement_io(self) -> int:
        if self.state is not ProcessState.WAITING:
            raise ProcessStateError(self.name, self.state.name, "WAITING", "consume I/O time")
        if not self.io_bursts:
            raise EmptyBurstError(self.name, "I/O", "decrement")
        self.io_bursts[0] -= 1
        return self.io_bursts[0]

    def pop_cpu(self) -> int:
        if not self.cpu_bursts:
            raise EmptyBurstError(self.name, "CPU", "pop")
        return self.cpu_bursts.pop(0)

    def pop_io(self) -> int:
        if not self.io_bursts:
            raise EmptyBurstError(self.name, "I/O", "pop")
        return self.io_bursts.pop(0)

    def has_cpu(self) -> bool:
        return bool(self.cpu_bursts)

    def has_io(self) -> bool:
        return bool(self.io_bursts)

    def mark_dispatched(self, now: int) -> None:
        self.state = ProcessState.RUNNING
        if not self.responded:
            self.responded = True
            self.response_time = now

    def terminate(self, now: int) -> None:
        self.state = ProcessState.TERMINATED
        self.turnaround_time = now


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: str
    start_time: int
    end_time: int


@dataclass
class QueueView:
    """Read-only copy of one ready queue: (name, remaining CPU burst) pairs."""

    label: str
    entries: List[Tuple[str, int]] = field(default_factory=list)


@dataclass
class ContextSwitch:
    time: int
    running: Optional[str]
    running_burst: Optional[int]
    queues: List[QueueView] = field(default_factory=list)
    in_io: List[Tuple[str, int]] = field(default_factory=list)
    terminated: List[str] = field(default_factory=list)


@dataclass
class ProcessMetrics:
    pid: str
    service_time: int
    response_time: int
    waiting_time: int
    turnaround_time: int


@dataclass
class SystemMetrics:
    total_time: int
    idle_time: int
    cpu_busy_time: int
    cpu_utilization: float
    throughput: float


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[Tuple[int, ...]]
    processes: List[ProcessMetrics] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    switches: List[ContextSwitch] = field(default_factory=list)
    system: Optional[SystemMetrics] = None
