from __future__ import annotations

import bisect
import itertools
import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Tuple

from .config import DEFAULT_CONFIG, SimulationConfig
from .errors import UnknownPolicyError
from .models import Process, ProcessState

logger = logging.getLogger(__name__)


class Scheduler(ABC):
    """
    Dispatch contract shared by every policy.

    A scheduler only ever holds references to READY processes; the process
    records themselves belong to the simulation.
    """

    name: str = ""
    quantum: Optional[Tuple[int, ...]] = None

    @abstractmethod
    def add_process(self, process: Process) -> None:
        """Enqueue a process that has just become READY."""

    @abstractmethod
    def _next(self) -> Optional[Process]:
        """Remove and return the next process to run, or None."""

    @abstractmethod
    def is_empty(self) -> bool:
        ...

    @abstractmethod
    def queues(self) -> List[Tuple[str, List[Process]]]:
        """Snapshot of the ready queue(s) in dispatch order, for reporting."""

    def dispatch(self, now: int) -> Optional[Process]:
        process = self._next()
        if process is not None:
            process.mark_dispatched(now)
        return process

    def manage_quantum(self, running: Optional[Process], now: int) -> bool:
        """Return True when the running process has used up its time slice."""
        return False

    def preempt(self, running: Optional[Process]) -> bool:
        return False

    def requeue(self, process: Process) -> None:
        """Put a preempted process back in the queue it was dispatched from."""
        self.add_process(process)

    def on_blocked(self, process: Process) -> None:
        """Called when a process leaves the CPU to perform I/O."""

    def reset(self) -> None:
        """Forget queued processes and per-process state from an earlier run."""

    def retire_burst(self, process: Process, now: int) -> None:
        """
        Drop the CPU burst the process has just finished and move it on:
        to WAITING when I/O is pending, back to READY when another CPU
        burst follows directly, otherwise to TERMINATED.
        """
        process.pop_cpu()
        if process.has_io():
            process.state = ProcessState.WAITING
            self.on_blocked(process)
        elif process.has_cpu():
            process.state = ProcessState.READY
            self.add_process(process)
        else:
            process.terminate(now)
            logger.debug("t=%d: %s terminated", now, process.name)


class FCFSScheduler(Scheduler):
    """
    First-Come First-Serve: one FIFO queue, never preempts.
    """

    name = "FCFS"

    def __init__(self, config: SimulationConfig = DEFAULT_CONFIG):
        self._queue: Deque[Process] = deque()

    def reset(self) -> None:
        self._queue.clear()

    def add_process(self, process: Process) -> None:
        self._queue.append(process)

    def _next(self) -> Optional[Process]:
        return self._queue.popleft() if self._queue else None

    def is_empty(self) -> bool:
        return not self._queue

    def queues(self) -> List[Tuple[str, List[Process]]]:
        return [("Ready Queue", list(self._queue))]


class SortedQueue:
    """
    List kept in ascending order of ``key``. Entries with equal keys keep
    insertion order, so the earliest insertion is served first.
    """

    def __init__(self, key: Callable[[Process], int]):
        self._key = key
        self._entries: List[Tuple[int, int, Process]] = []
        self._counter = itertools.count()

    def push(self, process: Process) -> int:
        k = self._key(process)
        bisect.insort(self._entries, (k, next(self._counter), process))
        return k

    def pop(self) -> Optional[Process]:
        if not self._entries:
            return None
        return self._entries.pop(0)[2]

    def __iter__(self):
        return (p for _, _, p in self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class SJFScheduler(Scheduler):
    """
    Shortest Job First (non-preemptive).

    The job length is the process's current CPU burst, taken each time it
    enters the queue, so this is really shortest-next-burst-first.
    """

    name = "SJF (non-preemptive)"

    def __init__(self, config: SimulationConfig = DEFAULT_CONFIG):
        self._queue = SortedQueue(key=lambda p: p.current_cpu_time())

    def reset(self) -> None:
        self._queue = SortedQueue(key=lambda p: p.current_cpu_time())

    def add_process(self, process: Process) -> None:
        process.priority = self._queue.push(process)

    def _next(self) -> Optional[Process]:
        return self._queue.pop()

    def is_empty(self) -> bool:
        return len(self._queue) == 0

    def queues(self) -> List[Tuple[str, List[Process]]]:
        return [("Ready Queue", list(self._queue))]


class MLFQScheduler(Scheduler):
    """
    Multi-Level Feedback Queue with 3 tiers.

    - Tier 1 and tier 2 are round-robin with their own quantum (6 and 11 by
      default); tier 3 is first-come-first-serve.
    - Every entry into the ready queue moves a process one level down, so a
      process whose quantum expires is demoted.
    - A process coming back from I/O starts again at tier 1.
    - A running process is preempted as soon as a higher tier has work; it
      returns to the tier it came from, not a lower one.
    """

    name = "MLFQ"
    TIERS = 3

    def __init__(self, config: SimulationConfig = DEFAULT_CONFIG):
        self.quantum = tuple(config.mlfq_quanta)
        self._tiers: List[Deque[Process]] = [deque() for _ in range(self.TIERS)]
        # Level per process name; level 0 means "fresh", next add lands in tier 1.
        self._levels: Dict[str, int] = {}
        self.quantum_left: Optional[int] = None

    def reset(self) -> None:
        for tier in self._tiers:
            tier.clear()
        self._levels.clear()
        self.quantum_left = None

    def level(self, process: Process) -> int:
        return self._levels.get(process.name, 0)

    def tier_of(self, process: Process) -> int:
        """Tier (1-3) a process belongs to at its current level."""
        return min(max(self.level(process), 1), self.TIERS)

    def _set_level(self, process: Process, level: int) -> None:
        self._levels[process.name] = level
        process.priority = level

    def add_process(self, process: Process) -> None:
        self._set_level(process, self.level(process) + 1)
        self._tiers[self.tier_of(process) - 1].append(process)

    def _next(self) -> Optional[Process]:
        for index, tier in enumerate(self._tiers):
            if tier:
                process = tier.popleft()
                self.quantum_left = self.quantum[index] if index < len(self.quantum) else None
                return process
        return None

    def manage_quantum(self, running: Optional[Process], now: int) -> bool:
        if running is None or self.tier_of(running) > len(self.quantum):
            return False
        if self.quantum_left is None:
            return False

        self.quantum_left -= 1
        if self.quantum_left > 0:
            return False

        if running.current_cpu_time() != 0:
            logger.debug(
                "t=%d: quantum expired for %s in tier %d", now, running.name, self.tier_of(running)
            )
            running.state = ProcessState.READY
            self.add_process(running)
        else:
            self.retire_burst(running, now)
        return True

    def preempt(self, running: Optional[Process]) -> bool:
        if running is None:
            return False
        tier = self.tier_of(running)
        if tier == 3:
            return bool(self._tiers[0] or self._tiers[1])
        if tier == 2:
            return bool(self._tiers[0])
        return False

    def requeue(self, process: Process) -> None:
        self._set_level(process, self.level(process) - 1)
        self.add_process(process)

    def on_blocked(self, process: Process) -> None:
        self._set_level(process, 0)

    def is_empty(self) -> bool:
        return not any(self._tiers)

    def queues(self) -> List[Tuple[str, List[Process]]]:
        labels = [f"Ready Queue {i + 1}" for i in range(self.TIERS)]
        return [(label, list(tier)) for label, tier in zip(labels, self._tiers)]


ALGORITHMS = {
    "fcfs": FCFSScheduler,
    "sjf": SJFScheduler,
    "mlfq": MLFQScheduler,
}


def make_scheduler(name: str, config: Optional[SimulationConfig] = None) -> Scheduler:
    """
    Build the scheduler registered under ``name`` (case-insensitive).
    """
    key = name.lower()
    if key not in ALGORITHMS:
        raise UnknownPolicyError(name, list(ALGORITHMS))
    return ALGORITHMS[key](config or DEFAULT_CONFIG)

