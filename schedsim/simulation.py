from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from .algorithms import Scheduler, make_scheduler
from .config import DEFAULT_CONFIG, SimulationConfig
from .errors import EmptyBurstError, ProcessStateError, SimulationError, WorkloadError
from .metrics import compute_system_metrics
from .models import (
    ContextSwitch,
    Process,
    ProcessMetrics,
    ProcessSpec,
    ProcessState,
    QueueView,
    ScheduledSlice,
    ScheduleResult,
)

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    time: int
    context_switch: bool
    running: Optional[str]


class Simulation:
    """
    Discrete-time driver for one scheduling policy.

    Each call to ``step`` advances the clock by one unit: every process
    consumes one unit of its current burst (or waits one unit in the ready
    queue), then the scheduler gets a chance to preempt or expire the
    running process, and finally a new process is dispatched if the CPU
    changed hands.
    """

    def __init__(
        self,
        specs: Iterable[ProcessSpec],
        scheduler: Scheduler,
        config: Optional[SimulationConfig] = None,
        on_switch: Optional[Callable[[ContextSwitch], None]] = None,
    ):
        self.scheduler = scheduler
        self.config = config or DEFAULT_CONFIG
        self.on_switch = on_switch

        self.processes: List[Process] = []
        seen = set()
        for spec in specs:
            if spec.name in seen:
                raise WorkloadError(f"Duplicate process name {spec.name!r}")
            seen.add(spec.name)
            self.processes.append(Process.from_spec(spec))

        self.time = 0
        self.idle_time = 0
        self.timeline: List[ScheduledSlice] = []
        self.switches: List[ContextSwitch] = []
        self._started = False

        self.scheduler.reset()
        for process in self.processes:
            self.scheduler.add_process(process)

    # Queries used by reporting.

    def running(self) -> Optional[Process]:
        for process in self.processes:
            if process.state is ProcessState.RUNNING:
                return process
        return None

    def waiting(self) -> List[Tuple[str, int]]:
        return [
            (p.name, p.current_io_time())
            for p in self.processes
            if p.state is ProcessState.WAITING
        ]

    def terminated(self) -> List[str]:
        return [p.name for p in self.processes if p.state is ProcessState.TERMINATED]

    def all_terminated(self) -> bool:
        return all(p.state is ProcessState.TERMINATED for p in self.processes)

    def queues(self) -> List[QueueView]:
        return [
            QueueView(label=label, entries=[(p.name, p.current_cpu_time()) for p in members])
            for label, members in self.scheduler.queues()
        ]

    # Simulation.

    def start(self) -> None:
        """Dispatch the first process at time 0."""
        if self._started:
            return
        self._started = True
        self._context_switch()

    def step(self) -> TickResult:
        if not self._started:
            self.start()
        if self.all_terminated():
            return TickResult(time=self.time, context_switch=False, running=None)

        try:
            return self._tick()
        except (EmptyBurstError, ProcessStateError) as exc:
            raise SimulationError(str(exc), time=self.time) from exc

    def run(self) -> ScheduleResult:
        self.start()
        while not self.all_terminated():
            if self.config.max_time is not None and self.time >= self.config.max_time:
                raise SimulationError(
                    f"{self.scheduler.name} did not finish within {self.config.max_time} time units",
                    time=self.time,
                )
            self.step()
        return self.result()

    def _tick(self) -> TickResult:
        self.time += 1

        current = self.running()
        if current is None:
            self.idle_time += 1
        else:
            self._record_slice(current.name)

        switch = False
        for process in self.processes:
            if process.state is ProcessState.RUNNING:
                switch = self._advance_running(process) or switch
            elif process.state is ProcessState.WAITING:
                switch = self._advance_waiting(process) or switch
            elif process.state is ProcessState.READY:
                process.waiting_time += 1

        # Burst completions above take precedence over preemption and
        # quantum expiry below.
        running = self.running()
        if self.scheduler.preempt(running):
            logger.debug("t=%d: %s preempted", self.time, running.name)
            running.state = ProcessState.READY
            self.scheduler.requeue(running)
            switch = True

        if self.scheduler.manage_quantum(self.running(), self.time):
            switch = True

        if switch:
            self._context_switch()

        running = self.running()
        return TickResult(
            time=self.time,
            context_switch=switch,
            running=running.name if running else None,
        )

    def _advance_running(self, process: Process) -> bool:
        if process.decrement_cpu() != 0:
            return False
        self.scheduler.retire_burst(process, self.time)
        return True

    def _advance_waiting(self, process: Process) -> bool:
        if process.decrement_io() != 0:
            return False

        process.pop_io()
        switch = False
        if process.has_cpu():
            # Wake the CPU up if it had nothing to do.
            if self.running() is None and self.scheduler.is_empty():
                switch = True
            process.state = ProcessState.READY
            self.scheduler.add_process(process)
        elif process.has_io():
            self.scheduler.on_blocked(process)
        else:
            process.terminate(self.time)
            logger.debug("t=%d: %s terminated", self.time, process.name)
        return switch

    def _context_switch(self) -> None:
        dispatched = self.scheduler.dispatch(self.time)
        logger.debug(
            "t=%d: context switch, now running %s",
            self.time,
            dispatched.name if dispatched else "[idle]",
        )

        if not (self.config.record_switches or self.on_switch):
            return
        snapshot = self.snapshot()
        if self.config.record_switches:
            self.switches.append(snapshot)
        if self.on_switch is not None:
            self.on_switch(snapshot)

    def snapshot(self) -> ContextSwitch:
        running = self.running()
        return ContextSwitch(
            time=self.time,
            running=running.name if running else None,
            running_burst=running.current_cpu_time() if running else None,
            queues=self.queues(),
            in_io=self.waiting(),
            terminated=self.terminated(),
        )

    def _record_slice(self, pid: str) -> None:
        start = self.time - 1
        if self.timeline and self.timeline[-1].pid == pid and self.timeline[-1].end_time == start:
            self.timeline[-1].end_time = self.time
        else:
            self.timeline.append(ScheduledSlice(pid=pid, start_time=start, end_time=self.time))

    def result(self) -> ScheduleResult:
        metrics = [
            ProcessMetrics(
                pid=p.name,
                service_time=p.service_time,
                response_time=p.response_time,
                waiting_time=p.waiting_time,
                turnaround_time=p.turnaround_time,
            )
            for p in self.processes
        ]
        result = ScheduleResult(
            algorithm=self.scheduler.name,
            quantum=self.scheduler.quantum,
            processes=metrics,
            timeline=list(self.timeline),
            switches=list(self.switches),
        )
        compute_system_metrics(result, total_time=self.time, idle_time=self.idle_time)
        return result


def run_algorithm(
    name: str,
    specs: Iterable[ProcessSpec],
    config: Optional[SimulationConfig] = None,
    on_switch: Optional[Callable[[ContextSwitch], None]] = None,
) -> ScheduleResult:
    """
    Simulate ``specs`` under the policy registered as ``name``.
    """
    config = config or DEFAULT_CONFIG
    simulation = Simulation(specs, make_scheduler(name, config), config=config, on_switch=on_switch)
    return simulation.run()
