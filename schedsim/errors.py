from __future__ import annotations

from typing import Optional


class SchedulerError(Exception):
    """Base class for every error raised by the simulator."""


class EmptyBurstError(SchedulerError, IndexError):
    """
    Raised when a process is asked for, or told to consume, a burst it
    does not have.
    """

    def __init__(self, process: str, kind: str, action: str = "query"):
        self.process = process
        self.kind = kind
        self.action = action
        super().__init__(f"Process {process!r} has no {kind} burst to {action}")


class ProcessStateError(SchedulerError):
    def __init__(self, process: str, state: str, expected: str, action: str):
        self.process = process
        self.state = state
        self.expected = expected
        super().__init__(
            f"Cannot {action} for process {process!r} in state {state} (expected {expected})"
        )


class UnknownPolicyError(SchedulerError, ValueError):
    def __init__(self, name: str, known: Optional[list] = None):
        self.name = name
        hint = f" (choose from {', '.join(known)})" if known else ""
        super().__init__(f"Unknown scheduling policy '{name}'{hint}")


class WorkloadError(SchedulerError, ValueError):
    """Invalid process descriptor or workload file."""


class SimulationError(SchedulerError, RuntimeError):
    """A run was aborted; carries the simulated time it failed at."""

    def __init__(self, message: str, time: Optional[int] = None):
        self.time = time
        if time is not None:
            message = f"t={time}: {message}"
        super().__init__(message)
