"""
Process scheduling simulator.

Drives a fixed set of processes, each alternating CPU and I/O bursts,
through a discrete-time simulation under FCFS, SJF or MLFQ scheduling and
reports response, waiting and turnaround times and CPU utilization.
"""

from .algorithms import ALGORITHMS, FCFSScheduler, MLFQScheduler, SJFScheduler, Scheduler, make_scheduler
from .config import SimulationConfig
from .models import Process, ProcessSpec, ProcessState, ScheduleResult
from .simulation import Simulation, run_algorithm

__all__ = [
    "ALGORITHMS",
    "FCFSScheduler",
    "MLFQScheduler",
    "Process",
    "ProcessSpec",
    "ProcessState",
    "SJFScheduler",
    "ScheduleResult",
    "Scheduler",
    "Simulation",
    "SimulationConfig",
    "cli",
    "make_scheduler",
    "run_algorithm",
]
