from __future__ import annotations

from typing import List

from .models import ProcessMetrics, ScheduleResult, SystemMetrics


def cpu_utilization(total_time: int, idle_time: int) -> float:
    """
    Percentage of simulated time the CPU was running a process.
    """
    if total_time <= 0:
        return 0.0
    return 100.0 * (total_time - idle_time) / total_time


def compute_system_metrics(result: ScheduleResult, total_time: int, idle_time: int) -> SystemMetrics:
    """
    Fill in ``result.system`` from the final clock and idle counters.
    """
    busy = total_time - idle_time
    system = SystemMetrics(
        total_time=total_time,
        idle_time=idle_time,
        cpu_busy_time=busy,
        cpu_utilization=cpu_utilization(total_time, idle_time),
        throughput=len(result.processes) / total_time if total_time > 0 else 0.0,
    )
    result.system = system
    return system


def summarize_process_metrics(processes: List[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
    }
