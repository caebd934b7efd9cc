from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan", "bright_red", "bright_green"]


def chart_scale(slices: List[ScheduledSlice], width: int) -> int:
    """
    Time units per character so that the whole run fits in ``width`` columns.
    """
    if not slices or width <= 0:
        return 1
    makespan = max(s.end_time for s in slices)
    return max(1, -(-makespan // width))


def timeline_cells(slices: List[ScheduledSlice], scale: int) -> List[Optional[str]]:
    """
    One entry per chart cell: the pid holding the CPU at the start of the
    cell's span, or None when the CPU was idle.
    """
    slices = sorted(slices, key=lambda s: (s.start_time, s.end_time))
    makespan = slices[-1].end_time if slices else 0

    cells: List[Optional[str]] = []
    index = 0
    for cell_start in range(0, makespan, scale):
        while index < len(slices) and slices[index].end_time <= cell_start:
            index += 1
        current = slices[index] if index < len(slices) else None
        if current is not None and current.start_time <= cell_start:
            cells.append(current.pid)
        else:
            cells.append(None)
    return cells


def build_rich_gantt(slices: List[ScheduledSlice], width: int = 100) -> Tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.

    Long runs are compressed: each cell covers ``chart_scale`` time units and
    shows whichever process held the CPU at the start of that span.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    slices = sorted(slices, key=lambda s: (s.start_time, s.end_time))
    scale = chart_scale(slices, width)
    makespan = slices[-1].end_time

    pid_to_color: Dict[str, str] = {}

    def pid_color(pid: str) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(COLORS)
            pid_to_color[pid] = COLORS[idx]
        return pid_to_color[pid]

    for sl in slices:
        pid_color(sl.pid)

    timeline = Text()
    for pid in timeline_cells(slices, scale):
        if pid is None:
            timeline.append(".", style="dim")
        else:
            timeline.append(" ", style=f"on {pid_color(pid)}")

    legend = Text()
    for pid, color in pid_to_color.items():
        legend.append("  ", style=f"on {color}")
        legend.append(f" {pid}  ")

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(legend)

    title = "Gantt Chart" if scale == 1 else f"Gantt Chart (1 cell = {scale} time units)"
    panel = Panel.fit(table, title=title)
    time_marks = f"0{makespan:>{max(1, len(timeline) - 1)}}"
    return panel, time_marks
