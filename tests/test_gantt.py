import io

from rich.console import Console

from schedsim.gantt import build_rich_gantt, chart_scale, timeline_cells
from schedsim.models import ScheduledSlice


def _render(panel) -> str:
    console = Console(file=io.StringIO(), width=200, color_system=None)
    console.print(panel)
    return console.file.getvalue()


def test_scale_is_one_for_short_runs():
    slices = [ScheduledSlice("A", 0, 40), ScheduledSlice("B", 40, 100)]
    assert chart_scale(slices, 100) == 1
    assert chart_scale([], 100) == 1


def test_scale_compresses_long_runs_to_width():
    slices = [ScheduledSlice("A", 0, 120), ScheduledSlice("B", 130, 250)]
    scale = chart_scale(slices, 100)
    assert scale == 3
    assert len(timeline_cells(slices, scale)) == 84


def test_idle_gap_becomes_empty_cells():
    slices = [ScheduledSlice("B", 4, 6), ScheduledSlice("A", 0, 2)]
    assert timeline_cells(slices, 1) == ["A", "A", None, None, "B", "B"]


def test_idle_gap_rendered_as_dots():
    slices = [ScheduledSlice("A", 0, 2), ScheduledSlice("B", 4, 6)]
    panel, time_marks = build_rich_gantt(slices)
    out = _render(panel)
    assert "  ..  " in out
    assert "Gantt Chart" in out
    assert time_marks == "0    6"


def test_compressed_chart_title_shows_scale():
    panel, _ = build_rich_gantt([ScheduledSlice("A", 0, 250)])
    assert "1 cell = 3 time units" in _render(panel)


def test_empty_timeline():
    panel, time_marks = build_rich_gantt([])
    assert time_marks == ""
    assert "No execution" in _render(panel)
