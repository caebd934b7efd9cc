from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .algorithms import ALGORITHMS
from .config import DEFAULT_MLFQ_QUANTA, SimulationConfig
from .errors import SchedulerError
from .gantt import build_rich_gantt
from .metrics import summarize_process_metrics
from .models import ContextSwitch, ProcessSpec, ScheduleResult
from .simulation import run_algorithm
from .workload_io import load_workload, sample_workload

# Menu choice -> policy name.
MENU_CHOICES = {"1": "sjf", "2": "fcfs", "3": "mlfq"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="Discrete-time CPU scheduling simulator (FCFS, SJF, MLFQ) with CPU and I/O bursts.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every context switch, preemption and quantum expiry.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Simulate one scheduling policy.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help=f"Policy to use ({', '.join(ALGORITHMS)}).",
    )
    _add_workload_args(run_parser)
    run_parser.add_argument(
        "--trace",
        action="store_true",
        help="Print the ready queues, I/O and completed processes at every context switch.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run several policies on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(ALGORITHMS),
        help=f"Policies to compare (default: {' '.join(ALGORITHMS)}).",
    )
    _add_workload_args(compare_parser)

    menu_parser = subparsers.add_parser(
        "menu",
        help="Interactive menu to pick a policy at runtime.",
    )
    _add_workload_args(menu_parser)

    return parser


def _add_workload_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Path to JSON or CSV workload file (default: built-in eight-process sample).",
    )
    parser.add_argument(
        "--quanta",
        "-q",
        type=int,
        nargs=2,
        metavar=("Q1", "Q2"),
        default=list(DEFAULT_MLFQ_QUANTA),
        help="MLFQ round-robin quanta for tiers 1 and 2 (default: %(default)s).",
    )
    parser.add_argument(
        "--max-time",
        type=int,
        default=None,
        help="Abort a run whose clock passes this many time units.",
    )


def _configure_logging(verbose: bool, console: Console) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False, show_time=False)],
        force=True,
    )


def _config_from_args(args: argparse.Namespace) -> SimulationConfig:
    return SimulationConfig(mlfq_quanta=tuple(args.quanta), max_time=args.max_time)


def _workload_from_args(args: argparse.Namespace) -> List[ProcessSpec]:
    if args.workload is None:
        return sample_workload()
    return load_workload(Path(args.workload))


def _print_switch(console: Console, switch: ContextSwitch) -> None:
    console.rule(f"[bold]Current Time: {switch.time}[/bold]")
    if switch.running is None:
        console.print("[bold]Now Running:[/bold] [dim]\\[idle][/dim]")
    else:
        console.print(f"[bold]Now Running:[/bold] [green]{switch.running}[/green] ({switch.running_burst})")

    for view in switch.queues:
        table = Table(title=view.label, box=box.SIMPLE, title_justify="left")
        table.add_column("Process")
        table.add_column("Burst", justify="right")
        if not view.entries:
            table.add_row("[dim]\\[empty][/dim]", "")
        for name, burst in view.entries:
            table.add_row(name, str(burst))
        console.print(table)

    io_table = Table(title="Now in I/O", box=box.SIMPLE, title_justify="left")
    io_table.add_column("Process")
    io_table.add_column("Remaining I/O time", justify="right")
    if not switch.in_io:
        io_table.add_row("[dim]\\[empty][/dim]", "")
    for name, remaining in switch.in_io:
        io_table.add_row(name, str(remaining))
    console.print(io_table)

    if switch.terminated:
        console.print(f"[bold]Completed:[/bold] {' '.join(switch.terminated)}")


def _print_result(result: ScheduleResult, console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quanta:[/bold] {', '.join(str(q) for q in result.quantum)}")

    console.print()

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks)

    console.print()

    headers = ["Process", "Service", "Response", "Wait", "Turnaround"]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h == "Process" else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            p.pid,
            str(p.service_time),
            str(p.response_time),
            str(p.waiting_time),
            str(p.turnaround_time),
        )

    console.print(proc_table)
    console.print()

    summary = summarize_process_metrics(result.processes)
    if result.system:
        system = result.system
        sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
        sys_table.add_column("Metric")
        sys_table.add_column("Value", justify="right")

        sys_table.add_row("Total time", str(system.total_time))
        sys_table.add_row("Idle time", str(system.idle_time))
        sys_table.add_row("CPU utilization", f"{system.cpu_utilization:.2f}%")
        sys_table.add_row("Avg waiting", f"{summary['avg_waiting']:.2f}")
        sys_table.add_row("Avg turnaround", f"{summary['avg_turnaround']:.2f}")
        sys_table.add_row("Avg response", f"{summary['avg_response']:.2f}")

        console.print(sys_table)


def _run_one(
    algorithm: str,
    specs: List[ProcessSpec],
    config: SimulationConfig,
    console: Console,
    trace: bool,
) -> ScheduleResult:
    on_switch = (lambda switch: _print_switch(console, switch)) if trace else None
    result = run_algorithm(algorithm, specs, config=config, on_switch=on_switch)
    if trace:
        console.print()
        console.rule("[bold]Finished[/bold]")
    _print_result(result, console)
    return result


def _run_compare(
    algorithms: List[str],
    specs: List[ProcessSpec],
    config: SimulationConfig,
    console: Console,
) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Total time", justify="right")
    summary_table.add_column("CPU utilization", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")

    for alg in algorithms:
        result = run_algorithm(alg, specs, config=config)
        summary = summarize_process_metrics(result.processes)
        summary_table.add_row(
            result.algorithm,
            str(result.system.total_time),
            f"{result.system.cpu_utilization:.2f}%",
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_turnaround']:.2f}",
            f"{summary['avg_response']:.2f}",
        )

    console.print(summary_table)


def _interactive_menu(specs: List[ProcessSpec], config: SimulationConfig, console: Console) -> None:
    while True:
        console.print("\n[bold cyan]Process Scheduler Simulator[/bold cyan]\n")
        console.print("  [yellow]1[/yellow]. Shortest Job First Simulation")
        console.print("  [yellow]2[/yellow]. First Come First Serve Simulation")
        console.print("  [yellow]3[/yellow]. Multi Level Feedback Queue Simulation")
        console.print("  [yellow]4[/yellow]. Exit\n")

        try:
            choice = input("Input: ").strip().lower()
        except EOFError:
            return
        if choice in {"4", "q", "quit", "exit"}:
            return

        alg = MENU_CHOICES.get(choice)
        if alg is None:
            console.print("[red]Invalid selection.[/red]")
            continue

        try:
            _run_one(alg, specs, config, console, trace=True)
        except SchedulerError as exc:
            console.print(f"[red]Error: {exc}[/red]")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    console = Console()
    _configure_logging(args.verbose, console)

    try:
        config = _config_from_args(args)
        specs = _workload_from_args(args)

        if args.command == "run":
            _run_one(args.algorithm, specs, config, console, trace=args.trace)
            return 0

        if args.command == "compare":
            _run_compare(args.algorithms, specs, config, console)
            return 0

        if args.command == "menu":
            _interactive_menu(specs, config, console)
            return 0
    except (SchedulerError, ValueError, OSError) as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
