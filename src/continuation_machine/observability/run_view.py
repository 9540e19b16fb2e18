"""
Run View - rich rendering of runs, schedules and traces.

Read-only: describes what happened, never changes a run.

    print_report(report)          attempt table for one RunReport
    print_schedule(max_level)     budget per level and the cumulative cap
    print_trace_summary(path)     totals from a JSONL trace
"""

from pathlib import Path
from typing import Optional, Union

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from continuation_machine.scheduler import (
    AttemptOutcome,
    RunReport,
    attempt_budget,
    cumulative_budget,
)
from continuation_machine.signals import AbortIterationLimit, Exit, Return
from continuation_machine.symbols import render
from continuation_machine.trace_collector import summarize_trace


OUTCOME_STYLES = {
    AttemptOutcome.TERMINATED: "green",
    AttemptOutcome.EXHAUSTED: "yellow",
}


def format_signal(signal) -> Text:
    if isinstance(signal, Return):
        return Text(f"Return({render(signal.value)})", style="bold green")
    if isinstance(signal, Exit):
        return Text("Exit", style="bold cyan")
    if isinstance(signal, AbortIterationLimit):
        return Text(f"AbortIterationLimit(level={signal.level})", style="bold red")
    return Text("-", style="dim")


def report_table(report: RunReport) -> Table:
    """One row per attempt."""
    table = Table(
        title=f"[bold cyan]{report.function_ref}[/] [dim](max_level={report.max_level})[/]",
        box=box.SIMPLE_HEAVY,
    )
    table.add_column("level", justify="right")
    table.add_column("budget", justify="right")
    table.add_column("applied", justify="right")
    table.add_column("cumulative", justify="right")
    table.add_column("outcome")

    running = 0
    for record in report.attempts:
        running += record.applications
        style = OUTCOME_STYLES.get(record.outcome, "white")
        table.add_row(
            str(record.level),
            str(record.budget),
            str(record.applications),
            str(running),
            Text(record.outcome.value, style=style),
        )
    return table


def print_report(report: RunReport, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(report_table(report))
    summary = Text.assemble(
        ("signal: ", "dim"), format_signal(report.signal),
        ("  applications: ", "dim"), str(report.applications),
        ("  attempts: ", "dim"), str(report.levels_used),
    )
    border = "red" if report.aborted else "cyan"
    console.print(Panel(summary, border_style=border))


def schedule_table(max_level: int) -> Table:
    table = Table(title="[bold cyan]Escalation schedule[/]", box=box.SIMPLE_HEAVY)
    table.add_column("level", justify="right")
    table.add_column("budget", justify="right")
    table.add_column("cumulative", justify="right")
    for level in range(max_level + 1):
        table.add_row(str(level), str(attempt_budget(level)), str(cumulative_budget(level)))
    return table


def print_schedule(max_level: int, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(schedule_table(max_level))
    console.print(
        f"[dim]iteration limit:[/] [bold]{cumulative_budget(max_level)}[/] applications"
    )


def print_trace_summary(trace_path: Union[str, Path], console: Optional[Console] = None) -> None:
    console = console or Console()
    summary = summarize_trace(trace_path)

    table = Table(title=f"[bold cyan]Trace[/] [dim]{trace_path}[/]", box=box.SIMPLE)
    table.add_column("metric")
    table.add_column("value", justify="right")
    table.add_row("runs", str(summary["runs"]))
    table.add_row("attempts", str(summary["attempts"]))
    table.add_row("applications", str(summary["applications"]))
    table.add_row("aborted", str(summary["aborted"]))
    table.add_row("deepest run (levels)", str(summary["max_levels_used"]))
    for kind, n in sorted(summary["signals"].items()):
        table.add_row(f"signal: {kind}", str(n))
    console.print(table)
