#!/usr/bin/env python3
"""
Continuation Machine CLI

Commands:
    cm run <name> [args...]     Run a registered transition function
    cm foreach <element> items  Apply an element function to each item
    cm probe                    Report the reachable iteration count
    cm limits                   Show the escalation schedule
    cm trace <file>             Summarize a JSONL trace

Examples:
    cm run REMOVE_COMMAS 1 2 3 4 5              -> 1 2 3 4 5
    cm run COUNTDOWN --state 300 --report       With attempt table
    cm run COUNT_APPLICATIONS --state 0         Fails: iteration limit
    cm run COUNT_APPLICATIONS --state 0 --hook partial_state
    cm foreach PARENTHESIZE a b c               -> (a) (b) (c)
    cm probe --max-level 12
    cm run COUNTDOWN --state 40 --trace traces/run.jsonl
    cm trace traces/run.jsonl

Usage:
    python -m continuation_machine probe
    cm limits --preset deep

Exit status: 0 ok, 1 caller error, 2 iteration limit reached.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from rich.console import Console
from rich.markup import escape

from continuation_machine.abort import ABORT_HOOKS, get_abort_hook
from continuation_machine.config_loader import load_machine_config
from continuation_machine.consumers import FOREACH_ITERATE, default_registry, probe_iteration_limit
from continuation_machine.errors import IterationLimitReached, MachineError
from continuation_machine.machine import ContinuationMachine, MachineConfig
from continuation_machine.observability.run_view import (
    print_report,
    print_schedule,
    print_trace_summary,
)
from continuation_machine.signals import result_of
from continuation_machine.state import SymbolRef
from continuation_machine.symbols import render
from continuation_machine.trace_collector import TraceCollector


EXIT_OK = 0
EXIT_CALLER_ERROR = 1
EXIT_ITERATION_LIMIT = 2

console = Console()
err_console = Console(stderr=True)


# =============================================================================
# Helpers
# =============================================================================

def parse_symbol(text: str) -> Any:
    """Integers stay integers; everything else is a name."""
    try:
        return int(text)
    except ValueError:
        return text


def build_config(args) -> MachineConfig:
    config = load_machine_config(args.config, preset=args.preset)
    if args.max_level is not None:
        config = config.with_max_level(args.max_level)
    if args.hook is not None:
        config = config.with_hook(get_abort_hook(args.hook))
    return config


def execute(args, function_ref: str, state: List[Any], items: List[Any]) -> int:
    config = build_config(args)
    collector = TraceCollector(args.trace) if args.trace else None
    machine = ContinuationMachine(default_registry(), config, observer=collector)
    try:
        report = machine.run_report(function_ref, state, items)
    finally:
        if collector is not None:
            collector.close()

    if args.report:
        print_report(report, console)
    console.print(render(result_of(report.signal)), markup=False, highlight=False)
    return EXIT_OK


# =============================================================================
# CLI Commands
# =============================================================================

def cmd_run(args) -> int:
    """Run a registered transition function."""
    state = [parse_symbol(s) for s in args.state]
    items = [parse_symbol(s) for s in args.args]
    return execute(args, args.name, state, items)


def cmd_foreach(args) -> int:
    """Apply a registered element function to each item."""
    items = [parse_symbol(s) for s in args.items]
    return execute(args, FOREACH_ITERATE, [], [SymbolRef(args.element), *items])


def cmd_probe(args) -> int:
    """Print the number of applications allowed before the abort path."""
    max_level = args.max_level
    if max_level is None:
        max_level = build_config(args).max_level
    console.print(f"CM iteration count: {probe_iteration_limit(max_level)}", highlight=False)
    return EXIT_OK


def cmd_limits(args) -> int:
    print_schedule(build_config(args).max_level, console)
    return EXIT_OK


def cmd_trace(args) -> int:
    path = Path(args.tracefile)
    if not path.exists():
        err_console.print(f"[red]Error: File not found: {args.tracefile}[/]")
        return EXIT_CALLER_ERROR
    print_trace_summary(path, console)
    return EXIT_OK


def cmd_list(args) -> int:
    for name in default_registry().names():
        console.print(name, highlight=False)
    return EXIT_OK


# =============================================================================
# Main
# =============================================================================

def add_machine_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--max-level', type=int, help='Highest escalation level (default 9)')
    parser.add_argument('--hook', choices=sorted(ABORT_HOOKS), help='Abort hook')
    parser.add_argument('--preset', help='Preset from the config file')
    parser.add_argument('--config', help='Path to config JSON')


def add_run_options(parser: argparse.ArgumentParser) -> None:
    add_machine_options(parser)
    parser.add_argument('--trace', help='Write a JSONL trace to this path')
    parser.add_argument('--report', '-r', action='store_true', help='Show the attempt table')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cm',
        description='Continuation Machine CLI - bounded iterative rewriting',
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # run
    p_run = subparsers.add_parser('run', help='Run a registered transition function')
    p_run.add_argument('name', help='Registered function name')
    p_run.add_argument('args', nargs='*', help='Initial arguments')
    p_run.add_argument('--state', '-s', nargs='*', default=[], help='Initial user state')
    add_run_options(p_run)
    p_run.set_defaults(func=cmd_run)

    # foreach
    p_foreach = subparsers.add_parser('foreach', help='Apply an element function to each item')
    p_foreach.add_argument('element', help='Registered element function (IDENTITY, PARENTHESIZE)')
    p_foreach.add_argument('items', nargs='*', help='Items')
    add_run_options(p_foreach)
    p_foreach.set_defaults(func=cmd_foreach)

    # probe
    p_probe = subparsers.add_parser('probe', help='Report the reachable iteration count')
    add_machine_options(p_probe)
    p_probe.set_defaults(func=cmd_probe)

    # limits
    p_limits = subparsers.add_parser('limits', help='Show the escalation schedule')
    add_machine_options(p_limits)
    p_limits.set_defaults(func=cmd_limits)

    # trace
    p_trace = subparsers.add_parser('trace', help='Summarize a JSONL trace')
    p_trace.add_argument('tracefile', help='Path to JSONL trace')
    p_trace.set_defaults(func=cmd_trace)

    # list
    p_list = subparsers.add_parser('list', help='List registered functions')
    p_list.set_defaults(func=cmd_list)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if not getattr(args, 'func', None):
        parser.print_help()
        return EXIT_CALLER_ERROR

    try:
        return args.func(args)
    except IterationLimitReached as e:
        err_console.print(f"[bold red]{escape(str(e))}[/]", highlight=False)
        return EXIT_ITERATION_LIMIT
    except MachineError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/]", highlight=False)
        return EXIT_CALLER_ERROR


if __name__ == '__main__':
    sys.exit(main())
