"""
Observability - rendering for runs and traces.

Contents:
- run_view: rich tables for RunReport, escalation schedule, trace summary
"""

from continuation_machine.observability.run_view import (
    format_signal,
    print_report,
    print_schedule,
    print_trace_summary,
    report_table,
    schedule_table,
)

__all__ = [
    "format_signal",
    "print_report",
    "print_schedule",
    "print_trace_summary",
    "report_table",
    "schedule_table",
]
