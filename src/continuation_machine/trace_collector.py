"""
Trace Collection

Records runs as JSONL for later inspection.

One line per record:
    header       version, start time
    application  (optional) level, index, state as the transition saw it
    attempt      level, budget, applications, outcome
    run          function, signal, total applications, aborted
    footer       end time, run count

Usage:
    from continuation_machine.trace_collector import TraceCollector

    collector = TraceCollector("traces/run_001.jsonl")
    machine = ContinuationMachine(observer=collector)
    machine.run("COUNTDOWN", (40,))
    collector.close()

    summarize_trace("traces/run_001.jsonl")
"""

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Union

from continuation_machine.scheduler import AttemptRecord, RunObserver, RunReport
from continuation_machine.state import MachineState, SymbolRef


@dataclass
class TraceEvent:
    """A single trace line."""
    type: str
    timestamp: str
    data: Dict[str, Any]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TraceCollector(RunObserver):
    """
    RunObserver that writes JSONL.

    Application lines are off by default: a run near the cap makes
    over a thousand of them.
    """

    def __init__(self, output_path: Union[str, Path], record_applications: bool = False):
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.record_applications = record_applications
        self.file = open(self.output_path, "w")
        self.runs = 0

        header = {
            "type": "header",
            "version": "1.0",
            "started_at": _now(),
        }
        self.file.write(json.dumps(header) + "\n")

    def _write(self, kind: str, data: Dict[str, Any]) -> None:
        event = TraceEvent(type=kind, timestamp=_now(), data=data)
        self.file.write(json.dumps(asdict(event)) + "\n")

    def on_run_start(self, function_ref: SymbolRef, max_level: int) -> None:
        self._write("run_start", {"function_ref": function_ref.name, "max_level": max_level})

    def on_application(self, level: int, index: int, state: MachineState) -> None:
        if self.record_applications:
            self._write("application", {"level": level, "index": index, "state": state.to_dict()})

    def on_attempt_end(self, record: AttemptRecord) -> None:
        self._write("attempt", record.to_dict())

    def on_run_end(self, report: RunReport) -> None:
        self.runs += 1
        self._write("run", report.to_dict())
        self.file.flush()

    def close(self) -> None:
        """Close the trace file."""
        footer = {
            "type": "footer",
            "ended_at": _now(),
            "total_runs": self.runs,
        }
        self.file.write(json.dumps(footer) + "\n")
        self.file.close()

    def __enter__(self) -> "TraceCollector":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def load_trace(trace_path: Union[str, Path]) -> List[TraceEvent]:
    """Load a trace file, skipping header and footer."""
    events = []
    with open(trace_path) as f:
        for line in f:
            if not line.strip():
                continue
            data = json.loads(line)
            if data.get("type") in ("header", "footer"):
                continue
            events.append(TraceEvent(**data))
    return events


def summarize_trace(trace_path: Union[str, Path]) -> Dict[str, Any]:
    """Per-run totals and signal counts for a trace file."""
    events = load_trace(trace_path)
    runs = [e.data for e in events if e.type == "run"]

    signals: Dict[str, int] = {}
    for run in runs:
        kind = run["signal"]["kind"] if run.get("signal") else "none"
        signals[kind] = signals.get(kind, 0) + 1

    return {
        "runs": len(runs),
        "attempts": sum(1 for e in events if e.type == "attempt"),
        "applications": sum(r["applications"] for r in runs),
        "aborted": sum(1 for r in runs if r["aborted"]),
        "max_levels_used": max((len(r["attempts"]) for r in runs), default=0),
        "signals": signals,
        "functions": sorted({r["function_ref"] for r in runs}),
    }
