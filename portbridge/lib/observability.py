"""Observability utilities for the bridge.

Combines run metrics with logging setup so a bridge run can report both
per-port counters and JSON-friendly logs from the same module.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Generator, List, Optional

logger = logging.getLogger(__name__)

__all__ = [
    "PhaseTimer",
    "BridgeMetrics",
    "JSONFormatter",
    "setup_logging",
]

_RESERVED_ATTRS = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
}


@dataclass
class PhaseTimer:
    """Timer tracking a named phase of a run."""

    name: str
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None

    def stop(self) -> float:
        """Stop the timer and return the duration (seconds)."""
        self.end_time = time.time()
        return self.duration

    @property
    def duration(self) -> float:
        end = self.end_time or time.time()
        return end - self.start_time


class BridgeMetrics:
    """Counters and phase timings for a single bridge run."""

    def __init__(self, unit: str):
        self.unit = unit

        self._start_time = time.time()
        self._end_time: Optional[float] = None
        self._phases: List[PhaseTimer] = []
        self.inputs: Dict[str, str] = {}
        self.outputs: Dict[str, int] = {}
        self.bytes_written = 0

    @contextmanager
    def time_phase(self, name: str) -> Generator[PhaseTimer, None, None]:
        """Context manager that tracks a phase duration."""
        timer = PhaseTimer(name=name)
        self._phases.append(timer)
        try:
            yield timer
        finally:
            timer.stop()

    def record_input(self, port: str, status: str) -> None:
        """Record the read outcome for an input port."""
        self.inputs[port] = status

    def record_output(self, port: str, bytes_written: int) -> None:
        """Count one persisted payload for an output port."""
        self.outputs[port] = self.outputs.get(port, 0) + 1
        self.bytes_written += bytes_written

    @property
    def inputs_delivered(self) -> int:
        return sum(1 for status in self.inputs.values() if status == "ok")

    @property
    def inputs_missing(self) -> int:
        return sum(1 for status in self.inputs.values() if status != "ok")

    @property
    def outputs_written(self) -> int:
        return sum(self.outputs.values())

    def finish(self) -> None:
        """Mark the run as complete."""
        if self._end_time is None:
            self._end_time = time.time()

    @property
    def total_duration(self) -> float:
        end = self._end_time or time.time()
        return end - self._start_time

    def summary(self) -> Dict[str, Any]:
        """Return a summary dictionary of the run."""
        self.finish()

        return {
            "unit": self.unit,
            "timing": {
                "total_seconds": round(self.total_duration, 3),
                "phases": {p.name: round(p.duration, 3) for p in self._phases},
            },
            "inputs": dict(self.inputs),
            "outputs": dict(self.outputs),
            "inputs_delivered": self.inputs_delivered,
            "inputs_missing": self.inputs_missing,
            "outputs_written": self.outputs_written,
            "bytes_written": self.bytes_written,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def to_log_dict(self) -> Dict[str, Any]:
        """Flatten metrics for structured logging."""
        result: Dict[str, Any] = {
            "bridge_unit": self.unit,
            "total_duration_seconds": round(self.total_duration, 3),
            "inputs_delivered": self.inputs_delivered,
            "inputs_missing": self.inputs_missing,
            "outputs_written": self.outputs_written,
            "bytes_written": self.bytes_written,
        }
        for phase in self._phases:
            result[f"phase_{phase.name}_seconds"] = round(phase.duration, 3)
        return result


class JSONFormatter(logging.Formatter):
    """Formatter that renders log records as JSON.

    Example output:
        {"timestamp": "2025-01-15T10:30:00.123Z", "level": "INFO",
         "logger": "portbridge.lib.host", "message": "user_file -> users.json"}
    """

    def __init__(self, exclude_fields: Optional[List[str]] = None):
        super().__init__()
        self.exclude_fields = exclude_fields or []

    def format(self, record: logging.LogRecord) -> str:
        """Format a record as JSON."""
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.pathname:
            payload["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        # Attributes passed through extra=
        extra_attrs = {
            k: v
            for k, v in record.__dict__.items()
            if k not in _RESERVED_ATTRS and k not in self.exclude_fields
        }
        if extra_attrs:
            payload["extra"] = extra_attrs

        return json.dumps(payload, default=str)


def setup_logging(
    verbose: bool = False,
    json_format: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """Configure the root logger with optional JSON formatting.

    Args:
        verbose: Enable debug-level logging
        json_format: Use JSON output format (for log aggregation)
        log_file: Optional file path to write logs to
    """
    level = logging.DEBUG if verbose else logging.INFO

    formatter = JSONFormatter() if json_format else logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
