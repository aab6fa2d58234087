from __future__ import annotations

import json
import sys
from typing import Any, Dict

from .base import Phase, Reporter, get_verbosity


class JsonLinesReporter(Reporter):
    """One JSON object per line on stdout.

    Events: ``phase_begin``, ``buffer``, ``phase_end``, ``summary`` (fields
    keep their native types), ``message`` and ``section``.
    """

    def __init__(self, stream=None):
        super().__init__()
        self.stream = stream or sys.stdout

    def _emit(self, event: str, **payload: Any) -> None:
        obj = {"event": event, **payload}
        self.stream.write(json.dumps(obj, sort_keys=True, default=str) + "\n")

    def on_begin(self, ph: Phase) -> None:
        self._emit("phase_begin", phase=ph.key, label=ph.label, expected=ph.expected)

    def on_buffer(self, ph: Phase, name: str, size: int) -> None:
        self._emit("buffer", phase=ph.key, name=name, size=size)

    def on_end(self, ph: Phase) -> None:
        self._emit(
            "phase_end",
            phase=ph.key,
            outcome=ph.outcome.value if ph.outcome else None,
            buffers=ph.buffers,
            bytes=ph.nbytes,
            elapsed=round(ph.elapsed, 6),
        )

    def on_summary(self, kind: str, fields: Dict[str, Any]) -> None:
        self._emit("summary", kind=kind, **fields)

    def status(self, message: str) -> None:
        self._emit("message", level="info", message=message)

    def verbose(self, message: str, level: int = 1) -> None:
        if get_verbosity() >= level:
            self._emit("message", level=f"verbose{level}", message=message)

    def warning(self, message: str) -> None:
        self._emit("message", level="warning", message=message)

    def error(self, message: str) -> None:
        self._emit("message", level="error", message=message)

    def section(self, title: str) -> None:
        self._emit("section", title=title)
