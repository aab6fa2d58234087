"""Reporter protocol for pack/unpack phases and per-command summaries.

A phase is one pass over the buffers of a file (writing them, or extracting
them). Front ends see it through ``on_begin``/``on_buffer``/``on_end``; the
base class keeps the running counts so each backend only renders.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional

__all__ = [
    "Outcome",
    "Phase",
    "Reporter",
    "SUMMARY_KINDS",
    "summary_line",
    "set_reporter",
    "get_reporter",
    "set_verbosity",
    "get_verbosity",
    "phase",
]

SUMMARY_KINDS = ("pack", "unpack", "inspect", "validate")


class Outcome(Enum):
    OK = "ok"
    FAILED = "failed"


@dataclass(slots=True)
class Phase:
    key: str
    label: str
    expected: Optional[int] = None
    buffers: int = 0
    nbytes: int = 0
    outcome: Optional[Outcome] = None
    started: float = field(default_factory=time.perf_counter)
    elapsed: float = 0.0

    def describe(self) -> str:
        done = (
            f"{self.buffers}/{self.expected}"
            if self.expected is not None
            else str(self.buffers)
        )
        return f"{self.label}: {done} buffers, {self.nbytes} bytes ({self.elapsed:.2f}s)"


def summary_line(kind: str, fields: Dict[str, Any]) -> str:
    pairs = " ".join(f"{k}={v}" for k, v in fields.items())
    return f"{kind.capitalize()} summary: {pairs}"


_VERBOSITY: int = 0  # set by the CLI (-v repeats)


def set_verbosity(level: int) -> None:
    global _VERBOSITY
    _VERBOSITY = max(0, level)


def get_verbosity() -> int:
    return _VERBOSITY


class Reporter:
    def __init__(self) -> None:
        self._phases: Dict[str, Phase] = {}

    # Phase bookkeeping; backends override the on_* hooks.

    def begin(self, key: str, label: str, expected: Optional[int] = None) -> Phase:
        ph = Phase(key, label, expected)
        self._phases[key] = ph
        self.on_begin(ph)
        return ph

    def buffer_done(self, key: str, name: str, size: int) -> None:
        ph = self._phases.get(key)
        if ph is None:
            return
        ph.buffers += 1
        ph.nbytes += size
        self.on_buffer(ph, name, size)

    def end(self, key: str, outcome: Outcome = Outcome.OK) -> Optional[Phase]:
        ph = self._phases.pop(key, None)
        if ph is None:
            return None
        ph.outcome = outcome
        ph.elapsed = time.perf_counter() - ph.started
        self.on_end(ph)
        return ph

    def summary(self, kind: str, **fields: Any) -> None:
        if kind not in SUMMARY_KINDS:
            raise ValueError(f"Unknown summary kind: {kind}")
        self.on_summary(kind, fields)

    def on_begin(self, ph: Phase) -> None:
        pass

    def on_buffer(self, ph: Phase, name: str, size: int) -> None:
        pass

    def on_end(self, ph: Phase) -> None:
        pass

    def on_summary(self, kind: str, fields: Dict[str, Any]) -> None:
        pass

    # Free-form messages

    def status(self, message: str) -> None:
        pass

    def verbose(self, message: str, level: int = 1) -> None:
        pass

    def warning(self, message: str) -> None:
        pass

    def error(self, message: str) -> None:
        pass

    def section(self, title: str) -> None:
        pass

    def flush(self) -> None:
        pass


_ACTIVE_REPORTER: Reporter | None = None


def set_reporter(rep: Reporter) -> None:
    global _ACTIVE_REPORTER
    _ACTIVE_REPORTER = rep


def get_reporter() -> Reporter:
    global _ACTIVE_REPORTER
    if _ACTIVE_REPORTER is None:
        # Library use stays quiet until a front end installs a reporter
        _ACTIVE_REPORTER = Reporter()
    return _ACTIVE_REPORTER


@contextmanager
def phase(key: str, label: str, expected: Optional[int] = None) -> Iterator[Reporter]:
    rep = get_reporter()
    rep.begin(key, label, expected)
    try:
        yield rep
    except Exception:
        rep.end(key, Outcome.FAILED)
        raise
    rep.end(key, Outcome.OK)
