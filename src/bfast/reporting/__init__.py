"""Progress and summary reporting for the bfast front ends."""

from .base import (
    SUMMARY_KINDS,
    Outcome,
    Phase,
    Reporter,
    get_reporter,
    get_verbosity,
    phase,
    set_reporter,
    set_verbosity,
    summary_line,
)
from .jsonl import JsonLinesReporter
from .plain import PlainReporter
from .rich_reporter import RichReporter
from .silent import SilentReporter

__all__ = [
    "SUMMARY_KINDS",
    "Outcome",
    "Phase",
    "Reporter",
    "get_reporter",
    "get_verbosity",
    "phase",
    "set_reporter",
    "set_verbosity",
    "summary_line",
    "JsonLinesReporter",
    "PlainReporter",
    "RichReporter",
    "SilentReporter",
]
