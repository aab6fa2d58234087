from __future__ import annotations

import sys
from typing import Any, Dict

from .base import Outcome, Phase, Reporter, get_verbosity, summary_line


class PlainReporter(Reporter):
    """Line-oriented reporter for logs and pipes, ANSI color on a TTY."""

    def __init__(self, stream=None, use_color: bool | None = None):
        super().__init__()
        self.stream = stream or sys.stderr
        if use_color is None:
            use_color = getattr(self.stream, "isatty", lambda: False)()
        self.use_color = use_color

    def _c(self, code: str, text: str) -> str:
        return f"\x1b[{code}m{text}\x1b[0m" if self.use_color else text

    def _line(self, text: str) -> None:
        self.stream.write(text + "\n")

    def on_buffer(self, ph: Phase, name: str, size: int) -> None:
        if get_verbosity() >= 1:
            self._line(f"   · {ph.key} {name!r} {size} bytes")

    def on_end(self, ph: Phase) -> None:
        icon = self._c("32", "✔") if ph.outcome is Outcome.OK else self._c("31", "✖")
        self._line(f" {icon} {ph.describe()}")

    def on_summary(self, kind: str, fields: Dict[str, Any]) -> None:
        self.status(summary_line(kind, fields))

    def status(self, message: str) -> None:
        self._line(f"{self._c('32', 'INFO')}: {message}")

    def verbose(self, message: str, level: int = 1) -> None:
        if get_verbosity() >= level:
            self._line(f"{self._c('36', f'VERB{level}')}: {message}")

    def warning(self, message: str) -> None:
        self._line(f"{self._c('33', 'WARN')}: {message}")

    def error(self, message: str) -> None:
        self._line(f"{self._c('31', 'ERROR')}: {message}")

    def section(self, title: str) -> None:
        self._line(f"\n[{title}]")
