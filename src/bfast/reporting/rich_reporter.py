from __future__ import annotations

import os
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .base import Outcome, Phase, Reporter, get_verbosity, summary_line


class RichReporter(Reporter):
    """Progress bars per phase on a TTY.

    With ``BFAST_PROGRESS_TRANSIENT=1`` bars vanish when done and the
    completion lines are printed together once the last phase ends.
    """

    def __init__(self, console: Console | None = None):
        super().__init__()
        self.console = console or Console(stderr=True, highlight=False, soft_wrap=False)
        self._transient = os.getenv("BFAST_PROGRESS_TRANSIENT", "0").lower() in (
            "1",
            "true",
            "yes",
        )
        self.progress: Progress | None = None
        self._bars: Dict[str, TaskID] = {}
        self._completions: List[str] = []

    def _ensure_progress(self) -> Progress:
        if self.progress is None:
            self.progress = Progress(
                SpinnerColumn(spinner_name="dots"),
                TextColumn("{task.description}", justify="left"),
                BarColumn(bar_width=None),
                TextColumn("{task.completed}/{task.total}"),
                TextColumn("{task.fields[item]}"),
                TimeElapsedColumn(),
                transient=self._transient,
                console=self.console,
                expand=True,
            )
            self.progress.start()
        return self.progress

    def on_begin(self, ph: Phase) -> None:
        # Unknown buffer counts get a rule instead of a bar
        if ph.expected is None:
            self.console.rule(escape(ph.label))
            return
        progress = self._ensure_progress()
        self._bars[ph.key] = progress.add_task(
            escape(ph.label), total=ph.expected, item=""
        )

    def on_buffer(self, ph: Phase, name: str, size: int) -> None:
        bar = self._bars.get(ph.key)
        if bar is not None and self.progress is not None:
            self.progress.update(bar, completed=ph.buffers, item=escape(name))

    def on_end(self, ph: Phase) -> None:
        bar = self._bars.pop(ph.key, None)
        if bar is not None and self.progress is not None:
            self.progress.update(bar, item="")
        icon = "✔" if ph.outcome is Outcome.OK else "✖"
        line = f"{icon} {ph.describe()}"
        if self._transient:
            self._completions.append(line)
        else:
            self.console.print(escape(line))
        if not self._bars:
            self.flush()

    def on_summary(self, kind: str, fields: Dict[str, Any]) -> None:
        self.status(summary_line(kind, fields))

    def status(self, message: str) -> None:
        self.console.print(f"[green]INFO[/]: {escape(message)}")

    def verbose(self, message: str, level: int = 1) -> None:
        if get_verbosity() >= level:
            self.console.print(f"[cyan]VERB{level}[/]: {escape(message)}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]WARN[/]: {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]ERROR[/]: {escape(message)}")

    def section(self, title: str) -> None:
        self.console.rule(escape(title))

    def flush(self) -> None:
        if self.progress is not None:
            try:
                self.progress.stop()
            finally:
                self.progress = None
        if self._completions:
            self.console.print(escape("\n".join(self._completions)))
            self._completions.clear()
