from __future__ import annotations

import sys
from typing import Any, TYPE_CHECKING

from .base import Reporter, TaskStatus, get_verbosity

if TYPE_CHECKING:
    from ..model import Diagnostic

ICONS = {
    TaskStatus.SUCCESS: "✔",
    TaskStatus.FAILED: "✖",
    TaskStatus.SKIPPED: "→",
}

# (label, ANSI color) per message level
_LEVELS = {
    "info": ("INFO", "32"),
    "warning": ("WARN", "33"),
    "error": ("ERROR", "31"),
}


class PlainReporter(Reporter):
    """Line-oriented text on stderr, colored only on a terminal.

    Diagnostics are written verbatim as ``<file>:<line>:<message>`` with no
    prefix or color so that editors and grep can consume them.
    """

    def __init__(self, stream=None, use_color: bool | None = None):
        super().__init__()
        self.stream = stream or sys.stderr
        if use_color is None:
            use_color = getattr(self.stream, "isatty", lambda: False)()
        self.use_color = use_color

    def _line(self, text: str) -> None:
        self.stream.write(text + "\n")

    def _labelled(self, level: str, message: str) -> None:
        label, color = _LEVELS[level]
        if self.use_color:
            label = f"\x1b[{color}m{label}\x1b[0m"
        self._line(f"{label}: {message}")

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._step(task_id, step, meta)
        if rec is None or get_verbosity() < 1:
            return
        item = meta.get("current_item") or f"#{rec.completed}"
        self._line(f"   · {rec.name}: {item}{rec.progress}")

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._close(task_id, status, final_meta)
        if rec is None:
            return
        icon = ICONS.get(status, "?")
        self._line(
            f" {icon} {rec.name}{rec.progress} ({rec.duration:.2f}s)"
            f"{rec.stats()}"
        )

    def status(self, message: str, **fields: Any) -> None:
        self._labelled("info", message)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._line(f"VERB{level}: {message}")

    def error(self, message: str, **fields: Any) -> None:
        self._labelled("error", message)

    def warning(self, message: str, **fields: Any) -> None:
        self._labelled("warning", message)

    def diagnostic(self, diag: "Diagnostic") -> None:
        self._line(str(diag))

    def section(self, title: str) -> None:
        self._line(f"\n[{title}]")
