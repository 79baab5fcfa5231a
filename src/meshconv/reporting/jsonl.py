from __future__ import annotations

import json
import sys
from typing import Any, TYPE_CHECKING

from .base import Reporter, TaskStatus, format_summary, get_verbosity

if TYPE_CHECKING:
    from ..model import Diagnostic


class JsonLinesReporter(Reporter):
    """One JSON object per event.

    Every object carries an ``event`` key: ``task_start``, ``task_progress``,
    ``task_end``, ``status``, ``diagnostic``, ``summary`` or ``section``.
    Diagnostics and warning or error status events go to ``error_stream``
    (stderr), everything else to ``stream`` (stdout).
    """

    def __init__(self, stream=None, error_stream=None):
        super().__init__()
        self.stream = stream or sys.stdout
        self.error_stream = error_stream or sys.stderr

    def _emit(
        self, event: str, *, to_error: bool = False, **payload: Any
    ) -> None:
        payload["event"] = event
        out = self.error_stream if to_error else self.stream
        out.write(json.dumps(payload, sort_keys=True) + "\n")

    def _message(self, level: str, message: str, fields: dict) -> None:
        self._emit(
            "status",
            to_error=level in ("warning", "error"),
            message=message,
            level=level,
            **fields,
        )

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._open(task_id, name, total, meta)
        self._emit("task_start", id=task_id, name=name, total=total, **meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        rec = self._step(task_id, step, meta)
        if rec is not None:
            self._emit(
                "task_progress", id=task_id, completed=rec.completed, **meta
            )

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        rec = self._close(task_id, status, final_meta)
        if rec is None:
            return
        self._emit(
            "task_end",
            id=task_id,
            status=status.name.lower(),
            completed=rec.completed,
            total=rec.total,
            duration_seconds=rec.duration,
            **rec.meta,
        )

    def status(self, message: str, **fields: Any) -> None:
        self._message("info", message, fields)

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        if get_verbosity() >= level:
            self._message(f"verbose{level}", message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._message("error", message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._message("warning", message, fields)

    def diagnostic(self, diag: "Diagnostic") -> None:
        self._emit("diagnostic", to_error=True, **diag.to_dict())

    def summary(self, kind: str, **fields: Any) -> None:
        self._emit(
            "summary",
            summary_type=kind,
            raw=format_summary(kind, fields),
            **fields,
        )

    def section(self, title: str) -> None:
        self._emit("section", title=title)
