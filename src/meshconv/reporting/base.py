"""Reporter protocol shared by every output mode.

A reporter receives four kinds of events: task lifecycle (start, advance,
end), free-form status lines, parser diagnostics and end-of-phase summaries.
Task bookkeeping lives here so that concrete reporters only decide how an
event is rendered.
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..model import Diagnostic

__all__ = [
    "TaskStatus",
    "TaskRecord",
    "Reporter",
    "format_summary",
    "set_reporter",
    "get_reporter",
    "set_verbosity",
    "get_verbosity",
    "task",
]

# Keys shown after a finished task, in this order.
STAT_KEYS = ("meshes", "vertices", "faces", "diagnostics")


class TaskStatus(Enum):
    RUNNING = auto()
    SUCCESS = auto()
    FAILED = auto()
    SKIPPED = auto()


@dataclass(slots=True)
class TaskRecord:
    task_id: str
    name: str
    total: Optional[int] = None
    completed: int = 0
    status: TaskStatus = TaskStatus.RUNNING
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time

    @property
    def progress(self) -> str:
        """`` n/total`` when the total is known, else empty."""
        if self.total is None:
            return ""
        return f" {self.completed}/{self.total}"

    def stats(self) -> str:
        parts = [f"{k}={self.meta[k]}" for k in STAT_KEYS if k in self.meta]
        return f" [{' '.join(parts)}]" if parts else ""


def format_summary(kind: str, fields: Dict[str, Any]) -> str:
    """``Ingest summary: files=2 faces=12`` style one-liner."""
    pairs = " ".join(f"{k}={v}" for k, v in fields.items())
    return f"{kind.capitalize()} summary: {pairs}".rstrip()


_VERBOSITY: int = 0  # set by the CLI (-v repeats)


def set_verbosity(level: int) -> None:
    global _VERBOSITY
    _VERBOSITY = max(0, level)


def get_verbosity() -> int:
    return _VERBOSITY


class Reporter:
    def __init__(self) -> None:
        self._tasks: Dict[str, TaskRecord] = {}

    # -- bookkeeping used by subclasses -------------------------------------

    def _open(
        self, task_id: str, name: str, total: int | None, meta: Dict[str, Any]
    ) -> TaskRecord:
        rec = TaskRecord(task_id, name, total, meta=dict(meta))
        self._tasks[task_id] = rec
        return rec

    def _step(
        self, task_id: str, step: int, meta: Dict[str, Any]
    ) -> TaskRecord | None:
        rec = self._tasks.get(task_id)
        if rec is not None:
            rec.completed += step
            rec.meta.update(meta)
        return rec

    def _close(
        self, task_id: str, status: TaskStatus, meta: Dict[str, Any]
    ) -> TaskRecord | None:
        rec = self._tasks.pop(task_id, None)
        if rec is not None:
            rec.status = status
            rec.end_time = time.time()
            rec.meta.update(meta)
        return rec

    # -- events -------------------------------------------------------------

    def start_task(
        self, task_id: str, name: str, total: int | None = None, **meta: Any
    ) -> None:
        self._open(task_id, name, total, meta)

    def advance(self, task_id: str, step: int = 1, **meta: Any) -> None:
        self._step(task_id, step, meta)

    def end_task(
        self,
        task_id: str,
        status: TaskStatus = TaskStatus.SUCCESS,
        **final_meta: Any,
    ) -> None:
        self._close(task_id, status, final_meta)

    def status(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def verbose(self, message: str, *, level: int = 1, **fields: Any) -> None:
        pass

    def error(self, message: str, **fields: Any) -> None:
        raise NotImplementedError

    def warning(self, message: str, **fields: Any) -> None:
        self.status(message, **fields)

    def diagnostic(self, diag: "Diagnostic") -> None:
        """Render one parser diagnostic as ``<file>:<line>:<message>``."""
        raise NotImplementedError

    def summary(self, kind: str, **fields: Any) -> None:
        """End-of-phase counters (``ingest``, ``export``, ``manifest``)."""
        self.status(format_summary(kind, fields))

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
        from .plain import PlainReporter  # local import to avoid cycle

        _ACTIVE_REPORTER = PlainReporter(stream=sys.stderr)
    return _ACTIVE_REPORTER


@contextmanager
def task(task_id: str, name: str, total: int | None = None, **meta: Any):
    """Track a unit of work; the task is marked FAILED if the body raises.

    Yields a dict the body may fill with final stats for ``end_task``.
    """
    rep = get_reporter()
    rep.start_task(task_id, name, total, **meta)
    final: Dict[str, Any] = {}
    try:
        yield final
    except Exception:
        rep.end_task(task_id, TaskStatus.FAILED, **final)
        raise
    else:
        rep.end_task(task_id, TaskStatus.SUCCESS, **final)
