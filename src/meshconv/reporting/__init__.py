"""Output reporters for meshconv.

``plain`` (default) writes human text to stderr, ``rich`` adds progress bars,
``json`` emits one JSON object per event (problems on stderr, the rest on
stdout) and ``silent`` drops everything.
"""

from __future__ import annotations

import sys

from .base import (
    Reporter,
    TaskStatus,
    format_summary,
    get_reporter,
    set_reporter,
    task,
    set_verbosity,
    get_verbosity,
)
from .plain import PlainReporter
from .jsonl import JsonLinesReporter
from .silent import SilentReporter
from .rich_reporter import RichReporter

REPORTER_CHOICES = ("plain", "rich", "json", "silent")

__all__ = [
    "Reporter",
    "TaskStatus",
    "format_summary",
    "get_reporter",
    "set_reporter",
    "task",
    "set_verbosity",
    "get_verbosity",
    "create_reporter",
    "REPORTER_CHOICES",
    "PlainReporter",
    "JsonLinesReporter",
    "SilentReporter",
    "RichReporter",
]


def create_reporter(kind: str) -> Reporter:
    if kind == "json":
        return JsonLinesReporter()
    if kind == "silent":
        return SilentReporter()
    if kind == "rich":
        # progress bars only make sense on a terminal
        if sys.stderr.isatty():
            return RichReporter()
        return PlainReporter()
    if kind == "plain":
        return PlainReporter()
    raise ValueError(f"Unknown reporter: {kind}")
