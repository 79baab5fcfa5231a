"""Newline-delimited record scanner with 1-based line numbers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

__all__ = ["Record", "scan_lines", "find_end_of"]


@dataclass(slots=True, frozen=True)
class Record:
    number: int
    text: str
    terminated: bool


def scan_lines(data: bytes, encoding: str = "latin-1") -> Iterator[Record]:
    """Yield each ``\\n``-delimited record of ``data``.

    The newline is stripped; a carriage return is kept so that callers can
    decide how strict to be about it. A trailing record without a newline is
    yielded with ``terminated=False``. An empty buffer yields nothing.
    """
    pos = 0
    number = 0
    end = len(data)
    while pos < end:
        number += 1
        nl = data.find(b"\n", pos)
        if nl == -1:
            yield Record(number, data[pos:].decode(encoding), False)
            return
        yield Record(number, data[pos:nl].decode(encoding), True)
        pos = nl + 1


def find_end_of(data: bytes, needle: bytes) -> int | None:
    """Return the offset just past the first ``needle``, or None."""
    pos = data.find(needle)
    if pos == -1:
        return None
    return pos + len(needle)
