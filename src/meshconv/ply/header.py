"""Binary PLY header parsing.

Only one header layout is accepted::

    ply
    format binary_little_endian 1.0
    element vertex <count>
    property float x
    property float y
    property float z
    element face <count>
    property list uchar uint vertex_index
    end_header

Each line is fed to ``step`` which consults ``TRANSITIONS`` for the current
state. A line that does not match leaves the state unchanged and yields a
diagnostic; scanning continues so all header problems of a file surface at
once. The header is usable only when the machine ends in ``EXPECT_DATA``
without any diagnostic.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, NamedTuple, Optional

from ..model import SIZE_MAX, Diagnostic
from ..scanner import find_end_of, scan_lines

__all__ = [
    "HEADER_TERMINATOR",
    "HeaderState",
    "PlyHeader",
    "HeaderParse",
    "TRANSITIONS",
    "step",
    "find_header_end",
    "parse_header",
]

HEADER_TERMINATOR = b"end_header\n"


class HeaderState(Enum):
    EXPECT_MAGIC = auto()
    EXPECT_FORMAT = auto()
    EXPECT_VERTEX_ELEMENT = auto()
    EXPECT_VERTEX_X = auto()
    EXPECT_VERTEX_Y = auto()
    EXPECT_VERTEX_Z = auto()
    EXPECT_FACE_ELEMENT = auto()
    EXPECT_FACE_VERTEX_INDEX = auto()
    EXPECT_END_HEADER = auto()
    EXPECT_DATA = auto()


@dataclass(slots=True)
class PlyHeader:
    vertex_count: int = 0
    face_count: int = 0

    VERTEX_SIZE = 12  # three little-endian float32


# A matcher returns None on mismatch, otherwise the captured fields (possibly
# empty) to store on the header.
Matcher = Callable[[str], Optional[Dict[str, int]]]


def _literal(expected: str) -> Matcher:
    def match(line: str) -> Optional[Dict[str, int]]:
        return {} if line == expected else None

    return match


def _count(element: str, attr: str) -> Matcher:
    pattern = re.compile(rf"element\s+{element}\s+(\d+)\s*")

    def match(line: str) -> Optional[Dict[str, int]]:
        m = pattern.fullmatch(line)
        if m is None:
            return None
        value = int(m.group(1))
        if value > SIZE_MAX:
            return None
        return {attr: value}

    return match


class Transition(NamedTuple):
    match: Matcher
    next_state: HeaderState
    error: str


_S = HeaderState

TRANSITIONS: Dict[HeaderState, Transition] = {
    _S.EXPECT_MAGIC: Transition(
        _literal("ply"), _S.EXPECT_FORMAT, "not a PLY file"
    ),
    _S.EXPECT_FORMAT: Transition(
        _literal("format binary_little_endian 1.0"),
        _S.EXPECT_VERTEX_ELEMENT,
        "unsupported format",
    ),
    _S.EXPECT_VERTEX_ELEMENT: Transition(
        _count("vertex", "vertex_count"),
        _S.EXPECT_VERTEX_X,
        "unsupported vertex element",
    ),
    _S.EXPECT_VERTEX_X: Transition(
        _literal("property float x"),
        _S.EXPECT_VERTEX_Y,
        "unsupported vertex property",
    ),
    _S.EXPECT_VERTEX_Y: Transition(
        _literal("property float y"),
        _S.EXPECT_VERTEX_Z,
        "unsupported vertex property",
    ),
    _S.EXPECT_VERTEX_Z: Transition(
        _literal("property float z"),
        _S.EXPECT_FACE_ELEMENT,
        "unsupported vertex property",
    ),
    _S.EXPECT_FACE_ELEMENT: Transition(
        _count("face", "face_count"),
        _S.EXPECT_FACE_VERTEX_INDEX,
        "unsupported face element",
    ),
    _S.EXPECT_FACE_VERTEX_INDEX: Transition(
        _literal("property list uchar uint vertex_index"),
        _S.EXPECT_END_HEADER,
        "unsupported vertex_index property",
    ),
    _S.EXPECT_END_HEADER: Transition(
        _literal("end_header"), _S.EXPECT_DATA, "unsupported field"
    ),
    # terminal: any further header line means end_header was not followed
    # directly by a newline
    _S.EXPECT_DATA: Transition(
        lambda line: None, _S.EXPECT_DATA, "missing newline after end_header"
    ),
}


def step(
    state: HeaderState, line: str, header: PlyHeader
) -> tuple[HeaderState, Optional[str]]:
    """Advance the machine by one line.

    Returns the new state and an error message (None on success). Captured
    counts are written to ``header`` only on a successful match.
    """
    transition = TRANSITIONS[state]
    captured = transition.match(line)
    if captured is None:
        return state, transition.error
    for attr, value in captured.items():
        setattr(header, attr, value)
    return transition.next_state, None


@dataclass(slots=True)
class HeaderParse:
    header: PlyHeader
    state: HeaderState
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is HeaderState.EXPECT_DATA and not self.diagnostics


def find_header_end(data: bytes) -> int | None:
    """Offset of the first byte after ``end_header\\n``, or None."""
    return find_end_of(data, HEADER_TERMINATOR)


def parse_header(text: bytes, filename: str) -> HeaderParse:
    """Run every line of the header bytes through the state machine."""
    header = PlyHeader()
    state = HeaderState.EXPECT_MAGIC
    diagnostics: List[Diagnostic] = []
    for record in scan_lines(text):
        state, error = step(state, record.text, header)
        if error is not None:
            diagnostics.append(Diagnostic(filename, record.number, error))
        if not record.terminated:
            diagnostics.append(
                Diagnostic(
                    filename, record.number, "missing newline after end_header"
                )
            )
    return HeaderParse(header=header, state=state, diagnostics=diagnostics)
