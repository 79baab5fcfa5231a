"""In-memory mesh representation shared by every reader.

A ``Mesh`` holds vertex positions, a flat 0-based index buffer and one face
size per face. Readers create one empty, fill it while scanning a single input
file and hand it back inside a ``ParseResult``; nothing mutates it afterwards.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

__all__ = [
    "Vec3",
    "Mesh",
    "Severity",
    "Diagnostic",
    "ParseResult",
    "INT32_MAX",
    "SIZE_MAX",
    "to_float32",
    "is_mul_safe",
    "obj_index_ok",
    "ply_index_ok",
]

Vec3 = Tuple[float, float, float]

INT32_MAX = 2**31 - 1
# Address-width limit used when sizing buffers from declared counts.
SIZE_MAX = 2**64 - 1

_F32 = struct.Struct("<f")


def to_float32(value: float) -> float:
    """Round a Python float to the nearest IEEE-754 single-precision value."""
    try:
        return _F32.unpack(_F32.pack(value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def is_mul_safe(x: int, y: int, limit: int = SIZE_MAX) -> bool:
    return x * y <= limit


def obj_index_ok(index: int, vertex_count: int) -> bool:
    # 1-based, must reference a vertex already seen
    return 0 < index <= vertex_count


def ply_index_ok(index: int, vertex_count: int) -> bool:
    return index <= INT32_MAX and index < vertex_count


@dataclass(slots=True)
class Mesh:
    vertices: List[Vec3] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)
    face_sizes: List[int] = field(default_factory=list)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def face_count(self) -> int:
        return len(self.face_sizes)

    def add_vertex(self, x: float, y: float, z: float) -> int:
        """Append a vertex and return its 0-based index."""
        self.vertices.append((to_float32(x), to_float32(y), to_float32(z)))
        return len(self.vertices) - 1

    def add_face(self, indices: Sequence[int]) -> None:
        """Append one face; ``indices`` must already be 0-based."""
        if len(indices) > 0xFF:
            raise ValueError(f"face size out of range: {len(indices)}")
        self.face_sizes.append(len(indices))
        self.indices.extend(indices)

    def faces(self) -> Iterable[List[int]]:
        pos = 0
        for size in self.face_sizes:
            yield self.indices[pos : pos + size]
            pos += size

    def check_invariants(self) -> List[str]:
        issues: List[str] = []
        if sum(self.face_sizes) != len(self.indices):
            issues.append(
                f"face sizes sum to {sum(self.face_sizes)} but there are "
                f"{len(self.indices)} indices"
            )
        n = len(self.vertices)
        bad = [i for i in self.indices if not 0 <= i < n]
        if bad:
            issues.append(f"{len(bad)} indices out of range (first={bad[0]})")
        return issues

    def summary(self) -> dict:
        return {
            "vertices": self.vertex_count,
            "faces": self.face_count,
            "indices": len(self.indices),
        }


class Severity(Enum):
    ERROR = "error"
    INFO = "info"


@dataclass(slots=True, frozen=True)
class Diagnostic:
    filename: str
    line: Optional[int]
    message: str
    severity: Severity = Severity.ERROR

    def __str__(self) -> str:
        if self.line is None:
            return f"{self.filename}: {self.message}"
        return f"{self.filename}:{self.line}:{self.message}"

    def to_dict(self) -> dict:
        return {
            "file": self.filename,
            "line": self.line,
            "message": self.message,
            "severity": self.severity.value,
        }


@dataclass(slots=True)
class ParseResult:
    path: Path
    mesh: Mesh
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def ok(self) -> bool:
        return not self.errors
