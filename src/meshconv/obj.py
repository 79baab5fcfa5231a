"""Wavefront OBJ reader (positions and polygon faces only).

The reader is tolerant: only ``v `` and ``f `` records are
interpreted, anything else (comments, groups, materials, normals, texture
coordinates) is skipped. A malformed vertex or face line produces a
diagnostic and is dropped; it never aborts the file.

Faces are triangles or quads. Indices are 1-based in the file and may only
refer to vertices declared earlier.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, List, Optional, Pattern

from .logging import get_logger
from .model import Diagnostic, Mesh, ParseResult, obj_index_ok
from .scanner import scan_lines
from .utils.io import read_input

__all__ = ["parse_obj_bytes", "load_obj"]

_VERTEX_PREFIX = "v "
_FACE_PREFIX = "f "
_FACE_ARITIES = (4, 3)

# Fields are read like scanf conversions: leading whitespace is skipped, the
# longest numeric prefix is taken and the next field starts right after it.
_FLOAT_FIELD = re.compile(
    r"\s*([+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|inf(?:inity)?|nan))",
    re.IGNORECASE,
)
_INT_FIELD = re.compile(r"\s*([+-]?[0-9]+)")


def _scan(
    text: str, field: Pattern[str], count: int, convert
) -> Optional[list]:
    """Convert ``count`` leading fields of ``text`` or return None."""
    values = []
    pos = 0
    for _ in range(count):
        m = field.match(text, pos)
        if m is None:
            return None
        values.append(convert(m.group(1)))
        pos = m.end()
    return values


def parse_obj_bytes(
    data: bytes,
    filename: str,
    on_diagnostic: Optional[Callable[[Diagnostic], None]] = None,
) -> ParseResult:
    mesh = Mesh()
    diagnostics: List[Diagnostic] = []

    def report(line_number: int, message: str) -> None:
        diag = Diagnostic(filename, line_number, message)
        diagnostics.append(diag)
        if on_diagnostic is not None:
            on_diagnostic(diag)

    for record in scan_lines(data):
        line = record.text
        if not line:
            continue
        if line.startswith(_VERTEX_PREFIX):
            xyz = _scan(line[len(_VERTEX_PREFIX) :], _FLOAT_FIELD, 3, float)
            if xyz is None:
                report(record.number, "not a recognized vertex format")
                continue
            mesh.add_vertex(*xyz)
        elif line.startswith(_FACE_PREFIX):
            rest = line[len(_FACE_PREFIX) :]
            for arity in _FACE_ARITIES:
                face = _scan(rest, _INT_FIELD, arity, int)
                if face is not None:
                    break
            else:
                report(record.number, "not a valid index format")
                continue
            vcount = mesh.vertex_count
            if all(obj_index_ok(i, vcount) for i in face):
                mesh.add_face([i - 1 for i in face])
            else:
                report(record.number, "invalid index")

    get_logger().debug(
        "%s: parsed %d vertices, %d faces (%d diagnostics)",
        filename,
        mesh.vertex_count,
        mesh.face_count,
        len(diagnostics),
    )
    return ParseResult(path=Path(filename), mesh=mesh, diagnostics=diagnostics)


def load_obj(
    path: str | Path,
    on_diagnostic: Optional[Callable[[Diagnostic], None]] = None,
) -> ParseResult:
    p = Path(path)
    result = parse_obj_bytes(read_input(p), str(p), on_diagnostic)
    result.path = p
    return result
