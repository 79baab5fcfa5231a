"""Binary PLY body decoding.

Every size derived from the header is checked against the bytes actually
available before it is used. Vertex records are decoded field by field as
little-endian float32; nothing relies on host byte order.
"""

from __future__ import annotations

import struct
from typing import List

from ..errors import (
    E_PLY_INDEX,
    E_PLY_OVERFLOW,
    E_PLY_TRUNCATED,
    BinaryFormatError,
)
from ..model import (
    SIZE_MAX,
    Diagnostic,
    Mesh,
    Severity,
    is_mul_safe,
    ply_index_ok,
)
from .header import PlyHeader

__all__ = ["decode_body"]

_VERTEX = struct.Struct("<3f")
_INDEX_SIZE = 4


def _fail(filename: str, code: str, message: str, **ctx) -> BinaryFormatError:
    return BinaryFormatError(
        code=code, message=message, context={"file": filename, **ctx}
    )


def decode_body(
    header: PlyHeader,
    data: bytes,
    filename: str,
    diagnostics: List[Diagnostic] | None = None,
) -> Mesh:
    """Decode the bytes following ``end_header\\n`` into a Mesh.

    Raises BinaryFormatError on overflow, truncation or a bad index. Trailing
    bytes after the last declared face are appended to ``diagnostics`` as an
    informational record.
    """
    mesh = Mesh()
    if not is_mul_safe(PlyHeader.VERTEX_SIZE, header.vertex_count, SIZE_MAX):
        raise _fail(
            filename,
            E_PLY_OVERFLOW,
            "Vertex count too large",
            vertex_count=header.vertex_count,
        )
    vertex_data_size = PlyHeader.VERTEX_SIZE * header.vertex_count
    actual = len(data)
    if actual < vertex_data_size:
        raise _fail(
            filename,
            E_PLY_TRUNCATED,
            f"Expected {vertex_data_size} bytes of vertex data but got {actual}",
            expected=vertex_data_size,
            actual=actual,
        )
    mesh.vertices.extend(_VERTEX.iter_unpack(data[:vertex_data_size]))

    pos = vertex_data_size
    vertex_count = header.vertex_count
    for face in range(header.face_count):
        if actual - pos < 1:
            raise _fail(
                filename,
                E_PLY_TRUNCATED,
                f"Expected {header.face_count} faces but got {face}",
                expected=header.face_count,
                actual=face,
            )
        n = data[pos]
        pos += 1
        if actual - pos < _INDEX_SIZE * n:
            raise _fail(
                filename,
                E_PLY_TRUNCATED,
                "Expected index but reached end of file",
                face=face,
            )
        indices = struct.unpack_from(f"<{n}I", data, pos)
        pos += _INDEX_SIZE * n
        for index in indices:
            if not ply_index_ok(index, vertex_count):
                raise _fail(
                    filename,
                    E_PLY_INDEX,
                    f"Invalid index ({index})",
                    index=index,
                    face=face,
                )
        mesh.add_face(indices)

    extra = actual - pos
    if extra and diagnostics is not None:
        diagnostics.append(
            Diagnostic(
                filename,
                None,
                f"Extra {extra} bytes at end of file",
                Severity.INFO,
            )
        )
    return mesh
