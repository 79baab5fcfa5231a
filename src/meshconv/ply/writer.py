"""Binary little-endian PLY encoding.

Produces exactly the header layout ``parse_header`` accepts, which makes it
handy for building fixtures and for re-emitting an ingested mesh.
"""

from __future__ import annotations

import struct
from ..model import Mesh

__all__ = ["encode_header", "encode_ply"]


def encode_header(vertex_count: int, face_count: int) -> bytes:
    lines = [
        "ply",
        "format binary_little_endian 1.0",
        f"element vertex {vertex_count}",
        "property float x",
        "property float y",
        "property float z",
        f"element face {face_count}",
        "property list uchar uint vertex_index",
        "end_header",
    ]
    return ("\n".join(lines) + "\n").encode("ascii")


def encode_ply(mesh: Mesh) -> bytes:
    parts = [encode_header(mesh.vertex_count, mesh.face_count)]
    parts.extend(struct.pack("<3f", *v) for v in mesh.vertices)
    for face in mesh.faces():
        parts.append(struct.pack(f"<B{len(face)}I", len(face), *face))
    return b"".join(parts)

