"""Load a binary little-endian PLY file into a ParseResult."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from ..errors import (
    E_PLY_HEADER,
    E_PLY_TERMINATOR,
    HeaderError,
    file_error,
)
from ..logging import get_logger
from ..model import Diagnostic, ParseResult
from ..utils.io import read_input
from .body import decode_body
from .header import find_header_end, parse_header

__all__ = ["load_ply", "parse_ply_bytes"]


def parse_ply_bytes(
    data: bytes,
    filename: str,
    on_diagnostic: Optional[Callable[[Diagnostic], None]] = None,
) -> ParseResult:
    """Parse an in-memory PLY file.

    Header diagnostics are all collected (and forwarded to ``on_diagnostic``)
    before a HeaderError is raised, so a caller sees every bad header line.
    """
    logger = get_logger()
    header_size = find_header_end(data)
    if header_size is None:
        raise file_error(
            HeaderError,
            E_PLY_TERMINATOR,
            filename,
            "Couldn't find 'end_header\\n'",
        )
    parsed = parse_header(data[:header_size], filename)
    if on_diagnostic is not None:
        for diag in parsed.diagnostics:
            on_diagnostic(diag)
    if not parsed.ok:
        raise file_error(
            HeaderError,
            E_PLY_HEADER,
            filename,
            f"Invalid PLY header ({len(parsed.diagnostics)} problem(s))",
            state=parsed.state.name,
        )
    header = parsed.header
    logger.debug(
        "%s: header ok (vertices=%d faces=%d header_bytes=%d)",
        filename,
        header.vertex_count,
        header.face_count,
        header_size,
    )
    trailing: list[Diagnostic] = []
    mesh = decode_body(header, data[header_size:], filename, trailing)
    if on_diagnostic is not None:
        for diag in trailing:
            on_diagnostic(diag)
    return ParseResult(
        path=Path(filename),
        mesh=mesh,
        diagnostics=parsed.diagnostics + trailing,
    )


def load_ply(
    path: str | Path,
    on_diagnostic: Optional[Callable[[Diagnostic], None]] = None,
) -> ParseResult:
    p = Path(path)
    result = parse_ply_bytes(read_input(p), str(p), on_diagnostic)
    result.path = p
    return result
