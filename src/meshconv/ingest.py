"""Dispatch input files to their reader and aggregate the resulting meshes.

Files are processed strictly in order, one at a time. A fatal error in any
file propagates out of ``ingest_files`` and nothing parsed so far is kept.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .errors import (
    E_DIAGNOSTICS,
    E_MESH_INVARIANT,
    E_UNSUPPORTED_FORMAT,
    DiagnosticsError,
    InputError,
    file_error,
)
from .logging import get_logger
from .model import Diagnostic, ParseResult
from .obj import load_obj
from .ply import load_ply
from .reporting import get_reporter, task

__all__ = [
    "LOADERS",
    "extension_of",
    "loader_for",
    "ingest_file",
    "ingest_files",
]

Loader = Callable[..., ParseResult]

LOADERS: Dict[str, Loader] = {
    ".ply": load_ply,
    ".obj": load_obj,
}


def extension_of(path: str | Path) -> str:
    """Everything from the last ``.`` of the path, or "" when there is none.

    Unlike ``Path.suffix`` a bare ``.ply`` file name counts as a ``.ply``.
    """
    text = str(path)
    dot = text.rfind(".")
    return text[dot:] if dot != -1 else ""


def loader_for(path: str | Path) -> Loader:
    loader = LOADERS.get(extension_of(path))
    if loader is None:
        raise file_error(
            InputError,
            E_UNSUPPORTED_FORMAT,
            str(path),
            f"Unknown file type: {path}",
            supported=sorted(LOADERS),
        )
    return loader


def ingest_file(
    path: str | Path,
    *,
    strict: bool = False,
    on_diagnostic: Optional[Callable[[Diagnostic], None]] = None,
) -> ParseResult:
    """Parse one file.

    With ``strict`` any per-line error diagnostic makes the file fatal.
    """
    loader = loader_for(path)
    result = loader(path, on_diagnostic)
    if strict and result.errors:
        raise file_error(
            DiagnosticsError,
            E_DIAGNOSTICS,
            str(path),
            f"{len(result.errors)} diagnostic(s) reported (strict mode)",
            count=len(result.errors),
        )
    issues = result.mesh.check_invariants()
    if issues:
        raise file_error(
            InputError,
            E_MESH_INVARIANT,
            str(path),
            f"Inconsistent mesh: {'; '.join(issues)}",
            issues=issues,
        )
    return result


def ingest_files(
    paths: Sequence[str | Path], *, strict: bool = False
) -> List[ParseResult]:
    logger = get_logger()
    rep = get_reporter()
    results: List[ParseResult] = []
    with task("ingest", "Ingest meshes", total=len(paths)) as final:
        for path in paths:
            result = ingest_file(path, strict=strict, on_diagnostic=rep.diagnostic)
            mesh = result.mesh
            logger.debug(
                "%s: vertices=%d faces=%d indices=%d",
                path,
                mesh.vertex_count,
                mesh.face_count,
                len(mesh.indices),
            )
            results.append(result)
            rep.advance("ingest", current_item=Path(path).name)
        final.update(
            meshes=len(results),
            vertices=sum(r.mesh.vertex_count for r in results),
            faces=sum(r.mesh.face_count for r in results),
            diagnostics=sum(len(r.diagnostics) for r in results),
        )
    return results
