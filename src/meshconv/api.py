"""High-level conversion API.

``convert`` is the top-level driver: it ingests every input in order, and
only when all of them parsed without a fatal error hands the meshes to the
exporter. Fatal errors are ``MeshError`` exceptions and propagate to the
caller unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from .export import (
    DEFAULT_OUTPUT,
    AlembicExporter,
    ArchiveExporter,
    ExportParameters,
)
from .ingest import ingest_files
from .logging import get_logger, section, step
from .manifest import build_manifest
from .model import Mesh, ParseResult
from .reporting import get_reporter, task

__all__ = [
    "ConvertOptions",
    "ConvertResult",
    "convert",
    "load_meshes",
]


@dataclass(slots=True)
class ConvertOptions:
    inputs: Sequence[Path]
    output_path: Path = DEFAULT_OUTPUT
    params: ExportParameters = field(default_factory=ExportParameters)
    # Optional path; when provided a manifest JSON is written after ingestion
    manifest_path: Path | None = None
    # Treat any per-line diagnostic as fatal for its file
    strict: bool = False
    # Ingest and validate only; no archive is written
    dry_run: bool = False


@dataclass(slots=True)
class ConvertResult:
    results: List[ParseResult]
    output_file: Path | None
    bytes_written: int | None

    @property
    def meshes(self) -> List[Mesh]:
        return [r.mesh for r in self.results]


def load_meshes(paths: Sequence[str | Path], strict: bool = False) -> List[Mesh]:
    """Ingest ``paths`` and return the meshes in input order."""
    return [r.mesh for r in ingest_files(paths, strict=strict)]


def convert(
    options: ConvertOptions, exporter: Optional[ArchiveExporter] = None
) -> ConvertResult:
    logger = get_logger()
    rep = get_reporter()
    with section("Ingest"):
        results = ingest_files(list(options.inputs), strict=options.strict)
    meshes = [r.mesh for r in results]
    rep.summary(
        "ingest",
        files=len(results),
        vertices=sum(m.vertex_count for m in meshes),
        faces=sum(m.face_count for m in meshes),
        diagnostics=sum(len(r.diagnostics) for r in results),
    )

    output_file: Path | None = None
    bytes_written: int | None = None
    if options.dry_run:
        step("dry run: no archive written")
    else:
        exporter = exporter or AlembicExporter()
        logger.debug(
            "exporting %d samples with %s", len(meshes), type(exporter).__name__
        )
        name = options.output_path.name
        with section("Export"), task("export", f"Export {name}") as final:
            bytes_written = exporter.export(
                options.output_path, options.params, meshes
            )
            final.update(meshes=len(meshes))
        output_file = options.output_path
        rep.summary(
            "export",
            file=name,
            bytes=bytes_written,
            samples=len(meshes),
            fps=options.params.fps,
        )

    if options.manifest_path is not None:
        build_manifest(
            results,
            options.params,
            options.manifest_path,
            output_path=output_file,
            bytes_written=bytes_written,
        )
        rep.summary("manifest", file=options.manifest_path.name)
    return ConvertResult(
        results=results, output_file=output_file, bytes_written=bytes_written
    )
