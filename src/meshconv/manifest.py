"""Conversion manifest.

The manifest is an optional JSON artifact summarising one conversion run. It
is only produced when explicitly requested by the caller / CLI flag, and only
after every input was ingested successfully.

Contents:
- export parameters and output path (``exported`` is false for dry runs)
- one entry per input in archive sample order, with mesh counts and the
  diagnostics reported for that file
- totals across all meshes
"""

from __future__ import annotations

from pathlib import Path
import json
from typing import Any, Sequence

from .export import ExportParameters
from .model import ParseResult

__all__ = ["build_manifest", "manifest_dict"]

MANIFEST_VERSION = 1


def manifest_dict(
    results: Sequence[ParseResult],
    params: ExportParameters,
    *,
    output_path: Path | None = None,
    bytes_written: int | None = None,
) -> dict[str, Any]:
    inputs = [
        {
            "sample": i,
            "path": str(r.path),
            **r.mesh.summary(),
            "diagnostics": [d.to_dict() for d in r.diagnostics],
        }
        for i, r in enumerate(results)
    ]
    return {
        "version": MANIFEST_VERSION,
        "output": str(output_path) if output_path is not None else None,
        "exported": bytes_written is not None,
        "bytes_written": bytes_written,
        "parameters": params.to_dict(),
        "inputs": inputs,
        "totals": {
            "meshes": len(results),
            "vertices": sum(r.mesh.vertex_count for r in results),
            "faces": sum(r.mesh.face_count for r in results),
            "indices": sum(len(r.mesh.indices) for r in results),
            "diagnostics": sum(len(r.diagnostics) for r in results),
        },
    }


def build_manifest(
    results: Sequence[ParseResult],
    params: ExportParameters,
    manifest_path: Path,
    *,
    output_path: Path | None = None,
    bytes_written: int | None = None,
) -> Path:
    manifest_path.parent.mkdir(parents=True, exist_ok=True)
    data = manifest_dict(
        results,
        params,
        output_path=output_path,
        bytes_written=bytes_written,
    )
    with manifest_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True)
        f.write("\n")
    return manifest_path
