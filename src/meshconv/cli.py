"""Command line interface for meshconv."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .api import ConvertOptions, convert
from .config import load_export_parameters
from .errors import MeshError
from .export import DEFAULT_OUTPUT
from .logging import configure_logging
from .reporting import (
    REPORTER_CHOICES,
    create_reporter,
    get_reporter,
    set_reporter,
    set_verbosity,
)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="meshconv",
        description="Convert a sequence of PLY/OBJ meshes into an animated Alembic archive",
    )
    p.add_argument(
        "inputs",
        nargs="+",
        type=Path,
        help="Input meshes (.ply binary little-endian or .obj), one sample each",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=REPORTER_CHOICES,
        default="plain",
        help="Select reporter backend: plain (default), rich, json (JSONL events), silent",
    )
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT,
        help=f"Output archive (default: {DEFAULT_OUTPUT})",
    )
    p.add_argument(
        "--config",
        type=Path,
        help="YAML/JSON file with export parameters",
    )
    p.add_argument("--fps", type=float, help="Sample rate (default: 24)")
    p.add_argument("--app-name", dest="application_name")
    p.add_argument("--description", dest="scene_description")
    p.add_argument("--object-name", dest="object_name")
    p.add_argument(
        "--emit-manifest",
        dest="emit_manifest",
        type=Path,
        help="Optional path to write manifest JSON (opt-in)",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        help="Treat any per-line diagnostic as fatal",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and validate inputs without writing an archive",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    args = build_parser().parse_args(argv)
    set_reporter(create_reporter(args.reporter))
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    rep = get_reporter()
    try:
        params = load_export_parameters(
            args.config,
            application_name=args.application_name,
            scene_description=args.scene_description,
            object_name=args.object_name,
            fps=args.fps,
        )
        convert(
            ConvertOptions(
                inputs=args.inputs,
                output_path=args.output,
                params=params,
                manifest_path=args.emit_manifest,
                strict=args.strict,
                dry_run=args.dry_run,
            )
        )
    except MeshError as e:
        rep.flush()
        where = f"{e.filename}: " if e.filename and e.filename not in e.message else ""
        rep.error(f"{where}{e.message}", code=e.code)
        return 1
    rep.flush()
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
