"""Input file reading."""

from __future__ import annotations
from pathlib import Path

from ..errors import E_READ, InputError, file_error

__all__ = ["read_input", "DEFAULT_MAX_INPUT_SIZE"]

DEFAULT_MAX_INPUT_SIZE = 2 * 1024 * 1024 * 1024


def read_input(path: Path, max_size: int = DEFAULT_MAX_INPUT_SIZE) -> bytes:
    """Read a whole input file; the handle is closed on every exit path."""
    name = str(path)
    try:
        with path.open("rb") as f:
            size = f.seek(0, 2)
            if size > max_size:
                raise file_error(
                    InputError, E_READ, name, f"File too large: {size}>{max_size}"
                )
            f.seek(0)
            return f.read()
    except OSError as e:
        raise file_error(
            InputError, E_READ, name, f"Could not read file ({e.strerror or e})"
        ) from e
