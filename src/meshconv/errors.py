"""Error definitions for meshconv.

Fatal ingestion and export failures are raised as ``MeshError`` subclasses
carrying a stable code; per-line problems are ``Diagnostic`` records instead
(see ``meshconv.model``).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

E_READ = "E_READ"
E_UNSUPPORTED_FORMAT = "E_UNSUPPORTED_FORMAT"
E_PLY_TERMINATOR = "E_PLY_TERMINATOR"
E_PLY_HEADER = "E_PLY_HEADER"
E_PLY_OVERFLOW = "E_PLY_OVERFLOW"
E_PLY_TRUNCATED = "E_PLY_TRUNCATED"
E_PLY_INDEX = "E_PLY_INDEX"
E_DIAGNOSTICS = "E_DIAGNOSTICS"
E_CONFIG = "E_CONFIG"
E_EXPORT = "E_EXPORT"
E_MESH_INVARIANT = "E_MESH_INVARIANT"


@dataclass
class MeshError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    @property
    def filename(self) -> str | None:
        if self.context:
            return self.context.get("file")
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class InputError(MeshError):
    pass


class HeaderError(MeshError):
    pass


class BinaryFormatError(MeshError):
    pass


class DiagnosticsError(MeshError):
    pass


class ConfigError(MeshError):
    pass


class ExportError(MeshError):
    pass


def file_error(
    cls: type[MeshError],
    code: str,
    filename: str,
    message: str,
    **context: Any,
) -> MeshError:
    return cls(code=code, message=message, context={"file": filename, **context})


__all__ = [
    "MeshError",
    "InputError",
    "HeaderError",
    "BinaryFormatError",
    "DiagnosticsError",
    "ConfigError",
    "ExportError",
    "file_error",
    "E_READ",
    "E_UNSUPPORTED_FORMAT",
    "E_PLY_TERMINATOR",
    "E_PLY_HEADER",
    "E_PLY_OVERFLOW",
    "E_PLY_TRUNCATED",
    "E_PLY_INDEX",
    "E_DIAGNOSTICS",
    "E_CONFIG",
    "E_EXPORT",
    "E_MESH_INVARIANT",
]
