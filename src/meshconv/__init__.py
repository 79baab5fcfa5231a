"""meshconv: ingest PLY/OBJ mesh sequences for export to Alembic."""

from .model import Mesh, Diagnostic, ParseResult
from .errors import MeshError
from .api import ConvertOptions, ConvertResult, convert, load_meshes

__version__ = "0.1.0"

__all__ = [
    "Mesh",
    "Diagnostic",
    "ParseResult",
    "MeshError",
    "ConvertOptions",
    "ConvertResult",
    "convert",
    "load_meshes",
    "__version__",
]
