"""Archive export boundary.

The ingestion core hands an ``ArchiveExporter`` the export parameters and the
ordered meshes once every input has been parsed. ``AlembicExporter`` writes
them as an animated poly mesh through the Alembic Python bindings
(``alembic`` + ``imath``), which ship with Alembic builds rather than on PyPI
and are therefore imported only when an export actually happens.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Protocol, Sequence

from .errors import E_EXPORT, ExportError
from .logging import get_logger
from .model import Mesh

__all__ = [
    "ExportParameters",
    "ArchiveExporter",
    "AlembicExporter",
    "DEFAULT_OUTPUT",
]

DEFAULT_OUTPUT = Path("out.abc")


@dataclass(slots=True)
class ExportParameters:
    application_name: str = "meshconv"
    scene_description: str = "Mesh animation converted by meshconv."
    object_name: str = "mesh"
    fps: float = 24.0

    def __post_init__(self) -> None:
        if not self.fps > 0:
            raise ValueError(f"fps must be positive, got {self.fps}")
        if not self.object_name:
            raise ValueError("object_name must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ArchiveExporter(Protocol):
    def export(
        self, output_path: Path, params: ExportParameters, meshes: Sequence[Mesh]
    ) -> int:
        """Write ``meshes`` as consecutive time samples; return bytes written."""
        ...


def _load_bindings():
    try:
        from alembic import Abc, AbcCoreAbstract, AbcGeom  # type: ignore
        import imath  # type: ignore
    except ImportError as e:
        raise ExportError(
            code=E_EXPORT,
            message="Alembic Python bindings (alembic, imath) are not installed",
            context={"module": e.name},
        ) from e
    return Abc, AbcCoreAbstract, AbcGeom, imath


class AlembicExporter:
    """One xform with one poly mesh, one geometry sample per input mesh."""

    transform_name = "root_transform"

    def export(
        self, output_path: Path, params: ExportParameters, meshes: Sequence[Mesh]
    ) -> int:
        Abc, AbcCoreAbstract, AbcGeom, imath = _load_bindings()
        logger = get_logger()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            meta = Abc.MetaData()
            meta.set("DCC_FPS", str(params.fps))
            archive = Abc.CreateArchiveWithInfo(
                str(output_path),
                params.application_name,
                params.scene_description,
                meta,
            )
            ts_index = archive.addTimeSampling(
                AbcCoreAbstract.TimeSampling(1.0 / params.fps, 0.0)
            )
            xform = AbcGeom.OXform(
                archive.getTop(), self.transform_name, ts_index
            )
            poly = AbcGeom.OPolyMesh(xform, params.object_name, ts_index)
            schema = poly.getSchema()
            meshtype = Abc.OBoolProperty(schema.getUserProperties(), "meshtype")
            meshtype.setValue(False)  # not a subdivision surface
            for n, mesh in enumerate(meshes):
                positions = imath.V3fArray(mesh.vertex_count)
                for i, (x, y, z) in enumerate(mesh.vertices):
                    positions[i] = imath.V3f(x, y, z)
                indices = imath.IntArray(len(mesh.indices))
                for i, v in enumerate(mesh.indices):
                    indices[i] = v
                counts = imath.IntArray(mesh.face_count)
                for i, v in enumerate(mesh.face_sizes):
                    counts[i] = v
                schema.set(AbcGeom.OPolyMeshSchemaSample(positions, indices, counts))
                logger.debug("sample %d: %s", n, mesh.summary())
            # archive is finalised when the last reference goes away
            del meshtype, schema, poly, xform, archive
        except Exception as e:
            raise ExportError(
                code=E_EXPORT,
                message=f"Failed to write {output_path}: {e}",
                context={"file": str(output_path)},
            ) from e
        return output_path.stat().st_size
