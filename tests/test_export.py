"""AlembicExporter against stand-in ``alembic``/``imath`` modules."""

import sys
import types

import pytest

from meshconv.errors import E_EXPORT, ExportError
from meshconv.export import AlembicExporter, ExportParameters
from meshconv.model import Mesh


def _mesh(offset: float) -> Mesh:
    m = Mesh()
    for v in ((0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)):
        m.add_vertex(v[0] + offset, v[1], v[2])
    m.add_face([0, 1, 2, 3])
    m.add_face([0, 2, 1])
    return m


class _Bindings:
    """Records every call the exporter makes, in order."""

    def __init__(self):
        self.calls = []
        calls = self.calls

        class MetaData:
            def set(self, key, value):
                calls.append(("MetaData.set", key, value))

        class Archive:
            def addTimeSampling(self, ts):
                calls.append(("addTimeSampling", ts))
                return 1

            def getTop(self):
                return "top"

        def create_archive(path, app, description, meta):
            calls.append(("CreateArchiveWithInfo", path, app, description))
            with open(path, "wb") as fh:
                fh.write(b"abc!")
            return Archive()

        class UserProps:
            pass

        class Schema:
            def getUserProperties(self):
                return UserProps()

            def set(self, sample):
                calls.append(("set", sample))

        class PolyMesh:
            def __init__(self, parent, name, ts):
                calls.append(("OPolyMesh", parent, name, ts))
                self._schema = Schema()

            def getSchema(self):
                return self._schema

        class BoolProperty:
            def __init__(self, parent, name):
                calls.append(("OBoolProperty", name))

            def setValue(self, value):
                calls.append(("OBoolProperty.setValue", value))

        def xform(parent, name, ts):
            calls.append(("OXform", parent, name, ts))
            return "xform"

        self.abc = types.SimpleNamespace(
            MetaData=MetaData,
            CreateArchiveWithInfo=create_archive,
            OBoolProperty=BoolProperty,
        )
        self.core = types.SimpleNamespace(
            TimeSampling=lambda step, start: ("TimeSampling", step, start)
        )
        self.geom = types.SimpleNamespace(
            OXform=xform,
            OPolyMesh=PolyMesh,
            OPolyMeshSchemaSample=lambda p, i, c: (list(p), list(i), list(c)),
        )
        self.imath = types.SimpleNamespace(
            V3fArray=lambda n: [None] * n,
            V3f=lambda x, y, z: (x, y, z),
            IntArray=lambda n: [0] * n,
        )

    def install(self, monkeypatch):
        alembic = types.ModuleType("alembic")
        alembic.Abc = self.abc
        alembic.AbcCoreAbstract = self.core
        alembic.AbcGeom = self.geom
        monkeypatch.setitem(sys.modules, "alembic", alembic)
        monkeypatch.setitem(sys.modules, "imath", self.imath)


@pytest.fixture
def bindings(monkeypatch):
    b = _Bindings()
    b.install(monkeypatch)
    return b


def test_archive_layout_and_sample_order(tmp_path, bindings):
    out = tmp_path / "anim" / "out.abc"
    params = ExportParameters(
        application_name="app",
        scene_description="desc",
        object_name="blob",
        fps=25.0,
    )
    written = AlembicExporter().export(out, params, [_mesh(0.0), _mesh(10.0)])

    assert written == 4
    calls = bindings.calls
    assert calls[:7] == [
        ("MetaData.set", "DCC_FPS", "25.0"),
        ("CreateArchiveWithInfo", str(out), "app", "desc"),
        ("addTimeSampling", ("TimeSampling", 1.0 / 25.0, 0.0)),
        ("OXform", "top", "root_transform", 1),
        ("OPolyMesh", "xform", "blob", 1),
        ("OBoolProperty", "meshtype"),
        ("OBoolProperty.setValue", False),
    ]
    samples = [c[1] for c in calls[7:]]
    assert [c[0] for c in calls[7:]] == ["set", "set"]
    positions, indices, counts = samples[0]
    assert positions[1] == (1.0, 0.0, 0.0)
    assert indices == [0, 1, 2, 3, 0, 2, 1]
    assert counts == [4, 3]
    assert samples[1][0][1] == (11.0, 0.0, 0.0)


def test_no_meshes_still_creates_archive(tmp_path, bindings):
    out = tmp_path / "empty.abc"
    AlembicExporter().export(out, ExportParameters(), [])
    assert [c[0] for c in bindings.calls][-1] == "OBoolProperty.setValue"
    assert out.exists()


def test_binding_failure_is_wrapped(tmp_path, bindings):
    def boom(*args):
        raise RuntimeError("disk full")

    bindings.abc.CreateArchiveWithInfo = boom
    with pytest.raises(ExportError) as ei:
        AlembicExporter().export(tmp_path / "x.abc", ExportParameters(), [])
    assert ei.value.code == E_EXPORT
    assert "disk full" in ei.value.message


@pytest.mark.parametrize("missing", ["alembic", "imath"])
def test_missing_bindings_raise_export_error(tmp_path, monkeypatch, missing):
    _Bindings().install(monkeypatch)
    monkeypatch.setitem(sys.modules, missing, None)
    out = tmp_path / "x.abc"
    with pytest.raises(ExportError) as ei:
        AlembicExporter().export(out, ExportParameters(), [_mesh(0.0)])
    assert ei.value.code == E_EXPORT
    assert ei.value.context["module"] == missing
    assert not out.exists()
