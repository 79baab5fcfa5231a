"""Extension dispatch and ordered aggregation."""

import pytest

from meshconv.api import load_meshes
from meshconv.errors import (
    E_DIAGNOSTICS,
    E_MESH_INVARIANT,
    E_READ,
    E_UNSUPPORTED_FORMAT,
    DiagnosticsError,
    InputError,
)
from meshconv.ingest import (
    LOADERS,
    extension_of,
    ingest_file,
    ingest_files,
    loader_for,
)
from meshconv.model import Mesh, ParseResult
from meshconv.obj import load_obj
from meshconv.ply import encode_ply, load_ply


def _ply(tmp_path, name: str, n_vertices: int):
    m = Mesh()
    for i in range(n_vertices):
        m.add_vertex(float(i), 0.0, 0.0)
    m.add_face([0, 1, 2])
    path = tmp_path / name
    path.write_bytes(encode_ply(m))
    return path


def _obj(tmp_path, name: str, n_vertices: int):
    path = tmp_path / name
    path.write_text("".join(f"v {i} 1 0\n" for i in range(n_vertices)) + "f 1 2 3\n")
    return path


def test_loader_for_dispatches_on_suffix():
    assert loader_for("a.ply") is load_ply
    assert loader_for("dir.v2/a.obj") is load_obj


@pytest.mark.parametrize("name", ["model.stl", "model.PLY", "model", "model.obj.gz"])
def test_unsupported_extension(name):
    with pytest.raises(InputError) as ei:
        loader_for(name)
    assert ei.value.code == E_UNSUPPORTED_FORMAT
    assert ei.value.message == f"Unknown file type: {name}"


def test_meshes_keep_argument_order(tmp_path):
    paths = [
        _obj(tmp_path, "a.obj", 3),
        _ply(tmp_path, "b.ply", 4),
        _obj(tmp_path, "c.obj", 5),
        _ply(tmp_path, "d.ply", 6),
    ]
    results = ingest_files(paths)
    assert [r.path for r in results] == paths
    assert [r.mesh.vertex_count for r in results] == [3, 4, 5, 6]
    assert [m.vertex_count for m in load_meshes(paths)] == [3, 4, 5, 6]


def test_unsupported_file_aborts_whole_run(tmp_path):
    paths = [_obj(tmp_path, "a.obj", 3), tmp_path / "model.stl"]
    with pytest.raises(InputError) as ei:
        ingest_files(paths)
    assert ei.value.code == E_UNSUPPORTED_FORMAT


def test_missing_file_is_fatal(tmp_path):
    with pytest.raises(InputError) as ei:
        ingest_file(tmp_path / "gone.obj")
    assert ei.value.code == E_READ
    assert ei.value.filename == str(tmp_path / "gone.obj")


def test_directory_is_unreadable(tmp_path):
    d = tmp_path / "dir.ply"
    d.mkdir()
    with pytest.raises(InputError) as ei:
        ingest_file(d)
    assert ei.value.code == E_READ


def test_diagnostics_do_not_abort_by_default(tmp_path):
    path = tmp_path / "x.obj"
    path.write_text("v 0 0 0\nf 1 2 3\n")
    result = ingest_file(path)
    assert result.mesh.vertex_count == 1
    assert len(result.errors) == 1


def test_strict_mode_makes_diagnostics_fatal(tmp_path):
    path = tmp_path / "x.obj"
    path.write_text("v 0 0 0\nf 1 2 3\n")
    with pytest.raises(DiagnosticsError) as ei:
        ingest_file(path, strict=True)
    assert ei.value.code == E_DIAGNOSTICS


def test_strict_mode_ignores_informational_diagnostics(tmp_path):
    path = _ply(tmp_path, "tail.ply", 3)
    path.write_bytes(path.read_bytes() + b"\x00\x00")
    result = ingest_file(path, strict=True)
    assert result.ok
    assert len(result.diagnostics) == 1


def test_diagnostics_are_forwarded_to_reporter(tmp_path):
    from meshconv.reporting import SilentReporter, set_reporter

    rep = SilentReporter()
    set_reporter(rep)
    a = _obj(tmp_path, "a.obj", 3)
    b = tmp_path / "b.obj"
    b.write_text("v 0 0 0\nf 1 1 2\n")
    ingest_files([a, b])
    assert [str(d) for d in rep.diagnostics] == [f"{b}:2:invalid index"]


@pytest.mark.parametrize(
    "path, ext",
    [
        ("a.ply", ".ply"),
        (".ply", ".ply"),
        ("scans/.obj", ".obj"),
        ("model.obj.gz", ".gz"),
        ("dir.v2/model", ".v2/model"),
        ("model", ""),
    ],
)
def test_extension_is_text_after_last_dot(path, ext):
    assert extension_of(path) == ext


def test_bare_extension_file_name_is_ingested(tmp_path):
    path = _ply(tmp_path, ".ply", 3)
    (result,) = ingest_files([path])
    assert result.mesh.vertex_count == 3


def test_inconsistent_mesh_from_a_reader_is_fatal(tmp_path, monkeypatch):
    def broken_loader(path, on_diagnostic=None):
        mesh = Mesh()
        mesh.add_vertex(0.0, 0.0, 0.0)
        mesh.add_face([0, 1, 2])
        return ParseResult(path=path, mesh=mesh)

    monkeypatch.setitem(LOADERS, ".obj", broken_loader)
    with pytest.raises(InputError) as ei:
        ingest_file(tmp_path / "a.obj")
    assert ei.value.code == E_MESH_INVARIANT
    assert "indices out of range" in ei.value.message
