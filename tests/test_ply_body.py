"""Binary PLY body decoding and file-level loading."""

import struct

import pytest

from meshconv.errors import (
    E_PLY_HEADER,
    E_PLY_INDEX,
    E_PLY_OVERFLOW,
    E_PLY_TERMINATOR,
    E_PLY_TRUNCATED,
    BinaryFormatError,
    HeaderError,
)
from meshconv.model import SIZE_MAX, Mesh, Severity
from meshconv.ply import (
    PlyHeader,
    decode_body,
    encode_header,
    encode_ply,
    load_ply,
    parse_ply_bytes,
)

TRIANGLE = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)]


def _vertices(points) -> bytes:
    return b"".join(struct.pack("<3f", *p) for p in points)


def _face(*indices: int) -> bytes:
    return struct.pack(f"<B{len(indices)}I", len(indices), *indices)


def _triangle_mesh() -> Mesh:
    m = Mesh()
    for p in TRIANGLE:
        m.add_vertex(*p)
    m.add_face([0, 1, 2])
    return m


def test_roundtrip_single_triangle():
    data = encode_ply(_triangle_mesh())
    result = parse_ply_bytes(data, "tri.ply")
    assert result.mesh.vertices == TRIANGLE
    assert result.mesh.indices == [0, 1, 2]
    assert result.mesh.face_sizes == [3]
    assert result.diagnostics == []


def test_body_is_decoded_little_endian():
    body = bytes.fromhex("0000803f" "00000040" "00004040")  # 1.0 2.0 3.0
    mesh = decode_body(PlyHeader(vertex_count=1, face_count=0), body, "le.ply")
    assert mesh.vertices == [(1.0, 2.0, 3.0)]


def test_mixed_face_sizes():
    body = _vertices(TRIANGLE + [(1.0, 1.0, 0.0)]) + _face(0, 1, 3, 2) + _face(2, 1, 0)
    mesh = decode_body(PlyHeader(vertex_count=4, face_count=2), body, "q.ply")
    assert mesh.face_sizes == [4, 3]
    assert mesh.indices == [0, 1, 3, 2, 2, 1, 0]
    assert sum(mesh.face_sizes) == len(mesh.indices)


def test_exact_vertex_region_without_faces_has_no_diagnostics():
    n = 5
    data = encode_header(n, 0) + _vertices([(float(i), 0.0, 0.0) for i in range(n)])
    result = parse_ply_bytes(data, "points.ply")
    assert result.mesh.vertex_count == n
    assert result.mesh.face_count == 0
    assert result.mesh.indices == []
    assert result.diagnostics == []


def test_vertex_count_overflow_is_fatal():
    data = encode_header(2**63, 0) + _vertices(TRIANGLE)
    with pytest.raises(BinaryFormatError) as ei:
        parse_ply_bytes(data, "overflow.ply")
    assert ei.value.code == E_PLY_OVERFLOW
    assert ei.value.message == "Vertex count too large"


def test_largest_safe_vertex_count_is_a_truncation_not_an_overflow():
    header = PlyHeader(vertex_count=SIZE_MAX // 12, face_count=0)
    with pytest.raises(BinaryFormatError) as ei:
        decode_body(header, b"", "big.ply")
    assert ei.value.code == E_PLY_TRUNCATED


def test_short_vertex_region():
    body = _vertices(TRIANGLE[:2])
    with pytest.raises(BinaryFormatError) as ei:
        decode_body(PlyHeader(vertex_count=3, face_count=0), body, "short.ply")
    assert ei.value.code == E_PLY_TRUNCATED
    assert ei.value.message == "Expected 36 bytes of vertex data but got 24"
    assert ei.value.filename == "short.ply"


def test_missing_faces_report_how_many_were_read():
    body = _vertices(TRIANGLE) + _face(0, 1, 2)
    with pytest.raises(BinaryFormatError) as ei:
        decode_body(PlyHeader(vertex_count=3, face_count=2), body, "f.ply")
    assert ei.value.message == "Expected 2 faces but got 1"


def test_truncated_index_list():
    body = _vertices(TRIANGLE) + struct.pack("<B2I", 3, 0, 1)
    with pytest.raises(BinaryFormatError) as ei:
        decode_body(PlyHeader(vertex_count=3, face_count=1), body, "i.ply")
    assert ei.value.code == E_PLY_TRUNCATED
    assert ei.value.message == "Expected index but reached end of file"


@pytest.mark.parametrize("bad", [3, 2**31, 0xFFFFFFFF])
def test_out_of_range_index_is_fatal(bad):
    body = _vertices(TRIANGLE) + _face(0, 1, bad)
    with pytest.raises(BinaryFormatError) as ei:
        decode_body(PlyHeader(vertex_count=3, face_count=1), body, "bad.ply")
    assert ei.value.code == E_PLY_INDEX
    assert ei.value.message == f"Invalid index ({bad})"


def test_trailing_bytes_are_informational():
    data = encode_ply(_triangle_mesh()) + b"xyz"
    seen = []
    result = parse_ply_bytes(data, "tail.ply", seen.append)
    assert result.mesh.indices == [0, 1, 2]
    assert len(result.diagnostics) == 1
    diag = result.diagnostics[0]
    assert diag.severity is Severity.INFO
    assert str(diag) == "tail.ply: Extra 3 bytes at end of file"
    assert result.ok
    assert seen == result.diagnostics


def test_missing_terminator_is_fatal():
    data = b"ply\nformat binary_little_endian 1.0\nelement vertex 0\n"
    with pytest.raises(HeaderError) as ei:
        parse_ply_bytes(data, "noterm.ply")
    assert ei.value.code == E_PLY_TERMINATOR


def test_crlf_terminator_is_not_accepted():
    data = encode_header(0, 0).replace(b"\n", b"\r\n")
    with pytest.raises(HeaderError) as ei:
        parse_ply_bytes(data, "crlf.ply")
    assert ei.value.code == E_PLY_TERMINATOR


def test_header_diagnostics_are_reported_then_fatal():
    data = encode_header(3, 1).replace(b"binary_little_endian", b"binary_big_endian")
    data += _vertices(TRIANGLE) + _face(0, 1, 2)
    seen = []
    with pytest.raises(HeaderError) as ei:
        parse_ply_bytes(data, "be.ply", seen.append)
    assert ei.value.code == E_PLY_HEADER
    assert seen[0].line == 2
    assert seen[0].message == "unsupported format"


def test_load_ply_from_disk(tmp_path):
    path = tmp_path / "tri.ply"
    path.write_bytes(encode_ply(_triangle_mesh()))
    result = load_ply(path)
    assert result.path == path
    assert result.mesh.vertex_count == 3
