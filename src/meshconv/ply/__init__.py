"""Binary little-endian PLY support."""

from .header import HeaderState, PlyHeader, parse_header, find_header_end
from .body import decode_body
from .reader import load_ply, parse_ply_bytes
from .writer import encode_header, encode_ply

__all__ = [
    "HeaderState",
    "PlyHeader",
    "parse_header",
    "find_header_end",
    "decode_body",
    "load_ply",
    "parse_ply_bytes",
    "encode_header",
    "encode_ply",
]
