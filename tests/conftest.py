from __future__ import annotations

import io
import struct
from typing import Callable

import pytest

MINIMAL_OBJ = (
    "v 0 0 0\n"
    "v 1 0 0\n"
    "v 0 1 0\n"
    "vn 0 0 1\n"
    "f 1//1 2//1 3//1\n"
)

TEXTURED_OBJ = (
    "# textured quad\n"
    "v 0 0 0\n"
    "v 1 0 0\n"
    "v 1 1 0\n"
    "v 0 1 0\n"
    "vt 0 0\n"
    "vt 1 0\n"
    "vt 1 1\n"
    "vt 0 1\n"
    "vn 0 0 1\n"
    "f 1/1/1 2/2/1 3/3/1\n"
    "f 1/1/1 3/3/1 4/4/1\n"
)


def tga_header(
    width: int = 2,
    height: int = 1,
    bits_per_pixel: int = 24,
    data_type: int = 2,
    id_length: int = 0,
    color_map_type: int = 0,
    color_map_origin: int = 0,
    color_map_length: int = 0,
    color_map_depth: int = 0,
    descriptor: int = 0,
) -> bytes:
    return struct.pack(
        "<BBBHHBHHHHBB",
        id_length, color_map_type, data_type,
        color_map_origin, color_map_length, color_map_depth,
        0, 0, width, height, bits_per_pixel, descriptor,
    )


@pytest.fixture
def obj_source() -> Callable[[str], io.BytesIO]:
    def _make(text: str) -> io.BytesIO:
        return io.BytesIO(text.encode("utf-8"))
    return _make


@pytest.fixture
def make_tga() -> Callable[..., bytes]:
    return tga_header


@pytest.fixture
def asset_files(tmp_path):
    """A textured OBJ, an untextured OBJ and a 2x2 TGA on disk."""
    textured = tmp_path / "quad.obj"
    textured.write_text(TEXTURED_OBJ)

    untextured = tmp_path / "tri.obj"
    untextured.write_text(MINIMAL_OBJ)

    texture = tmp_path / "tex.tga"
    texture.write_bytes(tga_header(width=2, height=2) + bytes(range(12)))

    return {"textured": textured, "untextured": untextured, "texture": texture}
