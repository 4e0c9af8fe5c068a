import io

import numpy as np
import pytest

from assetloader.model.errors import (
    FormatError,
    InconsistentCountError,
    IndexRangeError,
    MeshError,
    TruncationError,
)
from assetloader.model.geometry_primitives import Point3
from assetloader.model.wavefront import IndexConvention, RecordCounts, count_records, decode_mesh

from conftest import MINIMAL_OBJ, TEXTURED_OBJ


def test_minimal_untextured_triangle(obj_source):
    mesh = decode_mesh(obj_source(MINIMAL_OBJ))

    assert mesh.triangle_count == 1
    assert mesh.textured is False

    (triangle,) = mesh.triangles
    assert triangle.texcoords is None

    resolved = mesh.resolve(triangle)
    assert resolved.positions == (Point3(0, 0, 0), Point3(1, 0, 0), Point3(0, 1, 0))
    assert resolved.normals == (Point3(0, 0, 1),) * 3
    assert resolved.texcoords is None


def test_textured_quad(obj_source):
    mesh = decode_mesh(obj_source(TEXTURED_OBJ))

    assert mesh.textured is True
    assert mesh.triangle_count == 2
    assert all(t.texcoords is not None for t in mesh.triangles)
    assert mesh.triangles[1].positions == (0, 2, 3)
    assert mesh.triangles[1].texcoords == (0, 2, 3)
    np.testing.assert_array_equal(mesh.corner_texcoords()[1, 1], [1.0, 1.0])


def test_counts_match_records(obj_source):
    counts = count_records(obj_source(TEXTURED_OBJ))
    assert counts == RecordCounts(vertices=4, texcoords=4, normals=1, faces=2)


def test_arenas_are_sized_exactly(obj_source):
    mesh = decode_mesh(obj_source(TEXTURED_OBJ))
    assert mesh.positions.shape == (4, 3)
    assert mesh.texcoords.shape == (4, 2)
    assert mesh.normals.shape == (1, 3)
    assert mesh.positions.dtype == np.float32


def test_arenas_are_read_only(obj_source):
    mesh = decode_mesh(obj_source(MINIMAL_OBJ))
    with pytest.raises(ValueError):
        mesh.positions[0, 0] = 5.0


def test_texture_coordinates_after_faces_still_textured(obj_source):
    text = (
        "v 0 0 0\nv 1 0 0\nv 0 1 0\nvn 0 0 1\n"
        "f 1/1/1 2/2/1 3/3/1\n"
        "vt 0 0\nvt 1 0\nvt 0 1\n"
    )
    mesh = decode_mesh(obj_source(text))
    assert mesh.textured is True
    assert mesh.triangles[0].texcoords == (0, 1, 2)


def test_comments_and_other_statements_are_ignored(obj_source):
    text = (
        "# header comment\n"
        "mtllib cube.mtl\n"
        "o first\n"
        "g faces\n"
        "v 0 0 0 # trailing comment\n"
        "v 1 0 0\n"
        "v 0 1 0\n"
        "vn 0 0 1\n"
        "usemtl default\n"
        "s off\n"
        "f 1//1 2//1 3//1\n"
    )
    mesh = decode_mesh(obj_source(text))
    assert mesh.triangle_count == 1
    assert len(mesh.positions) == 3


def test_optional_w_component_is_ignored(obj_source):
    text = "v 0 0 0 1\nv 1 0 0 1\nv 0 1 0 1\nvn 0 0 1\nf 1//1 2//1 3//1\n"
    mesh = decode_mesh(obj_source(text))
    np.testing.assert_array_equal(mesh.positions[1], [1.0, 0.0, 0.0])


def test_text_stream_is_accepted():
    mesh = decode_mesh(io.StringIO(MINIMAL_OBJ))
    assert mesh.triangle_count == 1


@pytest.mark.parametrize("newline", ["\r", "\r\n"])
def test_line_endings(obj_source, newline):
    mesh = decode_mesh(obj_source(TEXTURED_OBJ.replace("\n", newline)))
    assert mesh.triangle_count == 2
    assert mesh.textured
    assert mesh.positions.shape == (4, 3)


def test_line_numbers_with_carriage_returns(obj_source):
    with pytest.raises(TruncationError) as exc:
        decode_mesh(obj_source("vn 0 0 1\rv 0 0\r"))
    assert exc.value.line == 2


def test_byte_order_mark_is_skipped():
    mesh = decode_mesh(io.BytesIO(b"\xef\xbb\xbf" + MINIMAL_OBJ.encode()))
    assert mesh.triangle_count == 1
    assert mesh.positions.shape == (3, 3)

    mesh = decode_mesh(io.StringIO("\ufeff" + MINIMAL_OBJ))
    assert mesh.positions.shape == (3, 3)


def test_invalid_utf8_is_format_error():
    with pytest.raises(FormatError) as exc:
        decode_mesh(io.BytesIO(b"v 0 0 0\nv \xff 0 0\n"))
    assert exc.value.line == 2


@pytest.mark.parametrize(
    "face",
    [
        "f 1//1 2//1 3//",
        "f 1//1 2//1 //1",
        "f 1//1 2//1 3",
        "f 1//1 2//1",
        "f 1//1",
        "f",
    ],
)
def test_truncated_face_is_rejected(obj_source, face):
    text = MINIMAL_OBJ.replace("f 1//1 2//1 3//1", face)
    with pytest.raises(TruncationError):
        decode_mesh(obj_source(text))


def test_missing_texcoord_in_textured_mesh_is_truncation(obj_source):
    text = TEXTURED_OBJ.replace("f 1/1/1 3/3/1 4/4/1", "f 1/1/1 3//1 4/4/1")
    with pytest.raises(TruncationError):
        decode_mesh(obj_source(text))


def test_truncated_vertex_at_end_of_input(obj_source):
    with pytest.raises(TruncationError) as exc:
        decode_mesh(obj_source("vn 0 0 1\nv 0 0"))
    assert exc.value.line == 2


@pytest.mark.parametrize(
    "face",
    ["f 1//1 2//1 4//1", "f 0//1 2//1 3//1", "f 1//1 2//1 3//2", "f -1//1 2//1 3//1"],
)
def test_index_out_of_range(obj_source, face):
    text = MINIMAL_OBJ.replace("f 1//1 2//1 3//1", face)
    with pytest.raises(IndexRangeError):
        decode_mesh(obj_source(text))


def test_texcoord_index_without_texcoord_records(obj_source):
    text = MINIMAL_OBJ.replace("f 1//1 2//1 3//1", "f 1/1/1 2/1/1 3/1/1")
    with pytest.raises(IndexRangeError, match="no texture coordinate records"):
        decode_mesh(obj_source(text))


def test_quad_face_is_not_supported(obj_source):
    text = "v 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nvn 0 0 1\nf 1//1 2//1 3//1 4//1\n"
    with pytest.raises(FormatError, match="triangulated"):
        decode_mesh(obj_source(text))


def test_malformed_number(obj_source):
    with pytest.raises(FormatError) as exc:
        decode_mesh(obj_source("v 0 zero 0\n"))
    assert exc.value.line == 1


def test_non_finite_coordinate(obj_source):
    text = MINIMAL_OBJ.replace("v 1 0 0", "v nan 0 0")
    with pytest.raises(FormatError, match="Non-finite"):
        decode_mesh(obj_source(text))


def test_errors_carry_source_name(obj_source):
    with pytest.raises(MeshError) as exc:
        decode_mesh(obj_source("v 0 0\n"), name="broken.obj")
    assert "broken.obj:1" in str(exc.value)


class _ChangingSource(io.BytesIO):
    """A stream whose content is replaced on the first rewind."""

    def __init__(self, first: str, second: str) -> None:
        super().__init__(first.encode())
        self._second = second.encode()

    def seek(self, pos, whence=0):
        if self._second is not None:
            super().seek(0)
            self.truncate(0)
            self.write(self._second)
            self._second = None
        return super().seek(pos, whence)


def test_source_growing_between_passes():
    source = _ChangingSource(MINIMAL_OBJ, MINIMAL_OBJ + "v 1 1 1\n")
    with pytest.raises(InconsistentCountError):
        decode_mesh(source)


def test_source_shrinking_between_passes():
    source = _ChangingSource(MINIMAL_OBJ + "vn 0 1 0\n", MINIMAL_OBJ)
    with pytest.raises(InconsistentCountError, match="normals"):
        decode_mesh(source)


def test_legacy_indices_use_vertex_index_unconverted(obj_source):
    text = "v 0 0 0\nv 1 0 0\nv 0 1 0\nv 5 5 5\nvn 0 0 1\nf 1//1 2//1 3//1\n"
    uniform = decode_mesh(obj_source(text))
    legacy = decode_mesh(obj_source(text), index_convention=IndexConvention.LEGACY)

    assert uniform.triangles[0].positions == (0, 1, 2)
    assert legacy.triangles[0].positions == (1, 2, 3)
    assert legacy.triangles[0].normals == (0, 0, 0)


def test_legacy_indices_reject_highest_vertex(obj_source):
    with pytest.raises(IndexRangeError):
        decode_mesh(obj_source(MINIMAL_OBJ), index_convention="legacy")


def test_triangle_count_equals_face_lines(obj_source):
    faces = "".join("f 1//1 2//1 3//1\n" for _ in range(7))
    mesh = decode_mesh(obj_source(MINIMAL_OBJ + faces))
    assert mesh.triangle_count == 8
    assert mesh.corner_positions().shape == (8, 3, 3)
