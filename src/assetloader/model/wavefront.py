"""
Wavefront OBJ Mesh Decoder
==========================
Reads the triangulated subset of the OBJ format into a Mesh.

The decoder makes two passes over the same (rewound) source:

1. Count pass: classify every record by keyword and count vertices (v),
   texture coordinates (vt), normals (vn) and faces (f).
2. Fill pass: allocate arenas sized exactly to those counts and fill them,
   resolving each face's index groups against the known arena sizes.

A mismatch between what the first pass predicted and what the second pass
produced is an error, never a partially built Mesh.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from enum import StrEnum
from typing import IO, Iterator, Optional, Union

import numpy as np

from assetloader.config import DEFAULT_INDEX_CONVENTION
from assetloader.model.errors import (
    AssetIOError,
    FormatError,
    InconsistentCountError,
    IndexRangeError,
    TruncationError,
)
from assetloader.model.mesh import Mesh

logger = logging.getLogger(__name__)

VERTEX = "v"
TEXCOORD = "vt"
NORMAL = "vn"
FACE = "f"
COMMENT = "#"

# Number of numeric fields consumed per record kind
RECORD_FIELDS = {
    VERTEX: 3,
    TEXCOORD: 2,
    NORMAL: 3,
}

RECORD_NAMES = {
    VERTEX: "vertex",
    TEXCOORD: "texture coordinate",
    NORMAL: "normal",
    FACE: "face",
}

FACE_CORNERS = 3


class IndexConvention(StrEnum):
    """How 1-based face indices are mapped onto 0-based arenas."""
    UNIFORM = "uniform"  # subtract one from every index kind
    LEGACY = "legacy"    # vertex indices used as-is, texcoord/normal indices minus one


@dataclass
class RecordCounts:
    """Number of records of each kind in an OBJ source."""
    vertices: int = 0
    texcoords: int = 0
    normals: int = 0
    faces: int = 0

    def increment(self, keyword: str) -> bool:
        """Count a record by keyword. Returns False for keywords that are not counted."""
        if keyword == TEXCOORD:
            self.texcoords += 1
        elif keyword == NORMAL:
            self.normals += 1
        elif keyword == VERTEX:
            self.vertices += 1
        elif keyword == FACE:
            self.faces += 1
        else:
            return False
        return True

    def get(self, keyword: str) -> int:
        return {
            VERTEX: self.vertices,
            TEXCOORD: self.texcoords,
            NORMAL: self.normals,
            FACE: self.faces,
        }[keyword]


Source = Union[IO[bytes], IO[str]]


def _records(source: Source, name: Optional[str]) -> Iterator[tuple[int, str, list[str]]]:
    """
    Yield (line number, keyword, fields) for every non-empty record.

    Lines may end in '\\n', '\\r\\n' or a bare '\\r'. A leading byte order mark is dropped.
    """
    data = source.read()
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            line_no = len((data[:e.start].decode("utf-8-sig") + " ").splitlines())
            raise FormatError(f"Source is not valid text: {e}", source=name, line=line_no) from e
    else:
        data = data.removeprefix("\ufeff")

    for line_no, raw in enumerate(data.splitlines(), start=1):
        tokens = raw.split(COMMENT, 1)[0].split()
        if not tokens:
            continue
        yield line_no, tokens[0], tokens[1:]


def count_records(source: Source, name: Optional[str] = None) -> RecordCounts:
    """First pass: count the records of each kind without storing them."""
    counts = RecordCounts()
    ignored: set[str] = set()

    for _, keyword, _ in _records(source, name):
        if not counts.increment(keyword) and keyword not in ignored:
            ignored.add(keyword)
            logger.debug(f"Ignoring unsupported '{keyword}' statements.")

    return counts


class _ArenaBuilder:
    """
    Second pass state: fixed-size arenas plus a fill cursor per record kind.
    """
    def __init__(self, counts: RecordCounts, convention: IndexConvention, name: Optional[str]) -> None:
        self.counts = counts
        self.convention = convention
        self.name = name
        self.filled = RecordCounts()

        # Face layout is decided by the whole file, not by what was read so far
        self.textured = counts.texcoords > 0

        self.positions = np.empty((counts.vertices, 3), dtype=np.float32)
        self.texcoords = np.empty((counts.texcoords, 2), dtype=np.float32)
        self.normals = np.empty((counts.normals, 3), dtype=np.float32)

        self.face_positions = np.empty((counts.faces, FACE_CORNERS), dtype=np.int64)
        self.face_normals = np.empty((counts.faces, FACE_CORNERS), dtype=np.int64)
        self.face_texcoords = (
            np.empty((counts.faces, FACE_CORNERS), dtype=np.int64) if self.textured else None
        )

    # --- Record handling ---

    def add(self, keyword: str, values: list[str], line_no: int) -> None:
        if keyword == FACE:
            self._add_face(values, line_no)
            return

        arena = {VERTEX: self.positions, TEXCOORD: self.texcoords, NORMAL: self.normals}.get(keyword)
        if arena is None:
            return

        slot = self._claim(keyword, line_no)
        arena[slot] = self._parse_floats(keyword, values, line_no)

    def _claim(self, keyword: str, line_no: int) -> int:
        """Reserve the next arena slot for a record kind."""
        slot = self.filled.get(keyword)
        if slot >= self.counts.get(keyword):
            raise InconsistentCountError(
                f"More {RECORD_NAMES[keyword]} records than the {self.counts.get(keyword)} counted "
                f"in the first pass.",
                source=self.name,
                line=line_no,
            )
        self.filled.increment(keyword)
        return slot

    def _parse_floats(self, keyword: str, values: list[str], line_no: int) -> list[float]:
        required = RECORD_FIELDS[keyword]
        if len(values) < required:
            raise TruncationError(
                f"Expected {required} numeric fields for a {RECORD_NAMES[keyword]}, got {len(values)}.",
                source=self.name,
                line=line_no,
            )
        try:
            return [float(v) for v in values[:required]]
        except ValueError as e:
            raise FormatError(
                f"Malformed {RECORD_NAMES[keyword]} record: {e}", source=self.name, line=line_no
            ) from e

    def _add_face(self, groups: list[str], line_no: int) -> None:
        if len(groups) < FACE_CORNERS:
            raise TruncationError(
                f"Expected {FACE_CORNERS} index groups for a face, got {len(groups)}.",
                source=self.name,
                line=line_no,
            )
        if len(groups) > FACE_CORNERS:
            raise FormatError(
                f"Only triangulated faces are supported, got a face with {len(groups)} vertices.",
                source=self.name,
                line=line_no,
            )

        corners = [self._parse_group(group, line_no) for group in groups]

        slot = self._claim(FACE, line_no)
        for corner, (v, t, n) in enumerate(corners):
            self.face_positions[slot, corner] = v
            self.face_normals[slot, corner] = n
            if self.face_texcoords is not None:
                self.face_texcoords[slot, corner] = t

    def _parse_group(self, group: str, line_no: int) -> tuple[int, Optional[int], int]:
        """
        Parse one 'v/t/n' (textured) or 'v//n' (untextured) group into arena indices.
        """
        layout = "v/t/n" if self.textured else "v//n"
        parts = group.split("/")
        if len(parts) > 3:
            raise FormatError(f"Malformed face group '{group}', expected {layout}.", source=self.name, line=line_no)

        parts += [""] * (3 - len(parts))
        v_raw, t_raw, n_raw = parts
        if not v_raw or not n_raw or (self.textured and not t_raw):
            raise TruncationError(
                f"Face group '{group}' is missing an index, expected {layout}.",
                source=self.name,
                line=line_no,
            )

        vertex_offset = 0 if self.convention == IndexConvention.LEGACY else 1
        v = self._resolve(v_raw, VERTEX, vertex_offset, line_no)
        t = self._resolve(t_raw, TEXCOORD, 1, line_no) if t_raw else None
        n = self._resolve(n_raw, NORMAL, 1, line_no)
        return v, t, n

    def _resolve(self, raw: str, keyword: str, offset: int, line_no: int) -> int:
        """Convert a source index to an arena index and check that it is in range."""
        try:
            value = int(raw, 10)
        except ValueError as e:
            raise FormatError(
                f"Malformed {RECORD_NAMES[keyword]} index '{raw}'.", source=self.name, line=line_no
            ) from e

        count = self.counts.get(keyword)
        index = value - offset
        if not 0 <= index < count:
            if count == 0:
                detail = f"the file has no {RECORD_NAMES[keyword]} records"
            else:
                detail = f"valid range is [{offset}, {count - 1 + offset}]"
            raise IndexRangeError(
                f"{RECORD_NAMES[keyword].capitalize()} index {value} is out of range: {detail}.",
                source=self.name,
                line=line_no,
            )
        return index

    # --- Completion ---

    def verify(self) -> None:
        for kind in fields(RecordCounts):
            expected = getattr(self.counts, kind.name)
            actual = getattr(self.filled, kind.name)
            if expected != actual:
                raise InconsistentCountError(
                    f"Error reading {kind.name}: counted {expected}, read {actual}.",
                    source=self.name,
                )

        for label, arena in (("vertex", self.positions), ("texture coordinate", self.texcoords),
                             ("normal", self.normals)):
            if not np.isfinite(arena).all():
                row = int(np.argwhere(~np.isfinite(arena))[0][0])
                raise FormatError(f"Non-finite value in {label} {row + 1}.", source=self.name)

    def build(self) -> Mesh:
        self.verify()
        return Mesh(
            positions=self.positions,
            normals=self.normals,
            face_positions=self.face_positions,
            face_normals=self.face_normals,
            texcoords=self.texcoords,
            face_texcoords=self.face_texcoords,
            name=self.name,
        )


def decode_mesh(
    source: Source,
    index_convention: Union[IndexConvention, str] = DEFAULT_INDEX_CONVENTION,
    name: Optional[str] = None,
) -> Mesh:
    """
    Decode a triangulated OBJ mesh.

    Args:
        source: Seekable stream (binary or text) positioned at the start of the file.
        index_convention: Mapping of 1-based face indices onto the arenas.
        name: Label used in error messages and logs (usually the file path).

    Returns:
        The decoded Mesh. It is textured iff the file has at least one 'vt' record.

    Raises:
        TruncationError: A record has fewer fields than its kind requires.
        FormatError: A field does not parse, a face is not a triangle, or a value is not finite.
        IndexRangeError: A face references a record that does not exist.
        InconsistentCountError: The two passes disagree on the number of records.
        AssetIOError: The stream could not be read or rewound.
    """
    name = name or getattr(source, "name", None)
    convention = IndexConvention(index_convention)

    try:
        counts = count_records(source, name)
        logger.debug(
            f"Counted {counts.vertices} vertices, {counts.texcoords} texture coordinates, "
            f"{counts.normals} normals, {counts.faces} faces."
        )

        source.seek(0)
        builder = _ArenaBuilder(counts, convention, name)
        for line_no, keyword, values in _records(source, name):
            builder.add(keyword, values, line_no)
    except OSError as e:
        raise AssetIOError(f"Could not read mesh: {e}", source=name) from e

    return builder.build()
