"""
Triangle Mesh
=============
Decoded triangulated surface: positions, normals, optional texture
coordinates and the face list that stitches them together.

Geometry lives in three arenas (contiguous float32 arrays owned by the Mesh).
Faces are stored as (F, 3) index arrays into those arenas; a Triangle is a
lightweight view holding the three index triples of one face.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

import numpy as np

from assetloader.model.errors import IndexRangeError
from assetloader.model.geometry_primitives import Point2, Point3

if TYPE_CHECKING:
    import numpy.typing as npt

IndexTriple = tuple[int, int, int]


@dataclass(frozen=True)
class Triangle:
    """
    Triangle consisting of vertices, UV coordinates, and normal vectors.
    All values are 0-based indices into the owning Mesh's arenas.
    """
    positions: IndexTriple
    normals: IndexTriple
    texcoords: Optional[IndexTriple] = None


@dataclass(frozen=True)
class ResolvedTriangle:
    """Concrete corner values of a Triangle."""
    positions: tuple[Point3, Point3, Point3]
    normals: tuple[Point3, Point3, Point3]
    texcoords: Optional[tuple[Point2, Point2, Point2]] = None


def _frozen(array: npt.ArrayLike, dtype: type, columns: int) -> npt.NDArray:
    arr = np.asarray(array, dtype=dtype).reshape(-1, columns)
    arr.flags.writeable = False
    return arr


class Mesh:
    def __init__(
        self,
        positions: npt.ArrayLike,
        normals: npt.ArrayLike,
        face_positions: npt.ArrayLike,
        face_normals: npt.ArrayLike,
        texcoords: Optional[npt.ArrayLike] = None,
        face_texcoords: Optional[npt.ArrayLike] = None,
        name: Optional[str] = None,
    ) -> None:
        """
        Initialize the mesh from its arenas and face index arrays.

        Args:
            positions: (V, 3) vertex positions.
            normals: (N, 3) normal vectors.
            face_positions: (F, 3) 0-based indices into positions.
            face_normals: (F, 3) 0-based indices into normals.
            texcoords: (T, 2) texture coordinates. A mesh is textured iff T > 0.
            face_texcoords: (F, 3) 0-based indices into texcoords; required iff textured.
            name: Label of the source, used in error messages.

        Raises:
            IndexRangeError: A face index does not point into its arena.
            ValueError: Texcoord indices present on an untextured mesh or missing on a textured one.
        """
        self.name = name
        self.positions = _frozen(positions, np.float32, 3)
        self.normals = _frozen(normals, np.float32, 3)
        self.texcoords = _frozen(texcoords if texcoords is not None else [], np.float32, 2)

        self.face_positions = _frozen(face_positions, np.int64, 3)
        self.face_normals = _frozen(face_normals, np.int64, 3)
        self.face_texcoords = (
            _frozen(face_texcoords, np.int64, 3) if face_texcoords is not None else None
        )

        if self.textured and self.face_texcoords is None:
            raise ValueError("Textured mesh requires texcoord indices for every face.")
        if not self.textured and self.face_texcoords is not None:
            raise ValueError("Untextured mesh cannot carry texcoord indices.")

        if len(self.face_normals) != len(self.face_positions) or (
            self.face_texcoords is not None and len(self.face_texcoords) != len(self.face_positions)
        ):
            raise ValueError("Face index arrays must have the same length.")

        self._check_indices(self.face_positions, len(self.positions), "vertex")
        self._check_indices(self.face_normals, len(self.normals), "normal")
        if self.face_texcoords is not None:
            self._check_indices(self.face_texcoords, len(self.texcoords), "texture coordinate")

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(triangles={self.triangle_count}, "
            f"vertices={len(self.positions)}, normals={len(self.normals)}, "
            f"texcoords={len(self.texcoords)}, textured={self.textured})"
        )

    def _check_indices(self, indices: npt.NDArray[np.int64], count: int, kind: str) -> None:
        if indices.size == 0:
            return
        bad = (indices < 0) | (indices >= count)
        if bad.any():
            face = int(np.argwhere(bad)[0][0])
            raise IndexRangeError(
                f"Face {face} references {kind} index {int(indices[bad][0])} "
                f"outside of [0, {count - 1}].",
                source=self.name,
            )

    @property
    def textured(self) -> bool:
        """True if the mesh has texture coordinates (mesh-global, not per triangle)."""
        return len(self.texcoords) > 0

    @property
    def triangle_count(self) -> int:
        return len(self.face_positions)

    @property
    def triangles(self) -> list[Triangle]:
        """Triangles in stored (source) order."""
        if self.face_texcoords is None:
            return [
                Triangle(positions=tuple(v), normals=tuple(n))
                for v, n in zip(self.face_positions.tolist(), self.face_normals.tolist())
            ]
        return [
            Triangle(positions=tuple(v), normals=tuple(n), texcoords=tuple(t))
            for v, n, t in zip(
                self.face_positions.tolist(),
                self.face_normals.tolist(),
                self.face_texcoords.tolist(),
            )
        ]

    def resolve(self, triangle: Triangle) -> ResolvedTriangle:
        """Look up the corner values a triangle references."""
        positions = tuple(Point3.from_array(self.positions[i]) for i in triangle.positions)
        normals = tuple(Point3.from_array(self.normals[i]) for i in triangle.normals)
        texcoords = None
        if triangle.texcoords is not None:
            texcoords = tuple(Point2.from_array(self.texcoords[i]) for i in triangle.texcoords)
        return ResolvedTriangle(positions=positions, normals=normals, texcoords=texcoords)

    # --- Vectorized gathers for renderers ---

    def corner_positions(self) -> npt.NDArray[np.float32]:
        """(F, 3, 3) array of triangle corner positions."""
        return self.positions[self.face_positions]

    def corner_normals(self) -> npt.NDArray[np.float32]:
        """(F, 3, 3) array of triangle corner normals."""
        return self.normals[self.face_normals]

    def corner_texcoords(self) -> Optional[npt.NDArray[np.float32]]:
        """(F, 3, 2) array of triangle corner texture coordinates, None if untextured."""
        if self.face_texcoords is None:
            return None
        return self.texcoords[self.face_texcoords]

    def bounds(self) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32]]:
        """Axis-aligned bounding box (min, max) of the vertex positions."""
        if len(self.positions) == 0:
            raise ValueError("Mesh has no vertices.")
        return self.positions.min(axis=0), self.positions.max(axis=0)
