"""
Geometric Primitives for decoded meshes.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, TYPE_CHECKING
import numpy as np
import math

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Point2:
    """A point in 2D space, used for texture coordinates (u, v)."""
    x: float
    y: float

    @classmethod
    def from_array(cls, values: Sequence[float]) -> Point2:
        return cls(float(values[0]), float(values[1]))

    def to_array(self) -> npt.NDArray[np.float32]:
        return np.array([self.x, self.y], dtype=np.float32)

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass(frozen=True)
class Point3:
    """A point (or direction) in 3D space, used for positions and normals."""
    x: float
    y: float
    z: float

    @classmethod
    def from_array(cls, values: Sequence[float]) -> Point3:
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def to_array(self) -> npt.NDArray[np.float32]:
        return np.array([self.x, self.y, self.z], dtype=np.float32)

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)
