"""
Model (Mesh + Texture)
======================
The assembled output handed to a renderer: a decoded mesh and, optionally,
the image it is textured with.
"""
from __future__ import annotations

import logging
from typing import Optional

from assetloader.model.errors import PairingWarning
from assetloader.model.mesh import Mesh
from assetloader.model.targa import RasterImage

logger = logging.getLogger(__name__)


class Model:
    """
    A Mesh paired with an optional RasterImage.

    Built from a decoded mesh. attach_texture is the only mutator and pairs
    at most one image.
    """
    def __init__(self, mesh: Mesh) -> None:
        self._mesh = mesh
        self._texture: Optional[RasterImage] = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(mesh={self._mesh!r}, texture={self._texture!r})"

    @property
    def mesh(self) -> Mesh:
        return self._mesh

    @property
    def texture(self) -> Optional[RasterImage]:
        return self._texture

    @property
    def textured(self) -> bool:
        """True if the model will be drawn with a texture."""
        return self._texture is not None

    def attach_texture(self, image: Optional[RasterImage]) -> None:
        """
        Pair the mesh with an image.

        Raises:
            PairingWarning: No image was given, the mesh has no texture
                coordinates, or a texture is already attached. The model is
                left unchanged.
        """
        if self._texture is not None:
            raise PairingWarning("A texture is already attached.", source=self._mesh.name)
        if image is None:
            raise PairingWarning("No texture to attach.", source=self._mesh.name)
        if not self._mesh.textured:
            raise PairingWarning(
                "Mesh has no texture coordinates, it cannot be textured.", source=self._mesh.name
            )

        self._texture = image
        logger.debug(f"Attached {image.width}x{image.height} texture to mesh.")


def attach_texture(model: Model, image: Optional[RasterImage]) -> None:
    """Pair a model's mesh with an image. See Model.attach_texture."""
    model.attach_texture(image)
