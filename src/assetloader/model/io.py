"""
Input Manager
Opens asset files from disk and hands them to the decoders.
"""
from __future__ import annotations

import logging
import os
from typing import Optional, Union

from assetloader.config import DEFAULT_INDEX_CONVENTION
from assetloader.model.errors import AssetError, AssetIOError, PairingWarning
from assetloader.model.mesh import Mesh
from assetloader.model.scene import Model
from assetloader.model.targa import RasterImage, decode_image
from assetloader.model.wavefront import IndexConvention, decode_mesh

# Get module logger
logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class IOManager:
    @staticmethod
    def load_mesh(
        filepath: PathLike,
        index_convention: Union[IndexConvention, str] = DEFAULT_INDEX_CONVENTION,
    ) -> Mesh:
        filepath = os.fspath(filepath)
        logger.info(f"Loading mesh from: {filepath}")
        try:
            with open(filepath, "rb") as f:
                mesh = decode_mesh(f, index_convention=index_convention, name=filepath)
        except OSError as e:
            logger.error(f"Could not open {filepath}: {e}")
            raise AssetIOError(f"Could not open mesh file: {e.strerror or e}", source=filepath) from e
        except AssetError as e:
            logger.error(f"Failed to load mesh: {e}")
            raise

        logger.info(f"Mesh loaded: {mesh.triangle_count} triangles, textured={mesh.textured}.")
        return mesh

    @staticmethod
    def load_image(filepath: PathLike) -> RasterImage:
        filepath = os.fspath(filepath)
        logger.info(f"Loading texture from: {filepath}")
        try:
            with open(filepath, "rb") as f:
                image = decode_image(f, name=filepath)
        except OSError as e:
            logger.error(f"Could not open {filepath}: {e}")
            raise AssetIOError(f"Could not open texture file: {e.strerror or e}", source=filepath) from e
        except AssetError as e:
            logger.error(f"Failed to load texture: {e}")
            raise

        logger.info(f"Texture loaded: {image.width}x{image.height}, {image.bits_per_pixel} bpp.")
        return image

    @staticmethod
    def load_model(
        mesh_path: PathLike,
        texture_path: Optional[PathLike] = None,
        index_convention: Union[IndexConvention, str] = DEFAULT_INDEX_CONVENTION,
    ) -> Model:
        """
        Decode a mesh and (optionally) a texture and pair them.

        A decoding failure of either file propagates. A failed pairing is only
        logged: the returned model is then untextured.
        """
        mesh = IOManager.load_mesh(mesh_path, index_convention=index_convention)
        image = IOManager.load_image(texture_path) if texture_path is not None else None

        model = Model(mesh)
        try:
            model.attach_texture(image)
        except PairingWarning as w:
            logger.warning(f"Rendering untextured: {w}")

        return model
