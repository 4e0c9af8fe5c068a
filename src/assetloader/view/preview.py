"""
PyVista Preview
Converts a decoded Model into PyVista objects and shows it in a plotter.

This is a consumer of the decoded data: it reads triangles in stored order,
reads texture coordinates only for textured meshes, and reorders the BGR
pixels into the RGB layout VTK expects.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np
import pyvista as pv

if TYPE_CHECKING:
    from assetloader.model.scene import Model
    from assetloader.model.targa import RasterImage

logger = logging.getLogger(__name__)


@dataclass
class RenderContext:
    """Camera and window state for one preview window."""
    x_rotation: float = 0.0  # degrees
    y_rotation: float = 0.0  # degrees
    window_width: int = 640
    window_height: int = 480
    view_area_scale: float = 1.0


def build_polydata(model: Model) -> pv.PolyData:
    """
    Build an un-welded triangle soup: three points per triangle, so that
    per-corner normals and texture coordinates map one-to-one onto points.
    """
    mesh = model.mesh
    n_tri = mesh.triangle_count

    points = mesh.corner_positions().reshape(-1, 3)
    corner_ids = np.arange(3 * n_tri, dtype=np.int64).reshape(n_tri, 3)
    faces = np.hstack([np.full((n_tri, 1), 3, dtype=np.int64), corner_ids]).ravel()

    poly = pv.PolyData(points, faces=faces)
    poly.point_data.active_normals = mesh.corner_normals().reshape(-1, 3)

    if mesh.textured:
        poly.active_texture_coordinates = mesh.corner_texcoords().reshape(-1, 2)

    logger.debug(f"Built PolyData with {poly.n_points} points and {poly.n_cells} cells.")
    return poly


def build_texture(image: RasterImage) -> pv.Texture:
    """Convert a decoded BGR image into a VTK texture (RGB, top row first)."""
    rgb = image.as_array()[..., ::-1]
    if not image.origin_at_top:
        rgb = rgb[::-1]
    return pv.Texture(np.ascontiguousarray(rgb))


def view_extent(model: Model) -> float:
    """Half the largest side of the mesh bounding box, 1.0 for an empty or single-point mesh."""
    if len(model.mesh.positions) == 0:
        return 1.0
    low, high = model.mesh.bounds()
    extent = float((high - low).max()) / 2.0
    return extent if extent > 0.0 else 1.0


def show_model(model: Model, context: Optional[RenderContext] = None) -> None:
    """Open an interactive window showing the model."""
    context = context or RenderContext()

    poly = build_polydata(model)
    texture = build_texture(model.texture) if model.textured else None

    plotter = pv.Plotter(window_size=(context.window_width, context.window_height))
    plotter.set_background("black")
    plotter.add_mesh(poly, texture=texture, color=None if texture else "white", smooth_shading=True)

    plotter.camera.elevation = context.x_rotation
    plotter.camera.azimuth = context.y_rotation
    plotter.enable_parallel_projection()
    plotter.camera.parallel_scale = view_extent(model) * context.view_area_scale

    plotter.show()
