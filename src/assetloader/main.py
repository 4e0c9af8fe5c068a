"""
Application Initialization
==========================
This module wires the command line to the decoders and the preview window.

Why is this file needed?
------------------------
It acts as the root of the application. It:
1. Parses the command line (file paths, index convention, preview options).
2. Sets up logging.
3. Loads the mesh and texture into a Model.
4. Prints a summary and optionally hands the Model to the preview window.
"""
import argparse
import logging
import sys
from typing import Optional, Sequence

from assetloader.config import DEFAULT_MESH_PATH, DEFAULT_TEXTURE_PATH
from assetloader.logging_config import setup_logging
from assetloader.model.errors import AssetError
from assetloader.model.io import IOManager
from assetloader.model.scene import Model
from assetloader.model.wavefront import IndexConvention

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assetloader",
        description="Decode a Wavefront OBJ mesh and a TGA texture.",
    )
    parser.add_argument("mesh", nargs="?", default=DEFAULT_MESH_PATH, help="OBJ file (default: bundled cube.obj)")
    parser.add_argument("texture", nargs="?", default=DEFAULT_TEXTURE_PATH, help="TGA file (default: bundled tex.tga)")
    parser.add_argument(
        "--legacy-indices",
        action="store_true",
        help="use vertex indices unconverted, as the legacy viewer did",
    )
    parser.add_argument("--preview", action="store_true", help="show the model in a PyVista window")
    parser.add_argument("--scale", type=float, default=1.0, help="view area scale for the preview")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--log-file", default=None, help="also write the log to this file")
    return parser


def summarize(model: Model) -> str:
    mesh = model.mesh
    lines = [
        f"Triangles:           {mesh.triangle_count}",
        f"Vertices:            {len(mesh.positions)}",
        f"Texture coordinates: {len(mesh.texcoords)}",
        f"Normals:             {len(mesh.normals)}",
        f"Textured mesh:       {'yes' if mesh.textured else 'no'}",
    ]
    if model.texture is not None:
        image = model.texture
        lines.append(f"Texture:             {image.width}x{image.height} {image.channel_order}")
    else:
        lines.append("Texture:             none")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    # 2. Load the assets
    convention = IndexConvention.LEGACY if args.legacy_indices else IndexConvention.UNIFORM
    try:
        model = IOManager.load_model(args.mesh, args.texture, index_convention=convention)
    except AssetError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    # 3. Report
    print(summarize(model))

    # 4. Preview (imported lazily, opening a window needs a display)
    if args.preview:
        from assetloader.view.preview import RenderContext, show_model
        show_model(model, RenderContext(view_area_scale=args.scale))

    return 0


if __name__ == "__main__":
    sys.exit(main())
