"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and format constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents hardcoded paths (e.g., "C:/Users/...") and magic
   numbers of the TGA header scattered throughout the decoders.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find the bundled sample assets when the app is frozen into an .exe.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    DEFAULT_MESH_PATH (str): Absolute path to the sample OBJ mesh.
    DEFAULT_TEXTURE_PATH (str): Absolute path to the sample TGA texture.
"""
import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: resolve relative to this file
    # config.py is in src/assetloader/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Global Constants
ASSETS_PATH: str = get_resource_path("assets")
DEFAULT_MESH_PATH: str = os.path.join(ASSETS_PATH, "cube.obj")
DEFAULT_TEXTURE_PATH: str = os.path.join(ASSETS_PATH, "tex.tga")

# TGA format (reference: http://www.paulbourke.net/dataformats/tga)
TGA_HEADER_SIZE: int = 18
TGA_HEADER_FORMAT: str = "<BBBHHBHHHHBB"
TGA_UNCOMPRESSED_TRUE_COLOR: int = 2
TGA_SUPPORTED_DEPTH: int = 24
TGA_CHANNEL_ORDER: str = "BGR"
TGA_DESCRIPTOR_TOP_ORIGIN: int = 0x20

# Default for how face indices are mapped onto the arenas ("uniform" or "legacy")
DEFAULT_INDEX_CONVENTION: str = "uniform"

if not os.path.exists(ASSETS_PATH):
    logger.warning(f"Assets path not found at {ASSETS_PATH}")
