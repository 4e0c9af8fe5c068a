"""
Error Taxonomy
==============
Every failure raised by the decoders derives from AssetError.

MeshError and ImageError group the failures by decoder so callers can catch
"anything that went wrong with this mesh" without listing the concrete kinds.
The kinds shared by both decoders (I/O, format, truncation) inherit from both.
"""
from __future__ import annotations

from typing import Optional


class AssetError(Exception):
    """Base class for all asset loading errors."""

    def __init__(self, message: str, source: Optional[str] = None, line: Optional[int] = None) -> None:
        self.message = message
        self.source = source
        self.line = line
        super().__init__(self._format())

    def _format(self) -> str:
        location = self.source or "<stream>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.message}"


class MeshError(AssetError):
    """Failure while decoding a mesh."""


class ImageError(AssetError):
    """Failure while decoding an image."""


class AssetIOError(MeshError, ImageError):
    """The source could not be opened or read."""


class FormatError(MeshError, ImageError):
    """Unsupported encoding/depth or a malformed record."""


class TruncationError(MeshError, ImageError):
    """Fewer bytes or fields than the header or record kind requires."""


class IndexRangeError(MeshError):
    """A face references a record that does not exist."""


class InconsistentCountError(MeshError):
    """The fill pass materialized a different number of records than the count pass predicted."""


class PairingWarning(AssetError, UserWarning):
    """
    The texture could not be attached to the mesh.

    Recoverable: the model stays usable and renders untextured.
    """
