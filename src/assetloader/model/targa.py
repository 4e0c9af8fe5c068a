"""
TGA Image Decoder
=================
Decodes the uncompressed 24-bit true-color subset of the TGA format.

Layout of the 18-byte header (all multi-byte fields little endian):

    offset  size  field
    0       1     id_length
    1       1     color_map_type
    2       1     data_type          (2 = uncompressed true-color)
    3       2     color_map_origin
    5       2     color_map_length
    7       1     color_map_depth
    8       2     x_origin
    10      2     y_origin
    12      2     width
    14      2     height
    16      1     bits_per_pixel
    17      1     descriptor         (bit 5 set = first row is the top row)

Pixels follow the header (after the optional id / color map region) in BGR
order. The decoder keeps that order; reordering is the consumer's job.
"""
from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, TYPE_CHECKING

import numpy as np

from assetloader.config import (
    TGA_CHANNEL_ORDER,
    TGA_DESCRIPTOR_TOP_ORIGIN,
    TGA_HEADER_FORMAT,
    TGA_HEADER_SIZE,
    TGA_SUPPORTED_DEPTH,
    TGA_UNCOMPRESSED_TRUE_COLOR,
)
from assetloader.model.errors import AssetIOError, FormatError, TruncationError

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TgaHeader:
    """Container for making sense of a TGA file header."""
    id_length: int
    color_map_type: int
    data_type: int
    color_map_origin: int
    color_map_length: int
    color_map_depth: int
    x_origin: int
    y_origin: int
    width: int
    height: int
    bits_per_pixel: int
    descriptor: int

    @classmethod
    def from_bytes(cls, data: bytes, source: Optional[str] = None) -> TgaHeader:
        if len(data) < TGA_HEADER_SIZE:
            raise TruncationError(
                f"Header is {len(data)} bytes, expected {TGA_HEADER_SIZE}.", source=source
            )
        return cls(*struct.unpack_from(TGA_HEADER_FORMAT, data, 0))

    def to_bytes(self) -> bytes:
        return struct.pack(
            TGA_HEADER_FORMAT,
            self.id_length, self.color_map_type, self.data_type,
            self.color_map_origin, self.color_map_length, self.color_map_depth,
            self.x_origin, self.y_origin, self.width, self.height,
            self.bits_per_pixel, self.descriptor,
        )

    @property
    def pixel_offset(self) -> int:
        """
        Absolute offset of the first pixel byte.

        The color map always comes after the free form ID, so a present color
        map takes precedence and the two cases are exclusive.
        """
        if self.color_map_length != 0:
            return self.color_map_origin + self.color_map_length
        if self.id_length != 0:
            return TGA_HEADER_SIZE + self.id_length
        return TGA_HEADER_SIZE

    @property
    def pixel_byte_count(self) -> int:
        return self.width * self.height * (self.bits_per_pixel // 8)

    def validate(self, source: Optional[str] = None) -> None:
        if self.data_type != TGA_UNCOMPRESSED_TRUE_COLOR:
            raise FormatError(
                f"Expected TGA type {TGA_UNCOMPRESSED_TRUE_COLOR} (uncompressed true-color). "
                f"Got: {self.data_type}",
                source=source,
            )
        if self.bits_per_pixel != TGA_SUPPORTED_DEPTH:
            raise FormatError(
                f"Expected {TGA_SUPPORTED_DEPTH} bits per pixel. Got: {self.bits_per_pixel}",
                source=source,
            )


@dataclass(frozen=True)
class RasterImage:
    """
    A decoded image: dimensions, pixel bytes, and the header fields
    it was validated against.
    """
    width: int
    height: int
    pixels: bytes = field(repr=False)
    bits_per_pixel: int = TGA_SUPPORTED_DEPTH
    data_type: int = TGA_UNCOMPRESSED_TRUE_COLOR
    descriptor: int = 0
    channel_order: str = TGA_CHANNEL_ORDER

    def __post_init__(self) -> None:
        expected = self.width * self.height * self.bytes_per_pixel
        if len(self.pixels) != expected:
            raise ValueError(
                f"Pixel buffer holds {len(self.pixels)} bytes, expected {expected} "
                f"for {self.width}x{self.height}x{self.bytes_per_pixel}."
            )

    @property
    def bytes_per_pixel(self) -> int:
        return self.bits_per_pixel // 8

    @property
    def origin_at_top(self) -> bool:
        """True if the first stored row is the top row of the picture."""
        return bool(self.descriptor & TGA_DESCRIPTOR_TOP_ORIGIN)

    def as_array(self) -> npt.NDArray[np.uint8]:
        """Read-only (height, width, channels) view of the pixels in source order."""
        return np.frombuffer(self.pixels, dtype=np.uint8).reshape(
            self.height, self.width, self.bytes_per_pixel
        )


def decode_image(source: BinaryIO, name: Optional[str] = None) -> RasterImage:
    """
    Decode a TGA image from a binary stream.

    Args:
        source: Seekable binary stream positioned at the start of the file.
        name: Label used in error messages and logs (usually the file path).

    Returns:
        The decoded RasterImage, pixels in BGR order.

    Raises:
        TruncationError: Header or pixel data shorter than required.
        FormatError: Image type or bit depth not supported.
        AssetIOError: The stream could not be read.
    """
    name = name or getattr(source, "name", None)

    try:
        header = TgaHeader.from_bytes(source.read(TGA_HEADER_SIZE), source=name)
        header.validate(source=name)

        offset = header.pixel_offset
        if offset != TGA_HEADER_SIZE:
            logger.debug(f"Skipping to pixel data at offset {offset}.")
        source.seek(offset)

        byte_count = header.pixel_byte_count
        pixels = source.read(byte_count)
    except OSError as e:
        raise AssetIOError(f"Could not read texture: {e}", source=name) from e

    if len(pixels) < byte_count:
        raise TruncationError(
            f"Unexpected end of texture file: got {len(pixels)} of {byte_count} pixel bytes.",
            source=name,
        )

    logger.debug(f"Decoded {header.width}x{header.height} image ({byte_count} bytes).")
    return RasterImage(
        width=header.width,
        height=header.height,
        pixels=pixels,
        bits_per_pixel=header.bits_per_pixel,
        data_type=header.data_type,
        descriptor=header.descriptor,
    )
