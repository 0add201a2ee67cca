from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

import numpy as np


RawBytes = Union[bytes, bytearray, memoryview, np.ndarray]


class PixelFormat(Enum):
    """
    Pixel layouts a buffer can describe; ``bytes_per_pixel`` gives the pixel width.
    """

    GRAY8 = "gray8"
    GRAY16 = "gray16"
    RGB24 = "rgb24"
    RGBA32 = "rgba32"

    @property
    def bytes_per_pixel(self) -> int:
        return _BYTES_PER_PIXEL[self]


_BYTES_PER_PIXEL = {
    PixelFormat.GRAY8: 1,
    PixelFormat.GRAY16: 2,
    PixelFormat.RGB24: 3,
    PixelFormat.RGBA32: 4,
}


@dataclass(frozen=True, slots=True, eq=False)
class PixelBuffer:
    """
    Read-only view over row-major pixel memory with an explicit row stride.

    ``stride`` is the number of bytes between the starts of two consecutive
    rows and may exceed ``width * bytes_per_pixel`` when rows are padded.
    """

    width: int
    height: int
    stride: int
    pixel_format: PixelFormat
    raw: RawBytes = field(repr=False)
    _flat: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("width and height must be >= 0")
        row_bytes = self.width * self.pixel_format.bytes_per_pixel
        if self.stride < row_bytes:
            raise ValueError(f"stride {self.stride} is smaller than a row of {row_bytes} bytes")

        if isinstance(self.raw, np.ndarray):
            flat = self.raw
        elif len(self.raw) == 0:
            flat = np.zeros(0, dtype=np.uint8)
        else:
            flat = np.frombuffer(self.raw, dtype=np.uint8)
        if flat.dtype != np.uint8:
            raise ValueError("raw pixel data must be uint8")
        flat = flat.reshape(-1)
        required = self.stride * (self.height - 1) + row_bytes if self.height > 0 else 0
        if flat.size < required:
            raise ValueError(f"raw buffer holds {flat.size} bytes, expected at least {required}")

        flat = flat.view()
        flat.flags.writeable = False
        object.__setattr__(self, "_flat", flat)

    @classmethod
    def from_array(cls, image: np.ndarray) -> "PixelBuffer":
        """
        Wrap a ``(H, W)`` uint8 array as Gray8 or an ``(H, W, 3)`` uint8 array as RGB24.

        Row padding (for example a column-cropped view of a larger image) is
        kept as the buffer stride; pixels inside a row must be packed.
        """
        if image.dtype != np.uint8:
            raise ValueError("image must have dtype uint8")
        if image.ndim == 2:
            pixel_format = PixelFormat.GRAY8
        elif image.ndim == 3 and image.shape[2] == 3:
            pixel_format = PixelFormat.RGB24
        elif image.ndim == 3 and image.shape[2] == 4:
            pixel_format = PixelFormat.RGBA32
        else:
            raise ValueError(f"unsupported image shape {image.shape}")

        height, width = image.shape[:2]
        bpp = pixel_format.bytes_per_pixel
        packed_row = image.ndim == 2 and image.strides[1] == 1
        packed_row = packed_row or (image.ndim == 3 and image.strides[2] == 1 and image.strides[1] == bpp)
        if not packed_row or image.strides[0] < width * bpp:
            image = np.ascontiguousarray(image)

        stride = int(image.strides[0])
        if height == 0 or width == 0:
            return cls(width=width, height=height, stride=max(stride, width * bpp), pixel_format=pixel_format, raw=b"")

        # Expose the underlying memory from the first pixel up to the last pixel of the last row.
        span = stride * (height - 1) + width * bpp
        raw = np.lib.stride_tricks.as_strided(image, shape=(span,), strides=(1,), writeable=False)
        return cls(width=width, height=height, stride=stride, pixel_format=pixel_format, raw=raw)

    @property
    def bytes_per_pixel(self) -> int:
        return self.pixel_format.bytes_per_pixel

    @property
    def flat(self) -> np.ndarray:
        """Read-only 1-D uint8 view of the raw memory."""
        return self._flat

    def offset(self, x: int, y: int) -> int:
        """Byte offset of pixel ``(x, y)``."""
        return y * self.stride + x * self.bytes_per_pixel

    def rows(self) -> np.ndarray:
        """
        Read-only ``(height, width * bytes_per_pixel)`` view that skips row padding.
        """
        row_bytes = self.width * self.bytes_per_pixel
        if self.height == 0 or row_bytes == 0:
            return np.zeros((self.height, row_bytes), dtype=np.uint8)
        return np.lib.stride_tricks.as_strided(
            self._flat,
            shape=(self.height, row_bytes),
            strides=(self.stride, 1),
            writeable=False,
        )

    def to_array(self) -> np.ndarray:
        """Copy the pixels into a packed ``(H, W)`` or ``(H, W, C)`` array."""
        packed = np.array(self.rows(), dtype=np.uint8)
        if self.bytes_per_pixel == 1:
            return packed
        return packed.reshape(self.height, self.width, self.bytes_per_pixel)
