from __future__ import annotations


class BlockMatchingError(ValueError):
    """
    Base class for inputs the block matcher refuses to process.
    """


class DimensionMismatch(BlockMatchingError):
    """Source and search buffers differ in width or height."""


class UnsupportedFormat(BlockMatchingError):
    """A buffer uses a pixel format other than Gray8 or RGB24."""


class FormatMismatch(BlockMatchingError):
    """Source and search buffers use different pixel formats."""


__all__ = ["BlockMatchingError", "DimensionMismatch", "FormatMismatch", "UnsupportedFormat"]
