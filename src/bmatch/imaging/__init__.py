"""
Pixel buffer descriptors shared by the matching routines.
"""

from .buffer import PixelBuffer, PixelFormat

__all__ = ["PixelBuffer", "PixelFormat"]
