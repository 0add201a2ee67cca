"""
IO helpers for loading image assets consumed by matching routines.
"""

from .image_loader import load_buffer, load_color, load_grayscale

__all__ = ["load_buffer", "load_color", "load_grayscale"]
