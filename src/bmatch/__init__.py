"""
Core package for exhaustive block matching between two images.
"""

import logging

from .imaging.buffer import PixelBuffer, PixelFormat
from .matching.config import ClippingRule, MatchConfig, load_match_config
from .matching.engine import INT_MAX, SENTINEL, BlockMatch, ExhaustiveBlockMatcher, Point
from .matching.errors import BlockMatchingError, DimensionMismatch, FormatMismatch, UnsupportedFormat

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BlockMatch",
    "BlockMatchingError",
    "ClippingRule",
    "DimensionMismatch",
    "ExhaustiveBlockMatcher",
    "FormatMismatch",
    "INT_MAX",
    "MatchConfig",
    "PixelBuffer",
    "PixelFormat",
    "Point",
    "SENTINEL",
    "UnsupportedFormat",
    "load_match_config",
]
