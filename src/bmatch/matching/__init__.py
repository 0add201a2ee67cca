"""
Matching subpackage exposes the exhaustive block matcher and its configuration.
"""

from .config import ClippingRule, MatchConfig, load_match_config
from .engine import INT_MAX, SENTINEL, BlockMatch, ExhaustiveBlockMatcher, Point
from .errors import BlockMatchingError, DimensionMismatch, FormatMismatch, UnsupportedFormat
from .metric import block_ssd

__all__ = [
    "BlockMatch",
    "BlockMatchingError",
    "ClippingRule",
    "DimensionMismatch",
    "ExhaustiveBlockMatcher",
    "FormatMismatch",
    "INT_MAX",
    "MatchConfig",
    "Point",
    "SENTINEL",
    "UnsupportedFormat",
    "block_ssd",
    "load_match_config",
]
