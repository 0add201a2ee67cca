"""
Helpers for reading reference points and storing match results.
"""

from .point_dataset import MATCH_COLUMNS, load_reference_points, write_matches

__all__ = ["MATCH_COLUMNS", "load_reference_points", "write_matches"]
