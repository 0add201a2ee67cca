from __future__ import annotations

import csv
from pathlib import Path
from typing import List, Sequence, Tuple

from ..matching.engine import SENTINEL, Point

MATCH_COLUMNS = ["x", "y", "match_x", "match_y", "skipped"]


def load_reference_points(csv_path: Path | str) -> List[Point]:
    """
    Read reference points from a CSV file with ``x`` and ``y`` header columns.

    Values may be written as floats (``12.0``) but must be whole numbers.
    """
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    points: List[Point] = []
    with path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if reader.fieldnames is None:
            raise ValueError("CSV file must include a header row.")
        if "x" not in reader.fieldnames or "y" not in reader.fieldnames:
            raise ValueError("CSV header must contain 'x' and 'y' columns.")

        for row in reader:
            try:
                x = float(row["x"])
                y = float(row["y"])
            except (KeyError, TypeError, ValueError) as exc:
                raise ValueError(f"Invalid numeric values in row: {row}") from exc
            if not (x.is_integer() and y.is_integer()):
                raise ValueError(f"Reference points must be whole pixels: {row}")
            points.append(Point(int(x), int(y)))

    return points


def write_matches(
    csv_path: Path | str,
    points: Sequence[Tuple[int, int]],
    matches: Sequence[Tuple[int, int]],
) -> Path:
    """
    Write reference points next to their matches; skipped points get empty match columns.
    """
    if len(points) != len(matches):
        raise ValueError(f"Got {len(points)} points but {len(matches)} matches")

    path = Path(csv_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(MATCH_COLUMNS)
        for (x, y), match in zip(points, matches):
            if tuple(match) == SENTINEL:
                writer.writerow([x, y, "", "", 1])
            else:
                writer.writerow([x, y, match[0], match[1], 0])
    return path


__all__ = ["MATCH_COLUMNS", "load_reference_points", "write_matches"]
