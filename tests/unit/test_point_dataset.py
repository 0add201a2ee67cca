from __future__ import annotations

import csv
from pathlib import Path

import pytest

from bmatch import SENTINEL, Point
from bmatch.datasets import MATCH_COLUMNS, load_reference_points, write_matches


def test_load_reference_points(tmp_path: Path) -> None:
    csv_path = tmp_path / "points.csv"
    with csv_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(["label", "x", "y"])
        writer.writerow(["corner", "12", "7"])
        writer.writerow(["edge", "3.0", "40.0"])

    assert load_reference_points(csv_path) == [Point(12, 7), Point(3, 40)]


def test_load_reference_points_rejects_bad_rows(tmp_path: Path) -> None:
    missing_column = tmp_path / "missing.csv"
    missing_column.write_text("x,z\n1,2\n", encoding="utf-8")
    fractional = tmp_path / "fractional.csv"
    fractional.write_text("x,y\n1.5,2\n", encoding="utf-8")
    garbage = tmp_path / "garbage.csv"
    garbage.write_text("x,y\nfoo,2\n", encoding="utf-8")

    for path in (missing_column, fractional, garbage):
        with pytest.raises(ValueError):
            load_reference_points(path)
    with pytest.raises(FileNotFoundError):
        load_reference_points(tmp_path / "absent.csv")


def test_write_matches_marks_skipped_points(tmp_path: Path) -> None:
    points = [Point(5, 5), Point(0, 0)]
    matches = [Point(6, 6), SENTINEL]

    path = write_matches(tmp_path / "out" / "matches.csv", points, matches)

    with path.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.reader(handle))
    assert rows[0] == MATCH_COLUMNS
    assert rows[1] == ["5", "5", "6", "6", "0"]
    assert rows[2] == ["0", "0", "", "", "1"]


def test_write_matches_requires_aligned_inputs(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        write_matches(tmp_path / "matches.csv", [Point(1, 1)], [])
