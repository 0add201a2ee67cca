from __future__ import annotations

import argparse
import logging
import math
import statistics
import time
from pathlib import Path
from typing import List, Sequence
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

import cv2
import numpy as np

from bmatch.datasets import load_reference_points, write_matches
from bmatch.io import load_color, load_grayscale
from bmatch.logging_config import setup_logging
from bmatch.matching import SENTINEL, ClippingRule, ExhaustiveBlockMatcher, MatchConfig, Point, load_match_config

logger = logging.getLogger("bmatch.scripts.eval_block_matching")


def parse_arguments() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Match reference points between two images by exhaustive block search.")
    parser.add_argument("source", type=Path, help="Image holding the reference points.")
    parser.add_argument("search", type=Path, help="Image in which the reference points are looked for.")
    parser.add_argument(
        "--points",
        type=Path,
        default=None,
        help="CSV file with 'x' and 'y' columns. When omitted a regular grid of points is used.",
    )
    parser.add_argument(
        "--grid-step",
        type=int,
        default=32,
        help="Spacing (pixels) of the reference grid used when --points is not given.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file with block_size, search_radius, clipping and workers. Flags below override it.",
    )
    parser.add_argument("--block-size", type=int, default=None, help="Side of the square block (pixels).")
    parser.add_argument("--search-radius", type=int, default=None, help="Search radius around each point (pixels).")
    parser.add_argument(
        "--clipping",
        type=str,
        choices=[rule.value for rule in ClippingRule],
        default=None,
        help="Border rule for candidate columns.",
    )
    parser.add_argument("--workers", type=int, default=None, help="Number of threads processing points.")
    parser.add_argument("--color", action="store_true", help="Match RGB pixels instead of grayscale.")
    parser.add_argument("--relative", action="store_true", help="Report displacements instead of absolute positions.")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("artifacts/block_matching"),
        help="Directory where the match CSV and the annotated image will be written.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="INFO",
        help="Logging verbosity.",
    )
    return parser.parse_args()


def build_config(args: argparse.Namespace) -> MatchConfig:
    config = load_match_config(args.config) if args.config else MatchConfig()
    if args.block_size is not None:
        config.block_size = args.block_size
    if args.search_radius is not None:
        config.search_radius = args.search_radius
    if args.clipping is not None:
        config.clipping = ClippingRule(args.clipping)
    if args.workers is not None:
        config.workers = args.workers
    config.validate()
    return config


def build_grid(width: int, height: int, step: int) -> List[Point]:
    if step <= 0:
        raise ValueError("grid_step must be positive")
    return [Point(x, y) for y in range(step // 2, height, step) for x in range(step // 2, width, step)]


def render_vectors(image: np.ndarray, points: Sequence[Point], matches: Sequence[Point]) -> np.ndarray:
    """
    Mark every matched reference point and draw a line to its match.
    """
    if image.ndim == 2:
        annotated = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    else:
        annotated = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)

    for point, match in zip(points, matches):
        if match == SENTINEL:
            continue
        cv2.rectangle(annotated, (point.x - 1, point.y - 1), (point.x + 1, point.y + 1), (0, 255, 255), -1)
        cv2.line(annotated, point, match, (0, 0, 255), 1, lineType=cv2.LINE_AA)
    return annotated


def evaluate() -> None:
    args = parse_arguments()
    setup_logging(getattr(logging, args.log_level))
    config = build_config(args)

    loader = load_color if args.color else load_grayscale
    source_image = loader(args.source)
    search_image = loader(args.search)

    if args.points is not None:
        points = load_reference_points(args.points)
    else:
        height, width = source_image.shape[:2]
        points = build_grid(width, height, args.grid_step)

    matcher = ExhaustiveBlockMatcher.from_config(config)

    start = time.perf_counter()
    matches = matcher.match_arrays(source_image, points, search_image, relative=True)
    duration_ms = (time.perf_counter() - start) * 1000.0

    output_dir = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    absolute = [
        match if match == SENTINEL else Point(point.x + match.x, point.y + match.y)
        for point, match in zip(points, matches)
    ]
    reported = matches if args.relative else absolute
    csv_path = write_matches(output_dir / f"{args.source.stem}_matches.csv", points, reported)

    annotated = render_vectors(source_image, points, absolute)
    viz_path = output_dir / f"{args.source.stem}_vectors.png"
    cv2.imwrite(str(viz_path), annotated)

    magnitudes = [math.hypot(match.x, match.y) for match in matches if match != SENTINEL]
    skipped = len(points) - len(magnitudes)

    logger.info("Matches written to %s, vectors drawn to %s", csv_path, viz_path)
    print("\nSummary")
    print("-" * 72)
    print(f"Reference points : {len(points)} ({skipped} skipped)")
    print(
        f"Configuration    : block_size={config.block_size}, search_radius={config.search_radius}, "
        f"clipping={config.clipping.value}, workers={config.workers}"
    )
    if magnitudes:
        print(
            f"Displacement (px): mean={statistics.fmean(magnitudes):.3f}, "
            f"median={statistics.median(magnitudes):.3f}, max={max(magnitudes):.3f}"
        )
    print(f"Latency (ms)     : {duration_ms:.2f}")


if __name__ == "__main__":
    evaluate()
