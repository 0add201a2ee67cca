from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from ..imaging.buffer import PixelBuffer, PixelFormat
from .config import ClippingRule, MatchConfig
from .errors import DimensionMismatch, FormatMismatch, UnsupportedFormat
from .metric import ACCUMULATOR, extract_block, extract_flat_block, ssd

logger = logging.getLogger(__name__)

INT_MAX = 2**31 - 1

SUPPORTED_FORMATS = (PixelFormat.GRAY8, PixelFormat.RGB24)


class Point(NamedTuple):
    x: int
    y: int


SENTINEL = Point(INT_MAX, INT_MAX)


@dataclass(slots=True)
class BlockMatch:
    """
    Outcome of matching a single reference point.

    ``error`` is the winning sum of squared differences, or ``None`` when the
    point was skipped or every candidate of its search window was clipped
    away (in which case ``point`` holds the unmoved seed).
    """

    point: Point
    error: Optional[int]
    skipped: bool = False


class ExhaustiveBlockMatcher:
    """
    Block matching by exhaustive search over a square window.

    For every reference point a ``block_size`` square centered on the point is
    taken from the source buffer and compared, by sum of squared byte
    differences, with every candidate block of the search window in the
    search buffer. Candidates are scanned row by row and a later candidate
    only wins on a strictly smaller error, so ties go to the first one seen.
    """

    def __init__(
        self,
        block_size: int = 16,
        search_radius: int = 12,
        clipping: ClippingRule = ClippingRule.SYMMETRIC,
        workers: int = 1,
    ) -> None:
        self.block_size = block_size
        self.search_radius = search_radius
        self.clipping = clipping
        self.workers = workers

    @classmethod
    def from_config(cls, config: MatchConfig) -> "ExhaustiveBlockMatcher":
        return cls(
            block_size=config.block_size,
            search_radius=config.search_radius,
            clipping=config.clipping,
            workers=config.workers,
        )

    @property
    def config(self) -> MatchConfig:
        return MatchConfig(
            block_size=self.block_size,
            search_radius=self.search_radius,
            clipping=self.clipping,
            workers=self.workers,
        )

    def match(
        self,
        source: PixelBuffer,
        points: Sequence[Tuple[int, int]],
        search: PixelBuffer,
        relative: bool = False,
    ) -> List[Point]:
        """
        Find the best match of every reference point.

        Returns one point per reference point, in order: the matched block
        center, or its displacement from the reference point when
        ``relative`` is set. Points whose block does not fit inside the source
        buffer yield :data:`SENTINEL`.
        """
        return [result.point for result in self.match_detailed(source, points, search, relative)]

    def match_arrays(
        self,
        source: np.ndarray,
        points: Sequence[Tuple[int, int]],
        search: np.ndarray,
        relative: bool = False,
    ) -> List[Point]:
        """
        Same as :meth:`match` for ``(H, W)`` grayscale or ``(H, W, 3)`` color uint8 arrays.
        """
        return self.match(PixelBuffer.from_array(source), points, PixelBuffer.from_array(search), relative)

    def match_detailed(
        self,
        source: PixelBuffer,
        points: Sequence[Tuple[int, int]],
        search: PixelBuffer,
        relative: bool = False,
    ) -> List[BlockMatch]:
        """
        Like :meth:`match`, but keep the winning error of every point.

        Reference coordinates must be whole numbers; ``5.0`` is accepted,
        ``5.9`` raises ``ValueError`` before any point is processed.
        """
        config = self.config
        config.validate()
        self._validate_buffers(source, search)

        references = [_to_point(point) for point in points]
        results: List[Optional[BlockMatch]] = [None] * len(references)

        search_pass = _SearchPass(config, source, search, relative)

        def run(start: int, stop: int) -> None:
            for index in range(start, stop):
                results[index] = search_pass.match_point(references[index])

        workers = min(config.workers, len(references))
        if workers <= 1:
            run(0, len(references))
        else:
            bounds = np.linspace(0, len(references), workers + 1).astype(int)
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(run, int(lo), int(hi)) for lo, hi in zip(bounds[:-1], bounds[1:])]
                for future in futures:
                    future.result()

        skipped = sum(1 for result in results if result is not None and result.skipped)
        logger.debug(
            "Matched %d points (%d skipped) with block_size=%d search_radius=%d clipping=%s workers=%d",
            len(references),
            skipped,
            config.block_size,
            config.search_radius,
            config.clipping.value,
            workers,
        )
        return [result for result in results if result is not None]

    @staticmethod
    def _validate_buffers(source: PixelBuffer, search: PixelBuffer) -> None:
        if source.width != search.width or source.height != search.height:
            raise DimensionMismatch(
                f"Source and search images sizes must match: "
                f"{source.width}x{source.height} vs {search.width}x{search.height}"
            )
        for buffer in (source, search):
            if buffer.pixel_format not in SUPPORTED_FORMATS:
                raise UnsupportedFormat(
                    f"Images must be Gray8 or RGB24, got {buffer.pixel_format.value}"
                )
        if source.pixel_format != search.pixel_format:
            raise FormatMismatch(
                f"Source and search images must have same pixel format: "
                f"{source.pixel_format.value} vs {search.pixel_format.value}"
            )


def _to_point(point: Tuple[int, int]) -> Point:
    x, y = point
    coords = []
    for value in (x, y):
        if isinstance(value, (int, np.integer)):
            coords.append(int(value))
            continue
        try:
            as_float = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Reference points must be integer pairs: {point!r}") from exc
        if not as_float.is_integer():
            raise ValueError(f"Reference points must be whole pixels: {point!r}")
        coords.append(int(as_float))
    return Point(coords[0], coords[1])


class _SearchPass:
    """
    Per-call state shared read-only by every worker.
    """

    def __init__(self, config: MatchConfig, source: PixelBuffer, search: PixelBuffer, relative: bool) -> None:
        self.block_size = config.block_size
        self.block_radius = config.block_radius
        self.window = 2 * config.search_radius
        self.search_radius = config.search_radius
        self.legacy = config.clipping is ClippingRule.LEGACY
        self.source = source
        self.search = search
        self.search_rows = search.rows()
        self.relative = relative
        self.width = source.width
        self.height = source.height

    def match_point(self, reference: Point) -> BlockMatch:
        x, y = reference
        radius = self.block_radius
        size = self.block_size

        if x - radius < 0 or x + radius >= self.width or y - radius < 0 or y + radius >= self.height:
            return BlockMatch(point=SENTINEL, error=None, skipped=True)

        source_block = extract_block(self.source, x - radius, y - radius, size)
        start_x = x - radius - self.search_radius
        start_y = y - radius - self.search_radius

        min_error = int(np.iinfo(ACCUMULATOR).max)
        best: Optional[Tuple[int, int]] = None

        for row in range(self.window):
            candidate_y = start_y + row
            if candidate_y < 0 or candidate_y + size >= self.height:
                continue
            for col in range(self.window):
                candidate_x = start_x + col
                candidate = self._candidate(candidate_x, candidate_y)
                if candidate is None:
                    continue
                error = ssd(source_block, candidate)
                if error < min_error:
                    min_error = error
                    best = (candidate_x, candidate_y)

        if best is None:
            seed = Point(0, 0) if self.relative else reference
            return BlockMatch(point=seed, error=None)

        center = Point(best[0] + radius, best[1] + radius)
        if self.relative:
            center = Point(center.x - x, center.y - y)
        return BlockMatch(point=center, error=min_error)

    def _candidate(self, candidate_x: int, candidate_y: int) -> Optional[np.ndarray]:
        size = self.block_size
        if candidate_x < 0:
            return None
        if self.legacy:
            if candidate_y + size >= self.width:
                return None
            return extract_flat_block(self.search, candidate_x, candidate_y, size)
        if candidate_x + size >= self.width:
            return None
        bpp = self.search.bytes_per_pixel
        rows = self.search_rows[candidate_y : candidate_y + size, candidate_x * bpp : (candidate_x + size) * bpp]
        return rows.astype(ACCUMULATOR)


__all__ = [
    "BlockMatch",
    "ExhaustiveBlockMatcher",
    "INT_MAX",
    "Point",
    "SENTINEL",
    "SUPPORTED_FORMATS",
]
