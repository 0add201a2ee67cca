from __future__ import annotations

import numpy as np

from ..imaging.buffer import PixelBuffer

# Widest possible score is block_size**2 * 3 * 255**2, which int64 holds for any realistic block.
ACCUMULATOR = np.int64


def extract_block(buffer: PixelBuffer, x: int, y: int, block_size: int) -> np.ndarray:
    """
    Return the ``block_size`` rows of the block whose top-left pixel is ``(x, y)``.

    The block must lie inside the buffer. The result has shape
    ``(block_size, block_size * bytes_per_pixel)`` and the accumulator dtype,
    so every channel byte is an independent sample.
    """
    bpp = buffer.bytes_per_pixel
    if x < 0 or y < 0 or x + block_size > buffer.width or y + block_size > buffer.height:
        raise IndexError(f"block at ({x}, {y}) of size {block_size} leaves the buffer")
    rows = buffer.rows()[y : y + block_size, x * bpp : (x + block_size) * bpp]
    return rows.astype(ACCUMULATOR)


def flat_block_offsets(buffer: PixelBuffer, x: int, y: int, block_size: int) -> np.ndarray:
    """
    Byte offsets of a block addressed purely through the row stride.

    Unlike :func:`extract_block` nothing stops a row of the block from running
    past the right edge of the image into the following row.
    """
    row_bytes = block_size * buffer.bytes_per_pixel
    start = buffer.offset(x, y)
    return start + np.arange(block_size)[:, None] * buffer.stride + np.arange(row_bytes)[None, :]


def extract_flat_block(buffer: PixelBuffer, x: int, y: int, block_size: int) -> np.ndarray | None:
    """
    Gather a block through :func:`flat_block_offsets`.

    Returns ``None`` when any byte of the block falls outside the raw memory.
    """
    offsets = flat_block_offsets(buffer, x, y, block_size)
    if offsets.size and (offsets[0, 0] < 0 or offsets[-1, -1] >= buffer.flat.size):
        return None
    return buffer.flat[offsets].astype(ACCUMULATOR)


def ssd(block_a: np.ndarray, block_b: np.ndarray) -> int:
    """Sum of squared differences of two equally shaped accumulator blocks."""
    diff = block_a - block_b
    return int(np.einsum("ij,ij->", diff, diff))


def block_ssd(
    source: PixelBuffer,
    source_origin: tuple[int, int],
    search: PixelBuffer,
    search_origin: tuple[int, int],
    block_size: int,
) -> int:
    """
    Sum of squared byte differences between two blocks given by their top-left pixels.
    """
    if source.pixel_format != search.pixel_format:
        raise ValueError("blocks must share a pixel format")
    source_block = extract_block(source, source_origin[0], source_origin[1], block_size)
    search_block = extract_block(search, search_origin[0], search_origin[1], block_size)
    return ssd(source_block, search_block)


__all__ = ["ACCUMULATOR", "block_ssd", "extract_block", "extract_flat_block", "flat_block_offsets", "ssd"]
