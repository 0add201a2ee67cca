from __future__ import annotations

from pathlib import Path
from typing import Union

import cv2
import numpy as np

from ..imaging.buffer import PixelBuffer

PathLike = Union[str, Path]


def load_grayscale(path: PathLike) -> np.ndarray:
    """
    Load an image as a single-channel array suitable for block matching.
    """
    image = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
    if image is None:
        raise FileNotFoundError(f"Unable to load image at {path}")
    return image


def load_color(path: PathLike) -> np.ndarray:
    """
    Load an image as an ``(H, W, 3)`` array in RGB channel order.
    """
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise FileNotFoundError(f"Unable to load image at {path}")
    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)


def load_buffer(path: PathLike, color: bool = False) -> PixelBuffer:
    """
    Load an image straight into a Gray8 or RGB24 pixel buffer.
    """
    image = load_color(path) if color else load_grayscale(path)
    return PixelBuffer.from_array(image)
