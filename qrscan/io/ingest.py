"""
Simple I/O helpers for reading images (BGR, as OpenCV expects) and turning
any supported frame into 8-bit luma.
"""

from __future__ import annotations
import cv2
import numpy as np


def load_image(path: str) -> np.ndarray:
    """
    Load an image from disk (BGR).
    Raises FileNotFoundError if not found.
    """
    img = cv2.imread(path, cv2.IMREAD_COLOR)
    if img is None:
        raise FileNotFoundError(f"Could not read image at: {path}")
    return img


def to_luma(image: np.ndarray) -> np.ndarray:
    """
    Return a (H, W) uint8 luma plane for a gray, BGR or BGRA uint8 frame.
    Gray input is returned as-is (no copy).
    """
    image = np.asarray(image)
    if image.dtype != np.uint8:
        raise ValueError(f"expected uint8 pixels, got {image.dtype}")
    if image.ndim == 2:
        return image
    if image.ndim == 3:
        ch = image.shape[2]
        if ch == 1:
            return image[:, :, 0]
        if ch == 3:
            return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        if ch == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    raise ValueError(f"unsupported image shape {image.shape}")
