# qrscan/imgproc/binarize.py
"""
Global histogram threshold, after "A Simple and Efficient Image Pre-processing
for QR Decoder" (Chen, Yang & Zhang): split the histogram at the current
threshold, move the threshold to the midpoint of the two side means, repeat
until it stops moving.
"""

from __future__ import annotations
from typing import Dict, Optional
import numpy as np

from qrscan.core.bitmap import Bitmap
from qrscan.core.config import merge_cfg
from qrscan.io.ingest import to_luma

_LEVELS = np.arange(256, dtype=np.int64)


def luma_histogram(luma: np.ndarray) -> np.ndarray:
    """256-bucket count of an 8-bit luma plane."""
    return np.bincount(np.asarray(luma, dtype=np.uint8).ravel(), minlength=256).astype(np.int64)


def histogram_threshold(histo: np.ndarray, seed: int = 128) -> int:
    """
    Converge on a threshold in [0, 255]. Pixels with luma > threshold are white.

    Each side's count starts at 1 so an empty side has mean 0 instead of
    dividing by zero. Moving the threshold only shifts the buckets between the
    old and new value from one side to the other.
    """
    h = np.asarray(histo, dtype=np.int64)
    if h.shape != (256,):
        raise ValueError(f"histogram must have 256 buckets, got shape {h.shape}")
    weighted = h * _LEVELS

    thresh = int(seed)
    black_sum, black_cnt = int(weighted[:thresh].sum()), int(h[:thresh].sum()) + 1
    white_sum, white_cnt = int(weighted[thresh:].sum()), int(h[thresh:].sum()) + 1
    new_thresh = (black_sum // black_cnt + white_sum // white_cnt) // 2

    while new_thresh != thresh:
        lo, hi = min(new_thresh, thresh), max(new_thresh, thresh)
        diff_sum, diff_cnt = int(weighted[lo:hi].sum()), int(h[lo:hi].sum())
        if new_thresh < thresh:
            black_sum -= diff_sum
            black_cnt -= diff_cnt
            white_sum += diff_sum
            white_cnt += diff_cnt
        else:
            black_sum += diff_sum
            black_cnt += diff_cnt
            white_sum -= diff_sum
            white_cnt -= diff_cnt
        thresh = new_thresh
        new_thresh = (black_sum // black_cnt + white_sum // white_cnt) // 2

    return thresh


def binarize(image: np.ndarray, cfg: Optional[Dict] = None) -> Bitmap:
    """Gray/BGR/BGRA uint8 frame → Bitmap (True = white)."""
    cfg = merge_cfg(cfg)
    luma = to_luma(image)
    thresh = histogram_threshold(luma_histogram(luma), seed=int(cfg["threshold_seed"]))
    if cfg.get("debug"):
        print(f"[binarize] {luma.shape[1]}x{luma.shape[0]} thresh={thresh}")
    return Bitmap.from_bools(luma > thresh)


def threshold_image(image: np.ndarray, cfg: Optional[Dict] = None) -> np.ndarray:
    """Same threshold as `binarize`, returned as a 0/255 uint8 image for display."""
    return binarize(image, cfg).to_array()
