# qrscan/geometry/rectify.py
from __future__ import annotations
from typing import Dict, Optional
import cv2
import numpy as np

from qrscan.core.bitmap import Bitmap
from qrscan.core.config import merge_cfg
from qrscan.core.contracts import Corners


def to_side_len(corners: Corners) -> float:
    """Longer of the top and left edges; the rectified code is this many pixels square."""
    tl, tr, bl = corners.top_left, corners.top_right, corners.bottom_left
    return max(tl.dist_to(tr), tl.dist_to(bl))


def to_affine_transform(corners: Corners, side_len: float, eps: float = 1e-3) -> Optional[np.ndarray]:
    """
    Forward 2x3 affine map from image coordinates to rectified coordinates:
    top-left goes to the origin, the top edge onto +x and the left edge onto
    +y, both scaled to `side_len`.

    Returns None when the two edges are (nearly) collinear, i.e. when
    |sin(angle between them)| < eps.
    """
    c0 = corners.pts[0]
    e1 = corners.pts[1] - c0
    e2 = corners.pts[2] - c0
    n1, n2 = float(np.linalg.norm(e1)), float(np.linalg.norm(e2))
    det = float(e1[0] * e2[1] - e2[0] * e1[1])
    if n1 == 0.0 or n2 == 0.0 or abs(det) < eps * n1 * n2:
        return None
    # side_len * inverse of the edge basis [e1 e2]
    lin = (side_len / det) * np.array([[e2[1], -e2[0]],
                                       [-e1[1], e1[0]]], dtype=np.float64)
    return np.hstack([lin, (-lin @ c0).reshape(2, 1)])


def affine_transform_chunk(bmp: Bitmap, transform: np.ndarray, width: int, height: int,
                           sample_eps: float = 1e-6) -> Bitmap:
    """
    Resample `bmp` through the inverse of `transform` into a width x height
    bitmap. Nearest pixel by truncation; anything mapping outside the source is white.
    """
    inv = cv2.invertAffineTransform(np.asarray(transform, dtype=np.float64))
    vs, us = np.mgrid[0:height, 0:width].astype(np.float64)
    src_x = inv[0, 0] * us + inv[0, 1] * vs + inv[0, 2]
    src_y = inv[1, 0] * us + inv[1, 1] * vs + inv[1, 2]
    xs = np.floor(src_x + sample_eps).astype(np.int64)
    ys = np.floor(src_y + sample_eps).astype(np.int64)
    return Bitmap(width, height, bmp.sample(xs, ys, default=True).ravel())


def rectify(bmp: Bitmap, corners: Corners, cfg: Optional[Dict] = None) -> Optional[Bitmap]:
    """
    Square, axis-aligned image of the code described by `corners`.
    None if the corners are degenerate.

    Corners sit on the last black pixel of each marker, so the output is one
    pixel wider than the corner distance to keep the far row and column.
    """
    cfg = merge_cfg(cfg)
    side = to_side_len(corners)
    if int(round(side)) < 1:
        return None
    size = int(round(side)) + 1
    trans = to_affine_transform(corners, side, eps=float(cfg["parallel_eps"]))
    if trans is None:
        if cfg.get("debug"):
            print("[rectify] degenerate corner set, skipping")
        return None
    if cfg.get("debug"):
        print(f"[rectify] side={side:.1f} -> {size}x{size}")
    return affine_transform_chunk(bmp, trans, size, size, sample_eps=float(cfg["sample_eps"]))
