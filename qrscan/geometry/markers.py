# qrscan/geometry/markers.py
"""
Finder-pattern ("position target") detection on a binarized frame.

Every `row_stride`-th row is walked run by run. When the last five runs read
black, white, black, white, black in roughly 1:1:3:1:1 proportion, the middle
column is checked for the same signature, then the middle row is re-checked
to tighten the horizontal extent. Only candidates that pass both cross checks
become markers.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple
import numpy as np

from qrscan.core.bitmap import Bitmap
from qrscan.core.config import merge_cfg
from qrscan.core.contracts import Marker
from qrscan.core.ring import RingBuffer


def ratios_match(measured: Iterable[float], expected: Sequence[float], tol: float) -> bool:
    return all(-tol < m - e < tol for m, e in zip(measured, expected))


def confirm_line(
    line: np.ndarray,
    mid: int,
    reach: int,
    expected: Sequence[float],
    tol: float,
) -> Optional[Tuple[int, int]]:
    """
    Walk `line` outwards from `mid` (which must be black) for at most `reach`
    pixels each way, measuring the five runs around it. Returns the inclusive
    (first, last) index of the pattern if the runs match, else None.
    """
    if not 0 <= mid < line.size or line[mid]:
        return None
    runs = [0] * 5

    idx, color, lo = 2, False, mid
    for px in line[max(0, mid - reach):mid][::-1].tolist():
        if px != color:
            color = px
            if idx == 0:
                break
            idx -= 1
        runs[idx] += 1
        lo -= 1

    idx, color, hi = 2, False, mid - 1
    for px in line[mid:mid + reach].tolist():
        if px != color:
            color = px
            if idx == 4:
                break
            idx += 1
        runs[idx] += 1
        hi += 1

    # ran into the edge of the reach / image before seeing all five runs
    if 0 in runs:
        return None
    ratios = [runs[i] / runs[i + 1] for i in range(4)]
    if not ratios_match(ratios, expected, tol):
        return None
    return lo, hi


class MarkerScanner:
    """
    Holds the scratch ring buffers so one scanner can be reused frame after
    frame by the same worker. Not safe to share between threads.
    """

    def __init__(self, cfg: Optional[Dict] = None):
        self.cfg = merge_cfg(cfg)
        self._ratios: RingBuffer[float] = RingBuffer(4, 0.0)  # run[i] / run[i+1]
        self._edges: RingBuffer[int] = RingBuffer(6, 0)       # x of the last run starts

    def scan(self, bmp: Bitmap) -> List[Marker]:
        cfg = self.cfg
        stride = int(cfg["row_stride"])
        expected = tuple(float(r) for r in cfg["finder_ratios"])
        tol = float(cfg["ratio_tol"])
        debug = bool(cfg.get("debug"))

        markers: List[Marker] = []
        # markers whose box may still reach rows below the scan line
        active: Set[Marker] = set()
        width, height = bmp.dimensions
        if width < 2:
            return markers

        for y in range(0, height, stride):
            row = bmp.row(y)
            self._ratios.clear()
            self._edges.clear()
            self._edges.push(0)

            prev_edge, prev_run = 0, None
            for x in (np.flatnonzero(row[1:] != row[:-1]) + 1).tolist():
                run = x - prev_edge
                prev_edge = x
                self._edges.push(x)
                if prev_run is not None:
                    self._ratios.push(prev_run / run)
                prev_run = run

                # only test once a black run has just closed and 5 runs are buffered
                if not row[x] or not self._ratios.is_full():
                    continue

                start_x, end_x = self._edges.peek_oldest(), x - 1
                # overlapping an active marker means the same pattern seen on a later row
                if any(start_x <= m.max.x and end_x >= m.min.x for m in active):
                    continue
                if not ratios_match(self._ratios, expected, tol):
                    continue

                marker = self._confirm(bmp, start_x, x, y, expected, tol)
                if marker is None:
                    if debug:
                        print(f"[markers] row {y}: x={start_x}..{end_x} failed cross check")
                    continue
                if debug:
                    print(f"[markers] found #{len(markers)}: min=({marker.min.x},{marker.min.y}) "
                          f"max=({marker.max.x},{marker.max.y})")
                markers.append(marker)
                active.add(marker)

            active = {m for m in active if m.max.y >= y}

        return markers

    def _confirm(
        self,
        bmp: Bitmap,
        start_x: int,
        stop_x: int,
        y: int,
        expected: Sequence[float],
        tol: float,
    ) -> Optional[Marker]:
        width = stop_x - start_x
        x_mid = start_x + width // 2

        col_reach = max(1, int(width * float(self.cfg["confirm_col_reach"])))
        span = confirm_line(bmp.column(x_mid), y, col_reach, expected, tol)
        if span is None:
            return None
        y_min, y_max = span
        y_mid = y_min + (y_max - y_min) // 2

        # re-check the middle row; this also fine-tunes the left/right edges
        row_reach = max(1, int(width * float(self.cfg["confirm_row_reach"])))
        span = confirm_line(bmp.row(y_mid), x_mid, row_reach, expected, tol)
        if span is None:
            return None
        x_min, x_max = span
        return Marker.from_bounds(x_min, y_min, x_mid, y_mid, x_max, y_max)


def find_markers(bmp: Bitmap, cfg: Optional[Dict] = None) -> List[Marker]:
    """One-shot helper; workers should keep a MarkerScanner instead."""
    return MarkerScanner(cfg).scan(bmp)
