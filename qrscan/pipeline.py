# qrscan/pipeline.py
"""
Frame → ScanResult, plus the two worker loops used for live scanning.

    capture thread --(every Nth frame)--> scan_q --> scan worker --> result_q

A frame put on `scan_q` belongs to the scan worker from then on. Each worker
owns its own MarkerScanner, so nothing inside a scan is shared or locked.
`None` on a queue means "end of stream".
"""

from __future__ import annotations
import queue
import threading
from typing import Dict, Iterable, Optional
import numpy as np

from qrscan.core.bitmap import Bitmap
from qrscan.core.config import merge_cfg
from qrscan.core.contracts import ScanResult
from qrscan.geometry.corners import pick_corners
from qrscan.geometry.markers import MarkerScanner
from qrscan.geometry.rectify import rectify
from qrscan.imgproc.binarize import binarize


def scan_bitmap(bmp: Bitmap, cfg: Optional[Dict] = None,
                scanner: Optional[MarkerScanner] = None) -> ScanResult:
    cfg = merge_cfg(cfg)
    scanner = scanner or MarkerScanner(cfg)
    markers = scanner.scan(bmp)
    corners = pick_corners(markers, cfg)
    rectified = None
    if corners is not None and cfg.get("rectify", True):
        rectified = rectify(bmp, corners, cfg)
    return ScanResult(markers=markers, corners=corners, rectified=rectified)


def scan(image: np.ndarray, cfg: Optional[Dict] = None,
         scanner: Optional[MarkerScanner] = None) -> ScanResult:
    """Binarize a gray/BGR/BGRA uint8 frame and run the full detection chain on it."""
    cfg = merge_cfg(cfg)
    return scan_bitmap(binarize(image, cfg), cfg, scanner)


def capture_loop(
    frames: Iterable[np.ndarray],
    scan_q: "queue.Queue[Optional[np.ndarray]]",
    interval: Optional[int] = None,
    stop_event: Optional[threading.Event] = None,
    cfg: Optional[Dict] = None,
) -> int:
    """
    Hand every `interval`-th frame to the scanner; the rest are left to the
    caller (e.g. for preview). Closes the stream with `None` when `frames`
    runs out or `stop_event` is set. Returns the number of frames submitted.
    """
    cfg = merge_cfg(cfg)
    interval = int(interval if interval is not None else cfg["scan_interval"])
    if interval < 1:
        raise ValueError(f"interval must be >= 1, got {interval}")
    counter = 0
    submitted = 0
    try:
        for frame in frames:
            if stop_event is not None and stop_event.is_set():
                break
            counter += 1
            if counter >= interval:
                scan_q.put(frame)
                submitted += 1
                counter = 0
    finally:
        scan_q.put(None)
    if cfg.get("debug"):
        print(f"[capture] done, submitted {submitted} frame(s)")
    return submitted


def scan_loop(
    scan_q: "queue.Queue[Optional[np.ndarray]]",
    result_q: "queue.Queue[Optional[ScanResult]]",
    cfg: Optional[Dict] = None,
) -> int:
    """
    Scan frames until the end-of-stream sentinel, then forward it. A frame
    that cannot be scanned is reported and dropped; the sentinel is always
    forwarded. Returns frames scanned.
    """
    cfg = merge_cfg(cfg)
    scanner = MarkerScanner(cfg)
    processed = 0
    try:
        while True:
            frame = scan_q.get()
            if frame is None:
                break
            try:
                res = scan(frame, cfg, scanner)
            except Exception as e:
                print(f"[worker] Error scanning frame: {e} (continuing)")
                continue
            result_q.put(res)
            processed += 1
            if cfg.get("debug"):
                print(f"[worker] frame #{processed} scanned")
    finally:
        result_q.put(None)
    if cfg.get("debug"):
        print("[worker] done")
    return processed


def start_scan_worker(
    scan_q: "queue.Queue[Optional[np.ndarray]]",
    result_q: "queue.Queue[Optional[ScanResult]]",
    cfg: Optional[Dict] = None,
) -> threading.Thread:
    t = threading.Thread(target=scan_loop, args=(scan_q, result_q, cfg), daemon=True)
    t.start()
    return t
