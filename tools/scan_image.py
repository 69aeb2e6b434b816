#!/usr/bin/env python3
from __future__ import annotations
import argparse, os
import cv2

from qrscan.core.config import DEFAULT_CFG, load_cfg
from qrscan.io.ingest import load_image
from qrscan.imgproc.binarize import threshold_image
from qrscan.pipeline import scan


def main():
    ap = argparse.ArgumentParser(description="Run qrscan on one image; save the binarized frame and rectified code.")
    ap.add_argument("image", help="Path to input image.")
    ap.add_argument("--config", default=None, help="YAML config (see config/scan.yaml). Defaults are used if omitted.")
    ap.add_argument("--out_dir", default="tests/output", help="Directory for outputs.")
    ap.add_argument("--tol", type=float, default=None, help="Override ratio_tol.")
    ap.add_argument("--stride", type=int, default=None, help="Override row_stride.")
    ap.add_argument("--debug", action="store_true", help="Enable debug prints in every stage.")
    args = ap.parse_args()

    cfg = load_cfg(args.config) if args.config else dict(DEFAULT_CFG)
    if args.tol is not None:
        cfg["ratio_tol"] = args.tol
    if args.stride is not None:
        cfg["row_stride"] = args.stride
    if args.debug:
        cfg["debug"] = True

    try:
        img = load_image(args.image)
    except FileNotFoundError as e:
        raise SystemExit(str(e))

    os.makedirs(args.out_dir, exist_ok=True)
    base = os.path.splitext(os.path.basename(args.image))[0]

    out_bin = os.path.join(args.out_dir, f"{base}_bin.png")
    cv2.imwrite(out_bin, threshold_image(img, cfg))
    print(f"Saved binarized → {out_bin}")

    res = scan(img, cfg)
    print(f"Markers: {len(res.markers)}")
    for n, m in enumerate(res.markers):
        print(f"  #{n}: min=({m.min.x},{m.min.y}) mid=({m.mid.x},{m.mid.y}) max=({m.max.x},{m.max.y})")

    if res.corners is None:
        print("No corners (need exactly 3 markers).")
        return

    names = ("top-left", "top-right", "bottom-left")
    for name, (x, y) in zip(names, res.corners.as_tuple()):
        print(f"  {name}: ({x:.1f}, {y:.1f})")

    code = res.code_image()
    if code is not None:
        out_rect = os.path.join(args.out_dir, f"{base}_code.png")
        cv2.imwrite(out_rect, code)
        print(f"Saved rectified → {out_rect}")


if __name__ == "__main__":
    main()
