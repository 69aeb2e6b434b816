# qrscan/core/config.py
from __future__ import annotations
from pathlib import Path
from typing import Dict, Optional
import yaml

# Defaults tuned for webcam frames (640x480 .. 1280x720) and our synthetic tests
DEFAULT_CFG: Dict = {
    # marker scanner
    "row_stride": 4,                            # scan every Nth row
    "finder_ratios": (1.0, 1.0 / 3.0, 3.0, 1.0),  # b:w:B:w:b as successive run ratios
    "ratio_tol": 0.65,                          # ~0.4 strict .. 0.65 lenient
    "confirm_col_reach": 1.0,                   # vertical check walks this many widths each way
    "confirm_row_reach": 0.625,                 # horizontal re-check: width * 5/8 each way

    # binarizer
    "threshold_seed": 128,

    # geometry
    "parallel_eps": 1e-3,   # radians; edges closer than this to parallel are rejected
    "sample_eps": 1e-6,     # px; snaps float noise before truncating to a source pixel
    "rectify": True,

    # worker
    "scan_interval": 2,     # capture hands every Nth frame to the scanner

    "debug": False,
}


def merge_cfg(cfg: Optional[Dict]) -> Dict:
    """Overlay `cfg` on DEFAULT_CFG (nested dicts merged one level) and validate."""
    merged = dict(DEFAULT_CFG)
    for k, v in (cfg or {}).items():
        if isinstance(v, dict) and k in merged and isinstance(merged[k], dict):
            merged[k] = {**merged[k], **v}
        else:
            merged[k] = v
    _validate(merged)
    return merged


def _validate(cfg: Dict) -> None:
    if int(cfg["row_stride"]) < 1:
        raise ValueError(f"row_stride must be >= 1, got {cfg['row_stride']}")
    if float(cfg["ratio_tol"]) <= 0:
        raise ValueError(f"ratio_tol must be > 0, got {cfg['ratio_tol']}")
    if len(cfg["finder_ratios"]) != 4:
        raise ValueError("finder_ratios needs exactly 4 values (5 runs)")
    if int(cfg["scan_interval"]) < 1:
        raise ValueError(f"scan_interval must be >= 1, got {cfg['scan_interval']}")
    if not 0 <= int(cfg["threshold_seed"]) <= 255:
        raise ValueError(f"threshold_seed must be in [0, 255], got {cfg['threshold_seed']}")


def load_cfg(path: str | Path) -> Dict:
    """Read a YAML config file and merge it over the defaults."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Could not read config at: {path}")
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a mapping at top level")
    if "finder_ratios" in raw:
        raw["finder_ratios"] = tuple(float(r) for r in raw["finder_ratios"])
    return merge_cfg(raw)
