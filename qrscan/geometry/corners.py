# qrscan/geometry/corners.py
"""
Infer three outer corners of the code from exactly three markers.

Orientation comes from geometry alone: the marker whose two neighbours span
the widest inner angle is taken as top-left. That holds for roughly head-on
views and breaks down for very oblique ones, where a skewed triangle can give
another marker the wider angle.
"""

from __future__ import annotations
import math
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from qrscan.core.config import merge_cfg
from qrscan.core.contracts import Corners, Marker, Point

TAU = 2.0 * math.pi


def _slope(p1: Point, p2: Point) -> float:
    dx, dy = p2.x - p1.x, p2.y - p1.y
    if dx == 0:
        return math.copysign(math.inf, dy)
    return dy / dx


def _collect3(f: Callable[[int], float]) -> List[float]:
    return [f(0), f(1), f(2)]


def _argmax3(vals: Sequence[float]) -> int:
    if vals[0] < vals[1]:
        return 2 if vals[1] < vals[2] else 1
    return 2 if vals[0] < vals[2] else 0


def _nearly_parallel(s1: float, s2: float, eps: float) -> bool:
    d = abs(math.atan(s1) - math.atan(s2))
    return min(d, math.pi - d) < eps


def intersect(p1: Point, s1: float, p2: Point, s2: float, eps: float = 1e-3) -> Optional[Point]:
    """
    Intersection of the line through p1 with slope s1 and the line through p2
    with slope s2. Slopes may be +-inf (vertical). None for (near-)parallel lines.
    """
    if _nearly_parallel(s1, s2, eps):
        return None
    if math.isinf(s1):
        x = p1.x
        return Point(x, s2 * (x - p2.x) + p2.y)
    if math.isinf(s2):
        x = p2.x
        return Point(x, s1 * (x - p1.x) + p1.y)
    x = (s1 * p1.x - s2 * p2.x + p2.y - p1.y) / (s1 - s2)
    return Point(x, s1 * (x - p1.x) + p1.y)


def _pick_edge_points(
    top_left: Marker,
    targ: Marker,
    other: Marker,
    slope: float,
) -> Tuple[Point, Point, Point]:
    """
    For the edge running from top-left to `targ` (slope `slope`), choose the
    outer edge midpoints: one on top-left, one on `targ`, plus the midpoint of
    `targ`'s far side (the side facing away from `other`).
    """
    def pick_lr(t: Marker, left: bool) -> Point:
        return t.left() if left else t.right()

    def pick_ud(t: Marker, up: bool) -> Point:
        return t.up() if up else t.down()

    if abs(slope) > 1.0:
        other_is_right = other.mid.x > (other.mid.y - targ.mid.y) / slope + targ.mid.x
        corner = pick_lr(top_left, other_is_right)
        near = pick_lr(targ, other_is_right)
        far = pick_ud(targ, other.mid.y > targ.mid.y)
    else:
        other_is_below = other.mid.y > (other.mid.x - targ.mid.x) * slope + targ.mid.y
        corner = pick_ud(top_left, other_is_below)
        near = pick_ud(targ, other_is_below)
        far = pick_lr(targ, other.mid.x > targ.mid.x)
    return corner, near, far


def pick_corners(markers: List[Marker], cfg: Optional[Dict] = None) -> Optional[Corners]:
    """
    Corners of the code as [top-left, top-right, bottom-left], or None unless
    there are exactly three markers with usable geometry. A None here is the
    normal "code not (fully) in view" outcome.
    """
    cfg = merge_cfg(cfg)
    debug = bool(cfg.get("debug"))
    eps = float(cfg["parallel_eps"])
    if len(markers) != 3:
        return None

    t = [m.to_float() for m in markers]
    mids = [m.mid for m in t]
    if mids[0] == mids[1] or mids[1] == mids[2] or mids[2] == mids[0]:
        if debug:
            print("[corners] coincident marker centres")
        return None

    # slope from each marker to the next one around the cycle
    slopes = _collect3(lambda i: _slope(mids[i], mids[(i + 1) % 3]))
    # the same edges as angles in (0, 2pi), telling the two directions apart
    angles = _collect3(lambda i: math.atan(slopes[i])
                      + (1.5 * math.pi if mids[i].x > mids[(i + 1) % 3].x else 0.5 * math.pi))
    # signed inner arc at each marker: leaving edge vs. reversed arriving edge
    arcs = _collect3(lambda i: (angles[(i + 2) % 3] + math.pi) % TAU - angles[i])

    def folded(i: int) -> float:
        arc = abs(arcs[i])
        return TAU - arc if arc > math.pi else arc

    # TODO: confirm the orientation by sampling the bitmap around the fourth corner
    tl = _argmax3(_collect3(folded))
    top_left = t[tl]

    def idx(i: int) -> int:
        return (tl + i) % 3

    if (arcs[tl] + TAU) % TAU > math.pi:
        top_right, bot_left = t[idx(2)], t[idx(1)]
        h_slope, v_slope = slopes[idx(2)], slopes[tl]
    else:
        top_right, bot_left = t[idx(1)], t[idx(2)]
        h_slope, v_slope = slopes[tl], slopes[idx(2)]

    in_top, out_top, right = _pick_edge_points(top_left, top_right, bot_left, h_slope)
    in_left, out_left, bottom = _pick_edge_points(top_left, bot_left, top_right, v_slope)

    pts = (
        intersect(in_top, h_slope, in_left, v_slope, eps),
        intersect(out_top, h_slope, right, v_slope, eps),
        intersect(bottom, h_slope, out_left, v_slope, eps),
    )
    if any(p is None or not (math.isfinite(p.x) and math.isfinite(p.y)) for p in pts):
        if debug:
            print(f"[corners] degenerate edges: h_slope={h_slope:.4g}, v_slope={v_slope:.4g}")
        return None
    if debug:
        print(f"[corners] tl={tl} corners={[(round(p.x, 1), round(p.y, 1)) for p in pts]}")
    return Corners.from_points(*pts)
