"""
Corner inference from three markers, plus the bitmap → markers → corners path.
"""
from __future__ import annotations
import itertools
import math

import numpy as np
import pytest

from qrscan.core.bitmap import Bitmap
from qrscan.core.contracts import Corners, Marker, Point
from qrscan.geometry.corners import intersect, pick_corners
from qrscan.geometry.markers import find_markers


def _box(cx: float, cy: float, r: float = 3.0) -> Marker:
    return Marker.from_bounds(cx - r, cy - r, cx, cy, cx + r, cy + r)


def _scene(origins, w: int = 120, h: int = 120, module: int = 3) -> Bitmap:
    pat = np.zeros((7, 7), dtype=bool)
    pat[1:6, 1:6] = True
    pat[2:5, 2:5] = False
    pat = pat.repeat(module, axis=0).repeat(module, axis=1)
    canvas = np.ones((h, w), dtype=bool)
    n = pat.shape[0]
    for x0, y0 in origins:
        canvas[y0:y0 + n, x0:x0 + n] = pat
    return Bitmap.from_bools(canvas)


TL, TR, BL = _box(10, 10), _box(50, 10), _box(10, 50)


@pytest.mark.parametrize("markers", [[], [TL], [TL, TR], [TL, TR, BL, _box(50, 50)]])
def test_wrong_marker_count_is_absent(markers):
    assert pick_corners(markers) is None


@pytest.mark.parametrize("order", list(itertools.permutations([TL, TR, BL])))
def test_upright_code_any_input_order(order):
    got = pick_corners(list(order))
    assert isinstance(got, Corners)
    assert got.pts.shape == (3, 2)
    np.testing.assert_allclose(got.pts, [[7, 7], [53, 7], [7, 53]], atol=1e-9)


def test_code_rotated_half_turn():
    # top-left marker now sits bottom-right; top-right is to its left, bottom-left above it
    markers = [_box(50, 10), _box(10, 50), _box(50, 50)]
    got = pick_corners(markers)
    np.testing.assert_allclose(got.pts, [[53, 53], [7, 53], [53, 7]], atol=1e-9)


def test_slightly_rotated_code_keeps_orientation():
    ang = math.radians(10)
    c, s = math.cos(ang), math.sin(ang)

    def rot(x, y):
        return 100 + c * x - s * y, 100 + s * x + c * y

    markers = [_box(*rot(0, 0), r=4), _box(*rot(60, 0), r=4), _box(*rot(0, 60), r=4)]
    got = pick_corners(markers)
    assert got is not None
    tl, tr, bl = got.top_left, got.top_right, got.bottom_left
    # top-left is nearest the top-left marker, and the other two are not swapped
    assert tl.dist_to(markers[0].mid) < tl.dist_to(markers[1].mid)
    assert tr.dist_to(markers[1].mid) < tr.dist_to(markers[2].mid)
    assert bl.dist_to(markers[2].mid) < bl.dist_to(markers[1].mid)


def test_collinear_markers_are_rejected():
    assert pick_corners([_box(10, 10), _box(30, 10), _box(50, 10)]) is None


def test_coincident_markers_are_rejected():
    assert pick_corners([_box(10, 10), _box(10, 10), _box(50, 10)]) is None


def test_intersect_handles_vertical_and_parallel_lines():
    p = intersect(Point(0.0, 5.0), 0.0, Point(3.0, 100.0), math.inf)
    assert (p.x, p.y) == (3.0, 5.0)
    p = intersect(Point(2.0, 0.0), -math.inf, Point(0.0, 1.0), 1.0)
    assert (p.x, p.y) == (2.0, 3.0)
    p = intersect(Point(0.0, 0.0), 1.0, Point(0.0, 2.0), -1.0)
    assert p.x == pytest.approx(1.0) and p.y == pytest.approx(1.0)
    assert intersect(Point(0.0, 0.0), 2.0, Point(1.0, 0.0), 2.0) is None
    assert intersect(Point(0.0, 0.0), math.inf, Point(1.0, 0.0), -math.inf) is None


@pytest.mark.parametrize("origins", [[], [(20, 20)], [(20, 20), (80, 20)]])
def test_incomplete_scenes_give_no_corners(origins):
    assert pick_corners(find_markers(_scene(origins))) is None


def test_three_pattern_scene_gives_code_corners():
    markers = find_markers(_scene([(20, 20), (80, 20), (20, 80)]))
    assert len(markers) == 3
    got = pick_corners(markers)
    np.testing.assert_allclose(got.pts, [[20, 20], [100, 20], [20, 100]], atol=1e-9)
    assert got.as_tuple() == ((20.0, 20.0), (100.0, 20.0), (20.0, 100.0))
