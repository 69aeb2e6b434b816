"""
Bitmap access and row iteration on small hand-made grids.
"""
from __future__ import annotations
import numpy as np
import pytest

from qrscan.core.bitmap import Bitmap, PixelOutOfBounds


def _checker(w: int = 5, h: int = 3) -> Bitmap:
    yy, xx = np.mgrid[0:h, 0:w]
    return Bitmap.from_bools((xx + yy) % 2 == 0)


def test_new_bitmap_is_all_white():
    bmp = Bitmap(4, 3)
    assert bmp.dimensions == (4, 3)
    assert len(bmp) == 12
    assert all(bmp.get(x, y) for y in range(3) for x in range(4))


def test_data_length_must_match():
    with pytest.raises(ValueError):
        Bitmap(3, 3, np.ones(8, dtype=bool))


def test_get_set_row_major():
    bmp = Bitmap(4, 3)
    bmp.set(2, 1, False)
    assert bmp.get(2, 1) is False
    assert bmp.data[1 * 4 + 2] == False  # noqa: E712
    assert bmp.get(1, 2) is True


@pytest.mark.parametrize("x,y", [(4, 0), (0, 3), (10, 10), (-1, 0)])
def test_unchecked_access_out_of_bounds(x, y):
    bmp = Bitmap(4, 3)
    with pytest.raises(PixelOutOfBounds):
        bmp.get(x, y)
    with pytest.raises(IndexError):
        bmp.set(x, y, False)


def test_checked_access_returns_none():
    bmp = Bitmap(4, 3)
    assert bmp.get_checked(4, 0) is None
    assert bmp.get_checked(0, 3) is None
    assert bmp.set_checked(9, 9, False) is None
    assert bmp.set_checked(1, 1, False) is True
    assert bmp.get_checked(1, 1) is False


def test_clamped_access_saturates():
    bmp = Bitmap(4, 3)
    bmp.set(3, 2, False)
    assert bmp.get_clamped(100, 100) is False
    assert bmp.get_clamped(3, 50) is False
    assert bmp.get_clamped(50, 0) is True


def test_clamped_access_on_empty_bitmap_reads_white():
    assert Bitmap(0, 0).get_clamped(3, 3) is True
    assert Bitmap(0, 5).get_clamped(0, 2) is True
    assert Bitmap(4, 0).get_clamped(-1, 0) is True


def test_rows_shape_and_order():
    bmp = _checker(5, 3)
    rows = [r.tolist() for r in bmp.rows()]
    assert len(rows) == 3
    assert all(len(r) == 5 for r in rows)
    assert rows[0] == [True, False, True, False, True]
    assert rows[1] == [False, True, False, True, False]


def test_rows_reverse_is_exact_reverse():
    bmp = _checker(5, 4)
    fwd = [r.tolist() for r in bmp.rows()]
    back = [r.tolist() for r in reversed(bmp.rows())]
    assert back == fwd[::-1]


def test_rows_restartable():
    bmp = _checker(6, 3)
    rows = bmp.rows()
    first = [r.tolist() for r in rows]
    second = [r.tolist() for r in rows]
    again = [r.tolist() for r in bmp.rows()]
    assert first == second == again


def test_rows_nth_and_last():
    bmp = _checker(5, 4)
    rows = bmp.rows()
    fwd = [r.tolist() for r in bmp.rows()]
    assert rows.nth(2).tolist() == fwd[2]
    assert rows.nth(4) is None
    assert rows.nth_back(0).tolist() == fwd[-1]
    assert rows.nth_back(3).tolist() == fwd[0]
    assert rows.last().tolist() == fwd[-1]
    assert len(rows) == 4


def test_rows_are_read_only_but_rows_mut_writes_through():
    bmp = Bitmap(3, 2)
    row = bmp.rows().nth(0)
    with pytest.raises(ValueError):
        row[0] = False
    for r in bmp.rows_mut():
        r[1] = False
    assert bmp.get(1, 0) is False and bmp.get(1, 1) is False
    assert bmp.get(0, 0) is True


def test_column_and_to_array():
    bmp = _checker(3, 4)
    assert bmp.column(0).tolist() == [True, False, True, False]
    img = bmp.to_array()
    assert img.shape == (4, 3)
    assert img.dtype == np.uint8
    assert set(np.unique(img).tolist()) == {0, 255}


def test_sample_defaults_outside():
    bmp = Bitmap(2, 2, np.zeros(4, dtype=bool))
    got = bmp.sample(np.array([0, 1, 2, -1]), np.array([0, 1, 0, 0]), default=True)
    assert got.tolist() == [False, False, True, True]


def test_equality():
    assert _checker(4, 4) == _checker(4, 4)
    assert _checker(4, 4) != Bitmap(4, 4)
