"""
Dense 1-bit image. True is white (luma above threshold), False is black.

Pixels live in a flat row-major numpy bool array (index = y * width + x) so
rows and columns can be handed out as views without copying.
"""

from __future__ import annotations
from typing import Iterator, Optional, Tuple
import numpy as np


class PixelOutOfBounds(IndexError):
    """Raised by the unchecked accessors for coordinates outside the bitmap."""

    def __init__(self, x: int, y: int, width: int, height: int):
        super().__init__(f"pixel ({x}, {y}) outside {width}x{height} bitmap")
        self.x, self.y = x, y


class Bitmap:
    def __init__(self, width: int, height: int, data: Optional[np.ndarray] = None):
        width, height = int(width), int(height)
        if width < 0 or height < 0:
            raise ValueError(f"negative bitmap size {width}x{height}")
        if data is None:
            data = np.ones(width * height, dtype=bool)
        else:
            data = np.asarray(data, dtype=bool).ravel()
            if data.size != width * height:
                raise ValueError(f"data has {data.size} pixels, expected {width}x{height}")
        self._data = data
        self._width = width
        self._height = height

    @classmethod
    def from_bools(cls, arr: np.ndarray) -> "Bitmap":
        """Build from a (H, W) array; anything truthy is white."""
        arr = np.asarray(arr)
        if arr.ndim != 2:
            raise ValueError(f"expected a 2-D array, got shape {arr.shape}")
        h, w = arr.shape
        return cls(w, h, np.array(arr, dtype=bool).ravel())

    # ------------------------------------------------------------------ #
    # Dimensions                                                         #
    # ------------------------------------------------------------------ #

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def dimensions(self) -> Tuple[int, int]:
        return self._width, self._height

    @property
    def data(self) -> np.ndarray:
        """Flat row-major pixels (read-only view)."""
        v = self._data.view()
        v.flags.writeable = False
        return v

    def __len__(self) -> int:
        return self._data.size

    def __eq__(self, other) -> bool:
        if not isinstance(other, Bitmap):
            return NotImplemented
        return self.dimensions == other.dimensions and np.array_equal(self._data, other._data)

    def __repr__(self) -> str:
        return f"Bitmap({self._width}x{self._height})"

    # ------------------------------------------------------------------ #
    # Pixel access                                                       #
    # ------------------------------------------------------------------ #

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def get(self, x: int, y: int) -> bool:
        if not self._in_bounds(x, y):
            raise PixelOutOfBounds(x, y, self._width, self._height)
        return bool(self._data[y * self._width + x])

    def set(self, x: int, y: int, value: bool) -> None:
        if not self._in_bounds(x, y):
            raise PixelOutOfBounds(x, y, self._width, self._height)
        self._data[y * self._width + x] = value

    def get_checked(self, x: int, y: int) -> Optional[bool]:
        if not self._in_bounds(x, y):
            return None
        return bool(self._data[y * self._width + x])

    def set_checked(self, x: int, y: int, value: bool) -> Optional[bool]:
        """Write a pixel; returns the previous value, or None if (x, y) is outside."""
        if not self._in_bounds(x, y):
            return None
        i = y * self._width + x
        old = bool(self._data[i])
        self._data[i] = value
        return old

    def get_clamped(self, x: int, y: int) -> bool:
        """Read with coordinates saturated to the bitmap edges. An empty bitmap reads white."""
        if self._data.size == 0:
            return True
        x = min(max(x, 0), self._width - 1)
        y = min(max(y, 0), self._height - 1)
        return bool(self._data[y * self._width + x])

    def sample(self, xs: np.ndarray, ys: np.ndarray, default: bool = True) -> np.ndarray:
        """
        Vectorised checked read: one value per (xs[i], ys[i]) pair, `default`
        wherever the coordinate falls outside the bitmap.
        """
        xs = np.asarray(xs, dtype=np.int64)
        ys = np.asarray(ys, dtype=np.int64)
        out = np.full(xs.shape, default, dtype=bool)
        ok = (xs >= 0) & (xs < self._width) & (ys >= 0) & (ys < self._height)
        out[ok] = self._data[ys[ok] * self._width + xs[ok]]
        return out

    # ------------------------------------------------------------------ #
    # Lines                                                              #
    # ------------------------------------------------------------------ #

    def row(self, y: int) -> np.ndarray:
        if not 0 <= y < self._height:
            raise PixelOutOfBounds(0, y, self._width, self._height)
        return self._data[y * self._width:(y + 1) * self._width]

    def column(self, x: int) -> np.ndarray:
        if not 0 <= x < self._width:
            raise PixelOutOfBounds(x, 0, self._width, self._height)
        return self._data[x::self._width]

    def rows(self) -> "Rows":
        return Rows(self, writable=False)

    def rows_mut(self) -> "Rows":
        return Rows(self, writable=True)

    def to_array(self) -> np.ndarray:
        """(H, W) uint8 image, 255 = white, ready for cv2.imwrite."""
        return np.where(self._data, 255, 0).astype(np.uint8).reshape(self._height, self._width)


class Rows:
    """
    Restartable view over a bitmap's rows. Each item is a 1-D numpy view of
    one row (writable only when obtained through `Bitmap.rows_mut`).
    Iterating `reversed(rows)` yields exactly the forward rows in reverse.
    """

    def __init__(self, bitmap: Bitmap, writable: bool = False):
        self._bmp = bitmap
        self._writable = writable

    def _view(self, y: int) -> np.ndarray:
        v = self._bmp.row(y)
        if not self._writable:
            v = v.view()
            v.flags.writeable = False
        return v

    def __len__(self) -> int:
        return self._bmp.height

    def __iter__(self) -> Iterator[np.ndarray]:
        for y in range(self._bmp.height):
            yield self._view(y)

    def __reversed__(self) -> Iterator[np.ndarray]:
        for y in range(self._bmp.height - 1, -1, -1):
            yield self._view(y)

    def nth(self, n: int) -> Optional[np.ndarray]:
        """n-th row from the top, or None past the end."""
        if 0 <= n < self._bmp.height:
            return self._view(n)
        return None

    def nth_back(self, n: int) -> Optional[np.ndarray]:
        """n-th row from the bottom, or None past the end."""
        return self.nth(self._bmp.height - 1 - n) if n >= 0 else None

    def last(self) -> Optional[np.ndarray]:
        return self.nth_back(0)
