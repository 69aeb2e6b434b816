"""
Core contracts and simple data types shared across stages.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import numpy as np

from qrscan.core.bitmap import Bitmap


@dataclass(frozen=True)
class Point:
    """A 2D coordinate. Integer while scanning, float during geometry."""
    x: float
    y: float

    def to_float(self) -> "Point":
        return Point(float(self.x), float(self.y))

    def dist_to(self, other: "Point") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def angle_to(self, other: "Point") -> float:
        """Angle of the vector self→other, in (-pi, pi]."""
        return math.atan2(other.y - self.y, other.x - self.x)


@dataclass(frozen=True)
class Marker:
    """
    Location of one detected finder pattern.

    This is an *axis-aligned* box and says nothing about the tilt of the
    pattern. The only guarantee is that the pattern's edges pass through the
    midpoints of the box borders, e.g. `(min.x, mid.y)` lies on its left edge.
    """
    min: Point
    mid: Point
    max: Point

    @classmethod
    def from_bounds(cls, x_min, y_min, x_mid, y_mid, x_max, y_max) -> "Marker":
        return cls(Point(x_min, y_min), Point(x_mid, y_mid), Point(x_max, y_max))

    def up(self) -> Point:
        return Point(self.mid.x, self.min.y)

    def down(self) -> Point:
        return Point(self.mid.x, self.max.y)

    def left(self) -> Point:
        return Point(self.min.x, self.mid.y)

    def right(self) -> Point:
        return Point(self.max.x, self.mid.y)

    def to_float(self) -> "Marker":
        return Marker(self.min.to_float(), self.mid.to_float(), self.max.to_float())


@dataclass
class Corners:
    """
    Three outer corners of the code in image coordinates (pixels), ordered:
    [top-left, top-right, bottom-left].

    pts: np.ndarray with shape (3, 2), dtype float64
    """
    pts: np.ndarray

    @classmethod
    def from_points(cls, tl: Point, tr: Point, bl: Point) -> "Corners":
        return cls(np.array([[tl.x, tl.y], [tr.x, tr.y], [bl.x, bl.y]], dtype=np.float64))

    @property
    def top_left(self) -> Point:
        return Point(*map(float, self.pts[0]))

    @property
    def top_right(self) -> Point:
        return Point(*map(float, self.pts[1]))

    @property
    def bottom_left(self) -> Point:
        return Point(*map(float, self.pts[2]))

    def as_tuple(self) -> Tuple[Tuple[float, float], Tuple[float, float], Tuple[float, float]]:
        return tuple(map(tuple, self.pts.astype(float)))  # type: ignore[return-value]


@dataclass
class ScanResult:
    """Everything one frame produced. `corners`/`rectified` are None unless
    exactly three markers were found and the geometry was usable."""
    markers: List[Marker] = field(default_factory=list)
    corners: Optional[Corners] = None
    rectified: Optional[Bitmap] = None

    def code_image(self) -> Optional[np.ndarray]:
        if self.rectified is None:
            return None
        return self.rectified.to_array()
