"""
Geometry primitives for the layout engine.

Provides the small value types shared by every phase:
- Point: an immutable 2D coordinate
- Rect: an axis-aligned rectangle with gap/overlap helpers
- Grid snapping helpers (nearest, floor and ceil to a cell multiple)
"""

import math
from dataclasses import dataclass
from typing import Tuple

# Tolerance used when comparing floating point coordinates
EPSILON = 1e-6


@dataclass(frozen=True)
class Point:
    """A 2D point in layout units."""

    x: float
    y: float

    def translate(self, dx: float, dy: float) -> "Point":
        return Point(self.x + dx, self.y + dy)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass
class Rect:
    """Axis-aligned rectangle given by its top-left corner and size."""

    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def center(self) -> Point:
        return Point(self.center_x, self.center_y)

    def gap(self, other: "Rect") -> Tuple[float, float]:
        """
        Signed gaps between two rectangles along each axis.

        A positive value is the empty space between the boxes on that axis,
        a negative value is the depth of the overlap of their projections.
        """
        gap_x = abs(other.center_x - self.center_x) - (self.width + other.width) / 2
        gap_y = abs(other.center_y - self.center_y) - (self.height + other.height) / 2
        return gap_x, gap_y

    def separation(self, other: "Rect") -> float:
        """
        Distance between two boxes measured along the better separated axis.

        Two boxes are at least ``d`` apart when their projections are at least
        ``d`` apart on one of the axes, so this is the larger of the two gaps.
        """
        return max(self.gap(other))


def snap(value: float, cell_size: float) -> float:
    """Snap a coordinate to the nearest multiple of the cell size."""
    return round(value / cell_size) * cell_size


def snap_down(value: float, cell_size: float) -> float:
    """Largest multiple of the cell size that is <= value."""
    return math.floor(value / cell_size + EPSILON) * cell_size


def snap_up(value: float, cell_size: float) -> float:
    """Smallest multiple of the cell size that is >= value."""
    return math.ceil(value / cell_size - EPSILON) * cell_size


def is_grid_aligned(value: float, cell_size: float, tolerance: float = EPSILON) -> bool:
    """Check if a coordinate is an integer multiple of the cell size."""
    ratio = value / cell_size
    return abs(ratio - round(ratio)) <= tolerance


def is_axis_aligned(a: Point, b: Point) -> bool:
    """Check if the segment a-b is purely horizontal or vertical."""
    return abs(a.x - b.x) <= EPSILON or abs(a.y - b.y) <= EPSILON
