"""
Rectangular areas and bounding boxes for plan layout.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np


@dataclass(frozen=True)
class ViewArea:
    """
    Represents a rectangular area on the page for placing content.

    Attributes:
        x: Left edge position (page units from sheet left)
        y: Top edge position (page units from sheet top)
        width: Width of the area
        height: Height of the area
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        """Left edge x-coordinate."""
        return self.x

    @property
    def right(self) -> float:
        """Right edge x-coordinate."""
        return self.x + self.width

    @property
    def top(self) -> float:
        """Top edge y-coordinate."""
        return self.y

    @property
    def bottom(self) -> float:
        """Bottom edge y-coordinate."""
        return self.y + self.height

    def __repr__(self) -> str:
        return (f"ViewArea(x={self.x:.2f}, y={self.y:.2f}, "
                f"w={self.width:.2f}, h={self.height:.2f})")


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned box in drawing units.

    ``width`` and ``height`` never drop below one unit so that a degenerate
    box cannot cause a division by zero when fitting.
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return max(1.0, self.max_x - self.min_x)

    @property
    def height(self) -> float:
        return max(1.0, self.max_y - self.min_y)

    @property
    def center(self) -> tuple[float, float]:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    @classmethod
    def from_points(cls, points: Iterable[tuple[float, float]]) -> "BoundingBox":
        """Smallest box containing every (x, y) point."""
        arr = np.asarray(list(points), dtype=float).reshape(-1, 2)
        if arr.size == 0:
            raise ValueError("Cannot build a bounding box from no points")
        mins = arr.min(axis=0)
        maxs = arr.max(axis=0)
        return cls(float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))

    def union(self, other: "BoundingBox") -> "BoundingBox":
        """Smallest box containing both boxes."""
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def expand(self, margin: float) -> "BoundingBox":
        """Return a new box grown by margin on all sides."""
        return BoundingBox(
            self.min_x - margin,
            self.min_y - margin,
            self.max_x + margin,
            self.max_y + margin,
        )

    def contains(self, x: float, y: float, tolerance: float = 1e-6) -> bool:
        """True if the point lies inside (or on) the box."""
        return (
            self.min_x - tolerance <= x <= self.max_x + tolerance
            and self.min_y - tolerance <= y <= self.max_y + tolerance
        )

    def contains_box(self, other: "BoundingBox", tolerance: float = 1e-6) -> bool:
        """True if the other box lies completely inside this one."""
        return (
            self.contains(other.min_x, other.min_y, tolerance)
            and self.contains(other.max_x, other.max_y, tolerance)
        )


def union_all(boxes: Iterable[BoundingBox]) -> BoundingBox | None:
    """Union of all boxes, or None if there are none."""
    result = None
    for box in boxes:
        result = box if result is None else result.union(box)
    return result
