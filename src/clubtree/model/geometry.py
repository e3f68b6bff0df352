"""
Geometric Primitives for the tree canvas.

Canvas coordinates: x grows to the right (sibling axis), y grows downwards
(depth axis). A node position is the centre of its card.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Point:
    """A point on the 2D canvas."""
    x: float
    y: float

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y])


ORIGIN = Point(0.0, 0.0)


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class Box:
    """Axis aligned rectangle given by its edges."""
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center(self) -> Point:
        return Point((self.left + self.right) / 2, (self.top + self.bottom) / 2)

    def overlaps(self, other: Box) -> bool:
        """True if the interiors intersect (touching edges do not count)."""
        return (
            self.left < other.right and other.left < self.right
            and self.top < other.bottom and other.top < self.bottom
        )


@dataclass(frozen=True)
class Placement:
    """Where a card sits and how big it is: one frame of a transition."""
    position: Point
    size: Size

    @property
    def box(self) -> Box:
        hw, hh = self.size.width / 2, self.size.height / 2
        return Box(self.position.x - hw, self.position.y - hh, self.position.x + hw, self.position.y + hh)

    @property
    def top_anchor(self) -> Point:
        """Centre of the top edge, where the incoming edge ends."""
        return Point(self.position.x, self.position.y - self.size.height / 2)

    @property
    def bottom_anchor(self) -> Point:
        """Centre of the bottom edge, where outgoing edges start."""
        return Point(self.position.x, self.position.y + self.size.height / 2)

    def moved_to(self, position: Point) -> Placement:
        return Placement(position=position, size=self.size)
