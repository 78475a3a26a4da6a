"""
Geometry primitives for connector routing.

Points and box bounds are immutable value types. All functions here are
total: degenerate boxes (zero or negative size) are clamped, never rejected.
"""

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Tuple


DEFAULT_SNAP_INCREMENT = 5.0


@dataclass(frozen=True)
class Point:
    """2D point on the diagram."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def offset(self, dx: float, dy: float) -> "Point":
        return Point(self.x + dx, self.y + dy)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


class Edge(Enum):
    """
    Box edges.

    Declaration order is the tie-break order used when a reference point
    is equally close to several edges.
    """
    LEFT = auto()
    RIGHT = auto()
    TOP = auto()
    BOTTOM = auto()


EDGE_ORDER = (Edge.LEFT, Edge.RIGHT, Edge.TOP, Edge.BOTTOM)


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned rectangle given as (left, top, width, height)."""
    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def right(self) -> float:
        return self.left + max(self.width, 0.0)

    @property
    def bottom(self) -> float:
        return self.top + max(self.height, 0.0)

    @property
    def center(self) -> Point:
        return Point((self.left + self.right) / 2.0, (self.top + self.bottom) / 2.0)

    def normalized(self) -> "Bounds":
        """Return bounds with negative sizes clamped to zero."""
        return Bounds(self.left, self.top, max(self.width, 0.0), max(self.height, 0.0))

    def contains_on_boundary(self, p: Point, tolerance: float = 1e-9) -> bool:
        """Check that a point lies on the boundary rectangle."""
        within_x = self.left - tolerance <= p.x <= self.right + tolerance
        within_y = self.top - tolerance <= p.y <= self.bottom + tolerance
        if not (within_x and within_y):
            return False
        return (
            abs(p.x - self.left) <= tolerance or abs(p.x - self.right) <= tolerance or
            abs(p.y - self.top) <= tolerance or abs(p.y - self.bottom) <= tolerance
        )

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.left, self.top, self.width, self.height)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return min(max(value, low), high)


def edge_distances(bounds: Bounds, reference: Point) -> Tuple[float, float, float, float]:
    """Perpendicular distances from reference to the left, right, top and bottom edge lines."""
    return (
        abs(reference.x - bounds.left),
        abs(reference.x - bounds.right),
        abs(reference.y - bounds.top),
        abs(reference.y - bounds.bottom),
    )


def closest_edge(bounds: Bounds, reference: Point) -> Edge:
    """Pick the edge nearest to reference; first minimal edge in EDGE_ORDER wins."""
    distances = edge_distances(bounds.normalized(), reference)
    best = 0
    for i in range(1, len(EDGE_ORDER)):
        if distances[i] < distances[best]:
            best = i
    return EDGE_ORDER[best]


def point_on_edge(bounds: Bounds, edge: Edge, reference: Point) -> Point:
    """Project reference onto the given edge, clamped to the edge segment."""
    b = bounds.normalized()
    if edge == Edge.LEFT:
        return Point(b.left, clamp(reference.y, b.top, b.bottom))
    if edge == Edge.RIGHT:
        return Point(b.right, clamp(reference.y, b.top, b.bottom))
    if edge == Edge.TOP:
        return Point(clamp(reference.x, b.left, b.right), b.top)
    return Point(clamp(reference.x, b.left, b.right), b.bottom)


def closest_edge_point(bounds: Bounds, reference: Point) -> Tuple[Point, Edge]:
    """
    Find the boundary point of bounds closest to reference.

    Returns:
        Tuple of (point on the boundary, edge it lies on)
    """
    edge = closest_edge(bounds, reference)
    return point_on_edge(bounds, edge, reference), edge


def snap_to_increment(value: float, increment: float = DEFAULT_SNAP_INCREMENT) -> float:
    """
    Snap a value to the nearest multiple of increment.

    Halves round up (212.5 -> 215), not to even as the built-in round() does.
    """
    if increment <= 0:
        return value
    return math.floor(value / increment + 0.5) * increment


def snap_point(p: Point, increment: float = DEFAULT_SNAP_INCREMENT) -> Point:
    """Snap both axes of a point independently."""
    return Point(snap_to_increment(p.x, increment), snap_to_increment(p.y, increment))


def angle_degrees(origin: Point, target: Point) -> float:
    """Direction from origin to target in degrees (y axis pointing down)."""
    return math.degrees(math.atan2(target.y - origin.y, target.x - origin.x))


def rotate(p: Point, degrees: float) -> Point:
    """Rotate a point about the origin."""
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return Point(p.x * c - p.y * s, p.x * s + p.y * c)
