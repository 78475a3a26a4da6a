"""
Connector anchors.

An anchor is a draggable point that terminates or bends a connector. It is
either bound to the boundary of its owner box or free floating on a grid.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from .geometry import (
    Point, Bounds, Edge, DEFAULT_SNAP_INCREMENT,
    closest_edge_point, point_on_edge, snap_point,
)


class AnchorMode(Enum):
    """How an anchor reacts to being placed or dragged."""
    BOUNDARY_CONSTRAINED = auto()  # Always projected onto the owner's edge
    FREE = auto()                  # Anywhere, snapped to the grid


@dataclass
class Anchor:
    """
    A connector anchor.

    Attributes:
        position: Current position
        owner_id: Box the anchor is bound to (None for free anchors)
        mode: Placement policy
        edge: Edge the anchor currently sits on (boundary anchors only)
        snap_increment: Grid size used by free anchors
    """
    position: Point = Point()
    owner_id: Optional[str] = None
    mode: AnchorMode = AnchorMode.BOUNDARY_CONSTRAINED
    edge: Optional[Edge] = None
    snap_increment: float = DEFAULT_SNAP_INCREMENT

    @property
    def is_free(self) -> bool:
        return self.mode == AnchorMode.FREE

    def place_on_closest_edge(self, bounds: Bounds, reference: Point) -> Point:
        """
        Move the anchor to the boundary point of bounds closest to reference.

        The edge with the smallest perpendicular distance to reference wins,
        ties going to left, right, top, bottom in that order. The returned
        point is the reference projected onto that edge and clamped to it.
        """
        self.position, self.edge = closest_edge_point(bounds, reference)
        return self.position

    def settle_on_closest_edge(self, bounds: Bounds, reference: Point) -> bool:
        """
        Like place_on_closest_edge, but an anchor that lands where it already
        is keeps its current edge if that edge still passes through it.

        Returns:
            True if the position changed
        """
        point, edge = closest_edge_point(bounds, reference)
        if point == self.position:
            if self.edge is None or point_on_edge(bounds, self.edge, point) != point:
                self.edge = edge
            return False
        self.position, self.edge = point, edge
        return True

    def drag_to(self, pointer: Point, bounds: Optional[Bounds] = None) -> Point:
        """
        Follow a pointer drag.

        Boundary anchors re-run the edge placement with the raw pointer as
        reference, so crossing a corner's diagonal pops the anchor onto the
        adjacent edge. Free anchors snap each axis to the grid.
        """
        if self.is_free:
            self.position = snap_point(pointer, self.snap_increment)
            return self.position
        if bounds is None:
            raise ValueError("Boundary-constrained anchor needs its owner's bounds to be dragged")
        return self.place_on_closest_edge(bounds, pointer)

    def move_to(self, position: Point, edge: Optional[Edge] = None):
        """Set the position directly (used for derived anchors like the elbow)."""
        self.position = position
        self.edge = edge
