"""
Models package.

This package contains the geometry and connector models of the package
diagram editor:
- Geometry primitives (Point, Bounds, Edge, snapping helpers)
- Anchors (Anchor, AnchorMode)
- Connectors and their render primitives (ConnectorModel, ConnectorPrimitives)
- Diagram boxes (BoxModel)
"""

from .geometry import (
    Point,
    Bounds,
    Edge,
    EDGE_ORDER,
    DEFAULT_SNAP_INCREMENT,
    clamp,
    edge_distances,
    closest_edge,
    point_on_edge,
    closest_edge_point,
    snap_to_increment,
    snap_point,
    angle_degrees,
    rotate,
)
from .anchor import (
    AnchorMode,
    Anchor,
)
from .diagram import (
    InvalidBoxReference,
    BoxModel,
)
from .connector import (
    ConnectorState,
    DeleteDecision,
    BoxGeometrySource,
    ConnectorStyle,
    Segment,
    ArrowHead,
    TextLabel,
    AnchorMarker,
    ConnectorPrimitives,
    ConnectorModel,
)


__all__ = [
    # Geometry
    "Point",
    "Bounds",
    "Edge",
    "EDGE_ORDER",
    "DEFAULT_SNAP_INCREMENT",
    "clamp",
    "edge_distances",
    "closest_edge",
    "point_on_edge",
    "closest_edge_point",
    "snap_to_increment",
    "snap_point",
    "angle_degrees",
    "rotate",
    # Anchors
    "AnchorMode",
    "Anchor",
    # Diagram
    "InvalidBoxReference",
    "BoxModel",
    # Connectors
    "ConnectorState",
    "DeleteDecision",
    "BoxGeometrySource",
    "ConnectorStyle",
    "Segment",
    "ArrowHead",
    "TextLabel",
    "AnchorMarker",
    "ConnectorPrimitives",
    "ConnectorModel",
]
