"""
Diagram box models.

Boxes are owned by the diagram surface. Connectors only ever refer to them
by id and read their bounds through the surface.
"""

from dataclasses import dataclass, field
import uuid

from .geometry import Bounds, Point


class InvalidBoxReference(LookupError):
    """A box id that is not (or no longer) part of the diagram."""

    def __init__(self, box_id: str):
        super().__init__(f"Unknown box: {box_id}")
        self.box_id = box_id


@dataclass
class BoxModel:
    """
    A rectangular diagram element (package or class box).

    Attributes:
        id: Unique identifier
        name: Display name
        left, top: Top-left corner in scene coordinates
        width, height: Size in scene units
    """
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    name: str = "Package"
    left: float = 0.0
    top: float = 0.0
    width: float = 120.0
    height: float = 80.0

    @property
    def bounds(self) -> Bounds:
        return Bounds(self.left, self.top, self.width, self.height)

    @property
    def position(self) -> Point:
        return Point(self.left, self.top)

    @property
    def center(self) -> Point:
        return self.bounds.center
