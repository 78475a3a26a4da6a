"""
Orthogonal connector between two boxes.

A connector owns a start anchor on its source box, an end anchor on its
target box and a single elbow. The path always runs horizontally from the
start anchor to the elbow, then vertically down (or up) to the end anchor,
where an arrowhead points along the final leg.

The connector never touches the boxes themselves. It reads their bounds from
a geometry source (the diagram surface) and recomputes whenever the surface
reports that one of them moved or was resized.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, List, Optional, Protocol, Tuple

from .anchor import Anchor, AnchorMode
from .diagram import InvalidBoxReference
from .geometry import (
    Point, Bounds, DEFAULT_SNAP_INCREMENT,
    closest_edge_point, angle_degrees, rotate,
)

logger = logging.getLogger(__name__)

# Upper bound on start/end re-placement rounds in one recompute
MAX_SETTLE_PASSES = 8


class ConnectorState(Enum):
    """Interaction state of a connector."""
    IDLE = auto()
    SELECTED = auto()
    PENDING_DELETE = auto()  # Waiting on the delete confirmation prompt
    DELETED = auto()         # Terminal


class DeleteDecision(Enum):
    """Answer from the delete confirmation prompt."""
    CONFIRMED = auto()
    CANCELLED = auto()


class BoxGeometrySource(Protocol):
    """Anything that can report the current bounds of a box by id."""

    def get_bounds(self, box_id: str) -> Bounds:
        ...


@dataclass
class ConnectorStyle:
    """Visual constants for a connector."""
    color: str = "#000000"
    highlight_color: str = "#FF0000"
    dash_pattern: Tuple[float, ...] = (5.0, 5.0)
    # Arrow outline in local coordinates, tip at the origin pointing along +x
    arrow_shape: Tuple[Tuple[float, float], ...] = ((0.0, 0.0), (-10.0, 5.0), (-10.0, -5.0))
    label_offset: Tuple[float, float] = (10.0, -10.0)
    endpoint_marker_radius: float = 10.0
    elbow_marker_radius: float = 5.0
    elbow_marker_fill: str = "#000000"
    snap_increment: float = DEFAULT_SNAP_INCREMENT


# ============== Render primitives ==============

@dataclass
class Segment:
    """A straight, dashed line of the connector path."""
    start: Point
    end: Point
    color: str
    dash_pattern: Tuple[float, ...] = (5.0, 5.0)

    @property
    def is_degenerate(self) -> bool:
        return self.start == self.end


@dataclass
class ArrowHead:
    """Filled arrow polygon anchored at the end anchor."""
    tip: Point
    angle: float
    points: List[Point] = field(default_factory=list)
    color: str = "#000000"


@dataclass
class TextLabel:
    text: str
    position: Point


@dataclass
class AnchorMarker:
    """Round drag handle for an anchor. fill None means transparent."""
    center: Point
    radius: float
    fill: Optional[str] = None


@dataclass
class ConnectorPrimitives:
    """
    Everything a rendering surface needs to draw one connector.

    In routed mode horizontal_segment and vertical_segment are the two
    orthogonal legs. After a free elbow drag they are the start-side and
    end-side legs through the dragged elbow.
    """
    horizontal_segment: Segment
    vertical_segment: Segment
    arrow: ArrowHead
    label: TextLabel
    start_marker: AnchorMarker
    end_marker: AnchorMarker
    elbow_marker: AnchorMarker

    @property
    def segments(self) -> Tuple[Segment, Segment]:
        return (self.horizontal_segment, self.vertical_segment)


ChangeCallback = Callable[["ConnectorModel"], None]


class ConnectorModel:
    """
    Routing engine and interaction state for one connector.

    Routing rules:
    - recompute(): start anchor is projected onto the source box using the
      previous end anchor as reference; the end anchor is then projected
      onto the target box using the new start anchor; the two steps repeat
      until neither anchor moves; elbow = (end.x, start.y).
    - Dragging a boundary anchor moves it along its box's edges and re-routes.
    - Dragging the elbow snaps it to the grid and bends the path through it
      until the next recompute.
    """

    def __init__(
        self,
        source_id: str,
        target_id: str,
        geometry: BoxGeometrySource,
        label: str = "Relation",
        style: Optional[ConnectorStyle] = None,
        connector_id: Optional[str] = None,
    ):
        self.id = connector_id or str(uuid.uuid4())[:8]
        self.source_id = source_id
        self.target_id = target_id
        self.style = style or ConnectorStyle()
        self._geometry = geometry
        self._label = label

        self.start_anchor = Anchor(owner_id=source_id, mode=AnchorMode.BOUNDARY_CONSTRAINED)
        self.end_anchor = Anchor(owner_id=target_id, mode=AnchorMode.BOUNDARY_CONSTRAINED)
        self.elbow_anchor = Anchor(mode=AnchorMode.FREE, snap_increment=self.style.snap_increment)

        self._state = ConnectorState.IDLE
        self._color = self.style.color
        self._original_color: Optional[str] = None
        self._elbow_free = False
        self._arrow_angle = 0.0
        self._primitives: Optional[ConnectorPrimitives] = None

        # Number of full recomputes performed
        self.revision = 0

        self.on_changed: List[ChangeCallback] = []
        self.on_removed: List[ChangeCallback] = []

        self._place_initial()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConnectorState:
        return self._state

    @property
    def is_selected(self) -> bool:
        return self._state == ConnectorState.SELECTED

    @property
    def is_deleted(self) -> bool:
        return self._state == ConnectorState.DELETED

    @property
    def start_position(self) -> Point:
        return self.start_anchor.position

    @property
    def end_position(self) -> Point:
        return self.end_anchor.position

    @property
    def elbow(self) -> Point:
        return self.elbow_anchor.position

    @property
    def elbow_is_free(self) -> bool:
        return self._elbow_free

    @property
    def arrow_angle(self) -> float:
        return self._arrow_angle

    @property
    def color(self) -> str:
        return self._color

    @property
    def original_color(self) -> Optional[str]:
        """Colour restored when deselecting; None until the first toggle."""
        return self._original_color

    @property
    def primitives(self) -> Optional[ConnectorPrimitives]:
        """Current render primitives, None once deleted."""
        return self._primitives

    @property
    def label(self) -> str:
        return self._label

    @label.setter
    def label(self, text: str):
        self._label = text
        if self._primitives is not None:
            self._primitives.label.text = text
            self._notify_changed()

    def connects(self, box_id: str) -> bool:
        return box_id in (self.source_id, self.target_id)

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def _place_initial(self):
        """
        Seed the anchors and run the first recompute.

        The end anchor has no previous position yet, so it is seeded by
        projecting the source box's centre onto the target box.
        """
        source_bounds = self._geometry.get_bounds(self.source_id)
        target_bounds = self._geometry.get_bounds(self.target_id)
        seed, _ = closest_edge_point(target_bounds, source_bounds.center)
        self.start_anchor.move_to(source_bounds.center)
        # No edge yet; the first recompute pass assigns one
        self.end_anchor.move_to(seed)
        self.recompute()

    def recompute(self):
        """
        Re-derive anchors, elbow, arrow and label from current box bounds.

        Discards any free elbow placement. A missing box tears the connector
        down instead of raising.
        """
        if self.is_deleted:
            return

        try:
            source_bounds = self._geometry.get_bounds(self.source_id)
            target_bounds = self._geometry.get_bounds(self.target_id)
        except InvalidBoxReference as e:
            logger.warning(f"Connector {self.id} lost box {e.box_id}; tearing down")
            self.teardown()
            return

        # Re-place both anchors until neither moves, so a second call is a no-op
        for _ in range(MAX_SETTLE_PASSES):
            start_moved = self.start_anchor.settle_on_closest_edge(source_bounds, self.end_anchor.position)
            end_moved = self.end_anchor.settle_on_closest_edge(target_bounds, self.start_anchor.position)
            if not (start_moved or end_moved):
                break
        else:
            logger.debug(f"Connector {self.id} anchors still moving after {MAX_SETTLE_PASSES} passes")
        self._elbow_free = False
        self.revision += 1

        logger.debug(
            f"Connector {self.id} recompute #{self.revision}: "
            f"start={self.start_anchor.position.to_tuple()} ({self.start_anchor.edge.name}), "
            f"end={self.end_anchor.position.to_tuple()} ({self.end_anchor.edge.name})"
        )
        self._reroute()

    def _reroute(self):
        """Rebuild elbow (unless free), segments, arrow and label from the anchors."""
        start = self.start_anchor.position
        end = self.end_anchor.position

        if not self._elbow_free:
            self.elbow_anchor.move_to(Point(end.x, start.y))
        elbow = self.elbow_anchor.position

        if self._elbow_free:
            first = Segment(start, elbow, self._color, self.style.dash_pattern)
        else:
            first = Segment(start, Point(elbow.x, start.y), self._color, self.style.dash_pattern)
        second = Segment(elbow, end, self._color, self.style.dash_pattern)

        # Zero-length final leg has no direction; keep the previous heading
        if end != elbow:
            self._arrow_angle = angle_degrees(elbow, end)

        dx, dy = self.style.label_offset
        self._primitives = ConnectorPrimitives(
            horizontal_segment=first,
            vertical_segment=second,
            arrow=ArrowHead(
                tip=end,
                angle=self._arrow_angle,
                points=self._arrow_points(end, self._arrow_angle),
                color=self._color,
            ),
            label=TextLabel(self._label, elbow.offset(dx, dy)),
            start_marker=AnchorMarker(start, self.style.endpoint_marker_radius),
            end_marker=AnchorMarker(end, self.style.endpoint_marker_radius),
            elbow_marker=AnchorMarker(elbow, self.style.elbow_marker_radius, self.style.elbow_marker_fill),
        )
        self._notify_changed()

    def _arrow_points(self, tip: Point, angle: float) -> List[Point]:
        return [rotate(Point(x, y), angle) + tip for x, y in self.style.arrow_shape]

    def on_box_changed(self, box_id: str):
        """Box-change subscription callback."""
        if self.connects(box_id):
            self.recompute()

    # ------------------------------------------------------------------
    # Dragging
    # ------------------------------------------------------------------

    def drag_start_anchor(self, pointer: Point) -> Optional[Point]:
        """Drag the start anchor along the source box boundary."""
        return self._drag_boundary_anchor(self.start_anchor, pointer)

    def drag_end_anchor(self, pointer: Point) -> Optional[Point]:
        """Drag the end anchor along the target box boundary."""
        return self._drag_boundary_anchor(self.end_anchor, pointer)

    def _drag_boundary_anchor(self, anchor: Anchor, pointer: Point) -> Optional[Point]:
        if self.is_deleted:
            return None
        try:
            bounds = self._geometry.get_bounds(anchor.owner_id)
        except InvalidBoxReference as e:
            logger.warning(f"Connector {self.id} lost box {e.box_id} during drag; tearing down")
            self.teardown()
            return None
        anchor.drag_to(pointer, bounds)
        self._reroute()
        return anchor.position

    def drag_elbow(self, pointer: Point) -> Optional[Point]:
        """
        Drag the elbow to a grid-snapped free position.

        Stays in effect until the next recompute (box move or resize).
        """
        if self.is_deleted:
            return None
        self.elbow_anchor.drag_to(pointer)
        self._elbow_free = True
        self._reroute()
        return self.elbow_anchor.position

    # ------------------------------------------------------------------
    # Selection and colour
    # ------------------------------------------------------------------

    def toggle_selection(self) -> bool:
        """
        Swap the line colour between its original and the highlight colour.

        Returns:
            True if the connector is selected afterwards
        """
        if self._state == ConnectorState.IDLE:
            if self._original_color is None:
                self._original_color = self._color
            self._state = ConnectorState.SELECTED
            self._apply_color(self.style.highlight_color)
        elif self._state == ConnectorState.SELECTED:
            self._state = ConnectorState.IDLE
            self._apply_color(self._original_color)
        return self.is_selected

    def set_color(self, color: str):
        """
        Change the base line colour.

        While selected, the new colour is stored and shown on deselect.
        """
        if self.is_deleted:
            return
        self._original_color = color
        if self._state != ConnectorState.SELECTED:
            self._apply_color(color)

    def _apply_color(self, color: str):
        self._color = color
        if self._primitives is not None:
            for segment in self._primitives.segments:
                segment.color = color
            self._primitives.arrow.color = color
            self._notify_changed()

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def request_delete(self, prompt: Callable[[], DeleteDecision]) -> bool:
        """
        Ask for confirmation and delete the connector if confirmed.

        The prompt blocks until the user answers. Cancelling (or a prompt
        that raises) leaves the connector exactly as it was.

        Returns:
            True if the connector was deleted
        """
        if self._state in (ConnectorState.DELETED, ConnectorState.PENDING_DELETE):
            return False

        prior_state = self._state
        self._state = ConnectorState.PENDING_DELETE
        try:
            decision = prompt()
        except Exception:
            self._state = prior_state
            raise

        if decision == DeleteDecision.CONFIRMED:
            self._state = prior_state
            self.teardown()
            return True

        self._state = prior_state
        logger.debug(f"Connector {self.id} delete cancelled")
        return False

    def teardown(self):
        """Drop all render primitives and anchors. Terminal."""
        if self.is_deleted:
            return
        self._state = ConnectorState.DELETED
        self._primitives = None
        logger.info(f"Connector {self.id} ({self.source_id} -> {self.target_id}) deleted")
        for callback in list(self.on_removed):
            callback(self)
        self.on_changed.clear()
        self.on_removed.clear()

    def _notify_changed(self):
        for callback in list(self.on_changed):
            callback(self)
