"""
Selection and interaction controller.

Translates low-level pointer events on connector primitives into connector
operations, and runs the two-click source/target pairing that creates new
connectors in relationship mode.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional

from models.connector import ConnectorModel, DeleteDecision
from models.geometry import Point
from .diagram_surface import DiagramSurface

logger = logging.getLogger(__name__)


class PointerEventKind(Enum):
    """Pointer gestures delivered by the view layer."""
    PRESS = auto()
    CLICK = auto()                   # Single primary click
    DRAG = auto()
    SECONDARY_DOUBLE_PRESS = auto()  # Double press of the secondary button


class PrimitiveRole(Enum):
    """Which part of a connector an event landed on."""
    HORIZONTAL_SEGMENT = auto()
    VERTICAL_SEGMENT = auto()
    START_ANCHOR = auto()
    END_ANCHOR = auto()
    ELBOW = auto()

    @property
    def is_segment(self) -> bool:
        return self in (PrimitiveRole.HORIZONTAL_SEGMENT, PrimitiveRole.VERTICAL_SEGMENT)


@dataclass(frozen=True)
class PrimitiveTarget:
    connector_id: str
    role: PrimitiveRole


@dataclass(frozen=True)
class PointerEvent:
    """A pointer event aimed at a connector primitive."""
    kind: PointerEventKind
    position: Point
    target: PrimitiveTarget


ConfirmDelete = Callable[[ConnectorModel], DeleteDecision]


class InteractionController:
    """
    Maps pointer events to connector state transitions.

    Args:
        surface: Diagram surface owning boxes and connectors
        confirm_delete: Blocking prompt asked before a connector is deleted
    """

    def __init__(self, surface: DiagramSurface, confirm_delete: ConfirmDelete):
        self.surface = surface
        self._confirm_delete = confirm_delete
        self._link_mode = False
        self._active_target: Optional[PrimitiveTarget] = None

    # ============== Pointer events ==============

    @property
    def active_target(self) -> Optional[PrimitiveTarget]:
        """Primitive that received the last press, if any."""
        return self._active_target

    def handle(self, event: PointerEvent) -> bool:
        """
        Dispatch a pointer event.

        Returns:
            True if the event changed or was consumed by a connector
        """
        connector = self.surface.get_connector(event.target.connector_id)
        if connector is None or connector.is_deleted:
            logger.debug(f"Ignoring {event.kind.name} for unknown connector {event.target.connector_id}")
            return False

        role = event.target.role

        if event.kind == PointerEventKind.PRESS:
            self._active_target = event.target
            return True

        if event.kind == PointerEventKind.CLICK:
            if not role.is_segment:
                return False
            selected = connector.toggle_selection()
            logger.debug(f"Connector {connector.id} {'selected' if selected else 'deselected'}")
            return True

        if event.kind == PointerEventKind.DRAG:
            # Drags only follow the primitive that received the last press
            if event.target != self._active_target:
                return False
            if role == PrimitiveRole.START_ANCHOR:
                return connector.drag_start_anchor(event.position) is not None
            if role == PrimitiveRole.END_ANCHOR:
                return connector.drag_end_anchor(event.position) is not None
            if role == PrimitiveRole.ELBOW:
                return connector.drag_elbow(event.position) is not None
            return False

        if event.kind == PointerEventKind.SECONDARY_DOUBLE_PRESS:
            if not role.is_segment:
                return False
            return self.surface.delete_connector(
                connector.id, lambda: self._confirm_delete(connector)
            )

        return False

    # ============== Relationship mode ==============

    @property
    def link_mode(self) -> bool:
        return self._link_mode

    def set_link_mode(self, enabled: bool):
        """Enter or leave relationship mode. Leaving clears any pending source."""
        self._link_mode = enabled
        if not enabled:
            self.surface.set_pending_source(None)

    def click_box(self, box_id: str) -> Optional[ConnectorModel]:
        """
        Handle a click on a box while in relationship mode.

        The first click marks the source; a click on a different box creates
        the connector, a second click on the same box cancels the pairing.
        """
        if not self._link_mode or self.surface.get_box(box_id) is None:
            return None

        source_id = self.surface.pending_source
        if source_id is None:
            self.surface.set_pending_source(box_id)
            return None

        self.surface.set_pending_source(None)
        if source_id == box_id:
            return None
        return self.surface.connect(source_id, box_id)
