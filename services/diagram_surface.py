"""
Diagram Surface.

Owns the boxes of a diagram and the connectors between them. Box geometry
changes are announced through an explicit publish/subscribe registry keyed
by box id, so every connector attached to a box is recomputed after each
move or resize. Rendering layers attach as render sinks and receive the
connectors' primitives whenever they change.
"""

import logging
from typing import Callable, Dict, List, Optional, Protocol

from models.connector import ConnectorModel, ConnectorStyle, DeleteDecision
from models.diagram import BoxModel, InvalidBoxReference
from models.geometry import Bounds

logger = logging.getLogger(__name__)


BoxChangeCallback = Callable[[str], None]


class RenderSink(Protocol):
    """Receiver of render updates (e.g. a graphics scene)."""

    def connector_changed(self, connector: ConnectorModel) -> None:
        ...

    def connector_removed(self, connector_id: str) -> None:
        ...

    def pending_source_changed(self, box_id: Optional[str]) -> None:
        ...


class BoxChangeRegistry:
    """
    Publish/subscribe registry for box geometry changes.

    Subscribers are called synchronously, in subscription order, with the
    id of the box that changed.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[BoxChangeCallback]] = {}

    def subscribe(self, box_id: str, callback: BoxChangeCallback):
        """Register callback for changes to box_id. Duplicate registrations are ignored."""
        callbacks = self._subscribers.setdefault(box_id, [])
        if callback not in callbacks:
            callbacks.append(callback)

    def unsubscribe(self, box_id: str, callback: BoxChangeCallback) -> bool:
        """Remove a callback. Returns False if it was not subscribed."""
        callbacks = self._subscribers.get(box_id)
        if not callbacks or callback not in callbacks:
            return False
        callbacks.remove(callback)
        if not callbacks:
            del self._subscribers[box_id]
        return True

    def unsubscribe_all(self, box_id: str):
        self._subscribers.pop(box_id, None)

    def subscriber_count(self, box_id: str) -> int:
        return len(self._subscribers.get(box_id, []))

    def publish(self, box_id: str):
        """Notify every subscriber of box_id."""
        for callback in list(self._subscribers.get(box_id, [])):
            callback(box_id)


class DiagramSurface:
    """
    Root container for a package diagram.

    Boxes are mutated only through this class; each mutation is followed by
    a notification to every connector attached to the box.
    """

    def __init__(self, style: Optional[ConnectorStyle] = None, default_label: str = "Dependency"):
        self.boxes: Dict[str, BoxModel] = {}
        self.connectors: Dict[str, ConnectorModel] = {}
        self.registry = BoxChangeRegistry()
        self.style = style or ConnectorStyle()
        self.default_label = default_label

        self._sinks: List[RenderSink] = []
        self._pending_source: Optional[str] = None

    # ============== Geometry source ==============

    def get_bounds(self, box_id: str) -> Bounds:
        """Current bounds of a box. Raises InvalidBoxReference for unknown ids."""
        box = self.boxes.get(box_id)
        if box is None:
            raise InvalidBoxReference(box_id)
        return box.bounds

    def subscribe(self, box_id: str, callback: BoxChangeCallback):
        self.registry.subscribe(box_id, callback)

    def unsubscribe(self, box_id: str, callback: BoxChangeCallback) -> bool:
        return self.registry.unsubscribe(box_id, callback)

    # ============== Render sinks ==============

    def add_render_sink(self, sink: RenderSink):
        if sink not in self._sinks:
            self._sinks.append(sink)

    def remove_render_sink(self, sink: RenderSink):
        if sink in self._sinks:
            self._sinks.remove(sink)

    # ============== Boxes ==============

    def add_box(
        self,
        name: str = "Package",
        left: float = 0.0,
        top: float = 0.0,
        width: float = 120.0,
        height: float = 80.0,
        box_id: Optional[str] = None,
    ) -> BoxModel:
        """Create and add a new box."""
        box = BoxModel(name=name, left=left, top=top, width=width, height=height)
        if box_id:
            box.id = box_id
        self.boxes[box.id] = box
        logger.debug(f"Added box {box.id} '{name}' at {box.bounds.to_tuple()}")
        return box

    def get_box(self, box_id: str) -> Optional[BoxModel]:
        """Get a box by ID."""
        return self.boxes.get(box_id)

    def _require_box(self, box_id: str) -> BoxModel:
        box = self.boxes.get(box_id)
        if box is None:
            raise InvalidBoxReference(box_id)
        return box

    def move_box(self, box_id: str, left: float, top: float):
        """Move a box to a new top-left position and notify its connectors."""
        box = self._require_box(box_id)
        if box.left == left and box.top == top:
            return
        box.left = left
        box.top = top
        self.registry.publish(box_id)

    def move_box_by(self, box_id: str, dx: float, dy: float):
        box = self._require_box(box_id)
        self.move_box(box_id, box.left + dx, box.top + dy)

    def resize_box(self, box_id: str, width: float, height: float):
        """Resize a box and notify its connectors. Negative sizes are clamped to zero."""
        box = self._require_box(box_id)
        width = max(width, 0.0)
        height = max(height, 0.0)
        if box.width == width and box.height == height:
            return
        box.width = width
        box.height = height
        self.registry.publish(box_id)

    def remove_box(self, box_id: str) -> Optional[BoxModel]:
        """
        Remove a box.

        Connectors attached to it find the box gone on their next recompute
        and tear themselves down.
        """
        box = self.boxes.pop(box_id, None)
        if box is None:
            return None

        if self._pending_source == box_id:
            self.set_pending_source(None)

        self.registry.publish(box_id)
        self.registry.unsubscribe_all(box_id)
        logger.debug(f"Removed box {box_id}")
        return box

    # ============== Connectors ==============

    def connect(self, source_id: str, target_id: str, label: Optional[str] = None) -> ConnectorModel:
        """
        Create a connector from source box to target box.

        Raises:
            InvalidBoxReference: if either box does not exist
            ValueError: if source and target are the same box
        """
        self._require_box(source_id)
        self._require_box(target_id)
        if source_id == target_id:
            raise ValueError("A connector needs two distinct boxes")

        connector = ConnectorModel(
            source_id,
            target_id,
            geometry=self,
            label=label if label is not None else self.default_label,
            style=self.style,
        )
        connector.on_changed.append(self._on_connector_changed)
        connector.on_removed.append(self._on_connector_removed)
        self.registry.subscribe(source_id, connector.on_box_changed)
        self.registry.subscribe(target_id, connector.on_box_changed)
        self.connectors[connector.id] = connector

        logger.info(f"Created connector {connector.id}: {source_id} -> {target_id}")
        self._on_connector_changed(connector)
        return connector

    def get_connector(self, connector_id: str) -> Optional[ConnectorModel]:
        """Get a connector by ID."""
        return self.connectors.get(connector_id)

    def connectors_for_box(self, box_id: str) -> List[ConnectorModel]:
        """All live connectors attached to a box."""
        return [c for c in self.connectors.values() if c.connects(box_id)]

    def delete_connector(self, connector_id: str, prompt: Callable[[], DeleteDecision]) -> bool:
        """Delete a connector after confirmation. Returns True if deleted."""
        connector = self.connectors.get(connector_id)
        if connector is None:
            return False
        return connector.request_delete(prompt)

    def clear(self):
        """Remove all connectors and boxes."""
        for connector in list(self.connectors.values()):
            connector.teardown()
        for box_id in list(self.boxes.keys()):
            self.remove_box(box_id)

    def _on_connector_changed(self, connector: ConnectorModel):
        for sink in list(self._sinks):
            sink.connector_changed(connector)

    def _on_connector_removed(self, connector: ConnectorModel):
        self.registry.unsubscribe(connector.source_id, connector.on_box_changed)
        self.registry.unsubscribe(connector.target_id, connector.on_box_changed)
        self.connectors.pop(connector.id, None)
        for sink in list(self._sinks):
            sink.connector_removed(connector.id)

    # ============== Link pairing ==============

    @property
    def pending_source(self) -> Optional[str]:
        """Box currently highlighted as the source of a connector being created."""
        return self._pending_source

    def set_pending_source(self, box_id: Optional[str]):
        """Mark box_id as the pending link source, clearing any previous one."""
        if box_id is not None:
            self._require_box(box_id)
        if box_id == self._pending_source:
            return
        self._pending_source = box_id
        for sink in list(self._sinks):
            sink.pending_source_changed(box_id)
