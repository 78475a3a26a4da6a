"""
Diagram canvas for visual package-diagram editing.

Uses Qt's Graphics View Framework for rendering and input. Boxes are
movable rectangle items whose position changes are pushed into the
DiagramSurface; connectors are drawn from the render primitives the
surface hands back and forward their pointer events to the
InteractionController.
"""

import logging
from typing import Dict, Optional

from PyQt6.QtCore import Qt, QPointF, QRectF, QLineF, pyqtSignal
from PyQt6.QtGui import (
    QPainter, QPen, QBrush, QColor, QFont, QPolygonF,
    QWheelEvent, QMouseEvent, QKeyEvent
)
from PyQt6.QtWidgets import (
    QGraphicsView, QGraphicsScene, QGraphicsItem,
    QGraphicsEllipseItem, QGraphicsLineItem, QGraphicsPolygonItem,
    QGraphicsRectItem, QGraphicsTextItem, QMessageBox
)

from models import BoxModel, ConnectorModel, ConnectorPrimitives, DeleteDecision, Point
from services.diagram_surface import DiagramSurface
from services.interaction import (
    InteractionController, PointerEvent, PointerEventKind,
    PrimitiveRole, PrimitiveTarget,
)

# Setup logger for this module
logger = logging.getLogger(__name__)


# Color scheme
COLORS = {
    "box_border": QColor("#000000"),
    "box_fill": QColor("#FFFFFF"),
    "box_title": QColor("#111827"),
    "pending_source": QColor("#0000FF"),
    "grid": QColor("#E5E7EB"),
    "background": QColor("#FAFAFA"),
    "label_background": QColor("#FFFFFF"),
}


def _qpoint(p: Point) -> QPointF:
    return QPointF(p.x, p.y)


def _qcolor(color: Optional[str]) -> QColor:
    if color is None:
        return QColor(Qt.GlobalColor.transparent)
    return QColor(color)


class BoxGraphicsItem(QGraphicsRectItem):
    """
    Visual representation of a package box.

    Dragging the item moves the box in the surface, which in turn
    recomputes every connector attached to it.
    """

    def __init__(self, box: BoxModel, parent: Optional[QGraphicsItem] = None):
        super().__init__(0, 0, box.width, box.height, parent)
        self.box = box
        self._pending = False

        self.setFlags(
            QGraphicsItem.GraphicsItemFlag.ItemIsMovable |
            QGraphicsItem.GraphicsItemFlag.ItemIsSelectable |
            QGraphicsItem.GraphicsItemFlag.ItemSendsGeometryChanges
        )
        self.setPos(box.left, box.top)
        self.setBrush(QBrush(COLORS["box_fill"]))
        self._apply_pen()

        self._title = QGraphicsTextItem(box.name, self)
        font = QFont()
        font.setBold(True)
        self._title.setFont(font)
        self._title.setDefaultTextColor(COLORS["box_title"])
        self._title.setPos(4, 2)

    def _apply_pen(self):
        color = COLORS["pending_source"] if self._pending else COLORS["box_border"]
        self.setPen(QPen(color, 2 if self._pending else 1))

    def set_pending_source(self, pending: bool):
        self._pending = pending
        self._apply_pen()

    def itemChange(self, change: QGraphicsItem.GraphicsItemChange, value):
        if change == QGraphicsItem.GraphicsItemChange.ItemPositionHasChanged:
            scene = self.scene()
            if isinstance(scene, DiagramScene):
                scene.surface.move_box(self.box.id, self.pos().x(), self.pos().y())
        return super().itemChange(change, value)

    def mousePressEvent(self, event):
        scene = self.scene()
        if (isinstance(scene, DiagramScene) and scene.controller.link_mode
                and event.button() == Qt.MouseButton.LeftButton):
            scene.controller.click_box(self.box.id)
            event.accept()
            return
        super().mousePressEvent(event)


class SegmentItem(QGraphicsLineItem):
    """One dashed leg of a connector."""

    def __init__(self, connector_id: str, role: PrimitiveRole):
        super().__init__()
        self.target = PrimitiveTarget(connector_id, role)
        self.setZValue(-1)  # Behind boxes' borders but above the background
        self.setAcceptedMouseButtons(Qt.MouseButton.LeftButton | Qt.MouseButton.RightButton)

    def mousePressEvent(self, event):
        event.accept()

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            _dispatch(self, PointerEventKind.CLICK, event.scenePos())
        event.accept()

    def mouseDoubleClickEvent(self, event):
        if event.button() == Qt.MouseButton.RightButton:
            _dispatch(self, PointerEventKind.SECONDARY_DOUBLE_PRESS, event.scenePos())
            event.accept()
            return
        super().mouseDoubleClickEvent(event)


class AnchorKnobItem(QGraphicsEllipseItem):
    """Round drag handle for a start, end or elbow anchor."""

    def __init__(self, connector_id: str, role: PrimitiveRole):
        super().__init__()
        self.target = PrimitiveTarget(connector_id, role)
        self.setZValue(10)
        self.setCursor(Qt.CursorShape.SizeAllCursor)
        self.setPen(QPen(Qt.PenStyle.NoPen))

    def set_marker(self, center: QPointF, radius: float, fill: QColor):
        self.setRect(center.x() - radius, center.y() - radius, radius * 2, radius * 2)
        self.setBrush(QBrush(fill))

    def mousePressEvent(self, event):
        _dispatch(self, PointerEventKind.PRESS, event.scenePos())
        event.accept()

    def mouseMoveEvent(self, event):
        _dispatch(self, PointerEventKind.DRAG, event.scenePos())
        event.accept()


def _dispatch(item, kind: PointerEventKind, scene_pos: QPointF):
    scene = item.scene()
    if isinstance(scene, DiagramScene):
        scene.controller.handle(PointerEvent(kind, Point(scene_pos.x(), scene_pos.y()), item.target))


class ConnectorGraphics:
    """
    The fixed set of scene items drawing one connector: two segments, an
    arrowhead, a label and three anchor knobs.
    """

    def __init__(self, scene: QGraphicsScene, connector_id: str):
        self.connector_id = connector_id
        self.horizontal = SegmentItem(connector_id, PrimitiveRole.HORIZONTAL_SEGMENT)
        self.vertical = SegmentItem(connector_id, PrimitiveRole.VERTICAL_SEGMENT)
        self.arrow = QGraphicsPolygonItem()
        self.arrow.setPen(QPen(Qt.PenStyle.NoPen))
        self.label = QGraphicsTextItem()
        self.start_knob = AnchorKnobItem(connector_id, PrimitiveRole.START_ANCHOR)
        self.end_knob = AnchorKnobItem(connector_id, PrimitiveRole.END_ANCHOR)
        self.elbow_knob = AnchorKnobItem(connector_id, PrimitiveRole.ELBOW)

        self._items = [
            self.horizontal, self.vertical, self.arrow, self.label,
            self.start_knob, self.end_knob, self.elbow_knob,
        ]
        for item in self._items:
            scene.addItem(item)

    def update_from(self, primitives: ConnectorPrimitives):
        """Copy geometry and colours from the connector's render primitives."""
        for item, segment in zip((self.horizontal, self.vertical), primitives.segments):
            pen = QPen(_qcolor(segment.color), 1.5)
            pen.setDashPattern(list(segment.dash_pattern))
            item.setPen(pen)
            item.setLine(QLineF(_qpoint(segment.start), _qpoint(segment.end)))

        arrow = primitives.arrow
        self.arrow.setPolygon(QPolygonF([_qpoint(p) for p in arrow.points]))
        self.arrow.setBrush(QBrush(_qcolor(arrow.color)))

        self.label.setPlainText(primitives.label.text)
        self.label.setPos(_qpoint(primitives.label.position))

        for knob, marker in (
            (self.start_knob, primitives.start_marker),
            (self.end_knob, primitives.end_marker),
            (self.elbow_knob, primitives.elbow_marker),
        ):
            knob.set_marker(_qpoint(marker.center), marker.radius, _qcolor(marker.fill))

    def remove(self, scene: QGraphicsScene):
        for item in self._items:
            if item.scene() is scene:
                scene.removeItem(item)
        self._items.clear()


class DiagramScene(QGraphicsScene):
    """
    Scene managing all diagram items.

    Acts as a render sink for the DiagramSurface.
    """

    # Signals
    boxAdded = pyqtSignal(object)         # BoxModel
    connectorAdded = pyqtSignal(object)   # ConnectorModel
    connectorRemoved = pyqtSignal(str)    # connector_id

    def __init__(self, surface: DiagramSurface, parent=None):
        super().__init__(parent)
        self.surface = surface
        self.controller = InteractionController(surface, self._confirm_delete)

        self._box_items: Dict[str, BoxGraphicsItem] = {}
        self._connector_graphics: Dict[str, ConnectorGraphics] = {}

        self.setBackgroundBrush(COLORS["background"])
        self.setSceneRect(QRectF(-2000, -2000, 4000, 4000))

        surface.add_render_sink(self)
        for box in surface.boxes.values():
            self._add_box_item(box)
        for connector in surface.connectors.values():
            self.connector_changed(connector)

    def add_box(self, name: str, pos: QPointF, width: float = 120.0, height: float = 80.0) -> BoxGraphicsItem:
        """Add a new box to the surface and the scene."""
        box = self.surface.add_box(name, pos.x(), pos.y(), width, height)
        item = self._add_box_item(box)
        self.boxAdded.emit(box)
        return item

    def _add_box_item(self, box: BoxModel) -> BoxGraphicsItem:
        item = BoxGraphicsItem(box)
        self.addItem(item)
        self._box_items[box.id] = item
        return item

    def remove_box(self, box_id: str):
        """Remove a box; its connectors tear themselves down."""
        item = self._box_items.pop(box_id, None)
        self.surface.remove_box(box_id)
        if item is not None:
            self.removeItem(item)

    def get_box_item(self, box_id: str) -> Optional[BoxGraphicsItem]:
        return self._box_items.get(box_id)

    def delete_selected_boxes(self):
        for item in self.selectedItems():
            if isinstance(item, BoxGraphicsItem):
                self.remove_box(item.box.id)

    # ============== Render sink ==============

    def connector_changed(self, connector: ConnectorModel):
        primitives = connector.primitives
        if primitives is None:
            return
        graphics = self._connector_graphics.get(connector.id)
        if graphics is None:
            graphics = ConnectorGraphics(self, connector.id)
            self._connector_graphics[connector.id] = graphics
            self.connectorAdded.emit(connector)
        graphics.update_from(primitives)

    def connector_removed(self, connector_id: str):
        graphics = self._connector_graphics.pop(connector_id, None)
        if graphics is not None:
            graphics.remove(self)
            self.connectorRemoved.emit(connector_id)

    def pending_source_changed(self, box_id: Optional[str]):
        for bid, item in self._box_items.items():
            item.set_pending_source(bid == box_id)

    # ============== Prompts ==============

    def _confirm_delete(self, connector: ConnectorModel) -> DeleteDecision:
        views = self.views()
        parent = views[0] if views else None
        reply = QMessageBox.question(
            parent,
            "Delete Lines",
            "Are you sure you want to delete both lines and anchors?\n\n"
            "This action cannot be undone.",
            QMessageBox.StandardButton.Ok | QMessageBox.StandardButton.Cancel,
            QMessageBox.StandardButton.Cancel,
        )
        if reply == QMessageBox.StandardButton.Ok:
            return DeleteDecision.CONFIRMED
        return DeleteDecision.CANCELLED


class DiagramCanvas(QGraphicsView):
    """
    Main canvas widget for viewing and editing the diagram.

    Provides zooming and panning.
    """

    def __init__(self, surface: DiagramSurface, grid_size: int = 50, parent=None):
        super().__init__(parent)

        self.diagram_scene = DiagramScene(surface)
        self.setScene(self.diagram_scene)
        self._grid_size = grid_size

        # View settings
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setViewportUpdateMode(QGraphicsView.ViewportUpdateMode.FullViewportUpdate)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.AnchorViewCenter)

        # State
        self._zoom_factor = 1.0
        self._is_panning = False
        self._last_pan_pos = QPointF()

    @property
    def controller(self) -> InteractionController:
        return self.diagram_scene.controller

    def drawBackground(self, painter: QPainter, rect: QRectF):
        """Draw grid background."""
        super().drawBackground(painter, rect)

        grid_size = self._grid_size
        if grid_size <= 0:
            return

        left = int(rect.left()) - (int(rect.left()) % grid_size)
        top = int(rect.top()) - (int(rect.top()) % grid_size)

        painter.setPen(QPen(COLORS["grid"], 1))

        # Vertical lines
        x = left
        while x < rect.right():
            painter.drawLine(int(x), int(rect.top()), int(x), int(rect.bottom()))
            x += grid_size

        # Horizontal lines
        y = top
        while y < rect.bottom():
            painter.drawLine(int(rect.left()), int(y), int(rect.right()), int(y))
            y += grid_size

    def add_box_at_center(self, name: str) -> BoxGraphicsItem:
        """Add a new box centred in the visible area."""
        center = self.mapToScene(self.viewport().rect().center())
        return self.diagram_scene.add_box(name, QPointF(center.x() - 60, center.y() - 40))

    def wheelEvent(self, event: QWheelEvent):
        """Handle zoom with mouse wheel."""
        factor = 1.15

        if event.angleDelta().y() > 0:
            if self._zoom_factor * factor > 5:
                return
            self._zoom_factor *= factor
            self.scale(factor, factor)
        else:
            if self._zoom_factor / factor < 0.1:
                return
            self._zoom_factor /= factor
            self.scale(1 / factor, 1 / factor)

    def mousePressEvent(self, event: QMouseEvent):
        """Pan with the middle mouse button."""
        if event.button() == Qt.MouseButton.MiddleButton:
            self._is_panning = True
            self._last_pan_pos = event.position()
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            event.accept()
        else:
            super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent):
        if self._is_panning:
            delta = event.position() - self._last_pan_pos
            self._last_pan_pos = event.position()
            self.horizontalScrollBar().setValue(int(self.horizontalScrollBar().value() - delta.x()))
            self.verticalScrollBar().setValue(int(self.verticalScrollBar().value() - delta.y()))
            event.accept()
        else:
            super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.MiddleButton and self._is_panning:
            self._is_panning = False
            self.unsetCursor()
            event.accept()
        else:
            super().mouseReleaseEvent(event)

    def keyPressEvent(self, event: QKeyEvent):
        """Handle keyboard shortcuts."""
        if event.key() in (Qt.Key.Key_Delete, Qt.Key.Key_Backspace):
            self.diagram_scene.delete_selected_boxes()
            event.accept()
        elif event.key() == Qt.Key.Key_Escape:
            # Cancel a pending source/target pairing
            self.diagram_scene.surface.set_pending_source(None)
            self.diagram_scene.clearSelection()
            event.accept()
        else:
            super().keyPressEvent(event)

    def reset_view(self):
        """Reset to default zoom and position."""
        self.resetTransform()
        self._zoom_factor = 1.0
        self.centerOn(0, 0)
