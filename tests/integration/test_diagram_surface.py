"""
Integration tests for the diagram surface.

Tests:
- Connector creation and validation
- Box moves and resizes driving connector recomputes
- Connectors sharing boxes
- Box removal tearing down attached connectors
- Render sink notifications
"""

import pytest

from models.connector import DeleteDecision
from models.diagram import InvalidBoxReference
from models.geometry import Point, Bounds, Edge


class TestConnectorCreation:
    """Tests for DiagramSurface.connect."""

    def test_connect(self, surface):
        link = surface.connect("A", "B")

        assert surface.get_connector(link.id) is link
        assert link.label == "Dependency"
        assert link.start_position == Point(100, 50)
        assert link.end_position == Point(200, 150)
        assert surface.registry.subscriber_count("A") == 1
        assert surface.registry.subscriber_count("B") == 1

    def test_explicit_label(self, surface):
        assert surface.connect("A", "B", label="imports").label == "imports"

    def test_unknown_box(self, surface):
        with pytest.raises(InvalidBoxReference) as exc_info:
            surface.connect("A", "ghost")
        assert exc_info.value.box_id == "ghost"
        assert surface.connectors == {}

    def test_same_box(self, surface):
        with pytest.raises(ValueError):
            surface.connect("A", "A")

    def test_get_bounds(self, surface):
        assert surface.get_bounds("A") == Bounds(0, 0, 100, 50)
        with pytest.raises(LookupError):
            surface.get_bounds("ghost")


class TestBoxChanges:
    """Tests for recomputes driven by box geometry changes."""

    def test_move_triggers_one_recompute(self, surface):
        link = surface.connect("A", "B")
        surface.move_box("B", 250, 150)

        assert link.revision == 2
        assert link.end_position == Point(250, 150)
        assert link.end_anchor.edge == Edge.TOP
        assert link.elbow == Point(250, 50)

    def test_unchanged_move_is_ignored(self, surface):
        link = surface.connect("A", "B")
        surface.move_box("B", 200, 150)
        assert link.revision == 1

    def test_move_by(self, surface):
        link = surface.connect("A", "B")
        surface.move_box_by("B", 50, 0)
        assert surface.get_box("B").left == 250
        assert link.end_position == Point(250, 150)

    def test_resize(self, surface):
        link = surface.connect("A", "B")
        surface.resize_box("A", 150, 50)

        assert link.revision == 2
        assert link.start_position == Point(150, 50)

    def test_resize_clamps_negative(self, surface):
        link = surface.connect("A", "B")
        surface.resize_box("A", -10, -10)

        assert surface.get_bounds("A") == Bounds(0, 0, 0, 0)
        assert link.start_position == Point(0, 0)

    def test_move_unknown_box(self, surface):
        with pytest.raises(InvalidBoxReference):
            surface.move_box("ghost", 1, 1)

    def test_shared_box_updates_every_connector(self, surface):
        surface.add_box("C", 400, 0, 100, 50, box_id="C")
        a_to_b = surface.connect("A", "B")
        c_to_b = surface.connect("C", "B")

        surface.move_box_by("B", 0, 100)
        assert a_to_b.revision == 2
        assert c_to_b.revision == 2

        surface.move_box_by("A", 10, 0)
        assert a_to_b.revision == 3
        assert c_to_b.revision == 2

        assert surface.connectors_for_box("B") == [a_to_b, c_to_b]
        assert surface.connectors_for_box("A") == [a_to_b]

    def test_free_elbow_reset_by_move(self, surface):
        link = surface.connect("A", "B")
        link.drag_elbow(Point(300, 300))
        surface.move_box_by("A", 0, 5)
        assert not link.elbow_is_free
        assert link.elbow == Point(link.end_position.x, link.start_position.y)


class TestBoxRemoval:
    """Tests for removing boxes with attached connectors."""

    def test_remove_box_tears_down_connectors(self, surface, sink):
        surface.add_box("C", 400, 0, 100, 50, box_id="C")
        a_to_b = surface.connect("A", "B")
        a_to_c = surface.connect("A", "C")

        removed = surface.remove_box("B")

        assert removed.id == "B"
        assert a_to_b.is_deleted
        assert not a_to_c.is_deleted
        assert sink.removed == [a_to_b.id]
        assert list(surface.connectors) == [a_to_c.id]
        assert surface.registry.subscriber_count("A") == 1
        assert surface.registry.subscriber_count("B") == 0

    def test_remove_missing_box(self, surface):
        assert surface.remove_box("ghost") is None

    def test_clear(self, surface, sink):
        link = surface.connect("A", "B")
        surface.clear()

        assert surface.boxes == {}
        assert surface.connectors == {}
        assert link.is_deleted
        assert sink.removed == [link.id]


class TestRenderSinks:
    """Tests for render sink notifications."""

    def test_connect_pushes_primitives(self, surface, sink):
        link = surface.connect("A", "B")
        assert sink.changed == [link.id]

    def test_move_pushes_update(self, surface, sink):
        link = surface.connect("A", "B")
        surface.move_box_by("B", 50, 0)
        assert sink.changed == [link.id, link.id]

    def test_selection_pushes_update(self, surface, sink):
        link = surface.connect("A", "B")
        link.toggle_selection()
        assert len(sink.changed) == 2

    def test_delete_connector(self, surface, sink):
        link = surface.connect("A", "B")

        assert not surface.delete_connector(link.id, lambda: DeleteDecision.CANCELLED)
        assert sink.removed == []

        assert surface.delete_connector(link.id, lambda: DeleteDecision.CONFIRMED)
        assert sink.removed == [link.id]
        assert surface.get_connector(link.id) is None
        assert surface.registry.subscriber_count("A") == 0

    def test_delete_unknown_connector(self, surface):
        assert not surface.delete_connector("ghost", lambda: DeleteDecision.CONFIRMED)

    def test_removed_sink_gets_nothing(self, surface, sink):
        surface.remove_render_sink(sink)
        surface.connect("A", "B")
        assert sink.changed == []


class TestPendingSource:
    """Tests for the relationship-mode pending source highlight."""

    def test_set_and_clear(self, surface, sink):
        surface.set_pending_source("A")
        surface.set_pending_source("A")
        surface.set_pending_source(None)

        assert surface.pending_source is None
        assert sink.pending == ["A", None]

    def test_unknown_box(self, surface):
        with pytest.raises(InvalidBoxReference):
            surface.set_pending_source("ghost")

    def test_removing_source_box_clears_it(self, surface, sink):
        surface.set_pending_source("A")
        surface.remove_box("A")
        assert surface.pending_source is None
        assert sink.pending == ["A", None]
