"""
Tests for the graph document model and the kind table.
"""

import pytest

from journey_canvas.canvas import (
    KIND_TABLE,
    GraphDocument,
    HandleRef,
    HandleType,
    NodeKind,
    Position,
    find_handle,
    kind_spec,
)
from journey_canvas.exceptions import InvalidEdgeEndpoint, NodeNotFound


@pytest.fixture
def document():
    return GraphDocument()


class TestKindTable:
    """Tests for per-kind handles and defaults."""

    def test_every_kind_has_a_spec(self):
        assert set(KIND_TABLE) == set(NodeKind)

    def test_handle_ids_are_unique_per_kind(self):
        for spec in KIND_TABLE.values():
            ids = [h.id for h in spec.handles]
            assert len(ids) == len(set(ids)), spec.kind

    def test_decision_has_four_right_outcomes(self):
        right = [h.id for h in kind_spec(NodeKind.DECISION).source_handles() if h.side.value == "right"]
        assert right == ["source-right-1", "source-right-2", "source-right-3", "source-right-4"]

    def test_notes_have_no_handles(self):
        assert kind_spec(NodeKind.NOTE).handles == ()

    def test_handle_direction(self):
        assert find_handle(NodeKind.AGENT, "source-bottom").type == HandleType.SOURCE
        assert find_handle(NodeKind.AGENT, "target-top").type == HandleType.TARGET
        assert find_handle(NodeKind.END, "source-bottom") is None


class TestNodes:
    """Tests for adding, updating and removing nodes."""

    def test_add_node_uses_kind_defaults(self, document):
        node = document.add_node(NodeKind.AGENT, Position(x=10, y=20))
        assert node.label == "Agent Process"
        assert node.content == "Describe how the agent handles this step"
        assert (node.position.x, node.position.y) == (10, 20)
        assert document.get_node(node.id) is node

    def test_add_node_ids_never_collide(self, document):
        ids = {document.add_node(NodeKind.SYSTEM).id for _ in range(200)}
        assert len(ids) == 200

    def test_add_node_accepts_string_kind(self, document):
        assert document.add_node("guardrail").kind == NodeKind.GUARDRAIL

    def test_update_replaces_only_given_fields(self, document):
        node = document.add_node(NodeKind.AGENT, Position(x=1, y=2))
        change = document.update_node(node.id, label="Verify identity")
        assert change.content_changed
        assert not change.position_changed
        assert node.label == "Verify identity"
        assert node.content == "Describe how the agent handles this step"
        assert (node.position.x, node.position.y) == (1, 2)

    def test_update_position_signals_position_change(self, document):
        node = document.add_node(NodeKind.AGENT)
        change = document.update_node(node.id, position={"x": 50, "y": 60})
        assert change.position_changed
        assert not change.content_changed

    def test_update_with_same_value_changes_nothing(self, document):
        node = document.add_node(NodeKind.AGENT)
        change = document.update_node(node.id, label=node.label, position=node.position)
        assert not change.changed

    def test_update_size_is_clamped_to_kind_limits(self, document):
        agent = document.add_node(NodeKind.AGENT)
        change = document.update_node(agent.id, size={"width": 5, "height": 5})
        assert change.size_changed
        assert (agent.size.width, agent.size.height) == (200, 100)

        document.update_node(agent.id, size={"width": 5000, "height": 400})
        assert (agent.size.width, agent.size.height) == (800, 400)

        note = document.add_node(NodeKind.NOTE)
        document.update_node(note.id, size={"width": 10, "height": 150})
        assert note.size.width == 300

    def test_update_unknown_field_raises(self, document):
        node = document.add_node(NodeKind.AGENT)
        with pytest.raises(ValueError):
            document.update_node(node.id, kind="note")

    def test_update_missing_node_raises(self, document):
        with pytest.raises(NodeNotFound):
            document.update_node("nope", label="x")

    def test_remove_node_cascades_edges(self, document):
        """Removing a node with 3 incident edges leaves none referencing it."""
        hub = document.add_node(NodeKind.SYSTEM)
        a = document.add_node(NodeKind.AGENT)
        b = document.add_node(NodeKind.AGENT)
        end = document.add_node(NodeKind.END)
        document.add_edge(HandleRef(a.id, "source-right"), HandleRef(hub.id, "target-left"))
        document.add_edge(HandleRef(b.id, "source-bottom"), HandleRef(hub.id, "target-top"))
        document.add_edge(HandleRef(hub.id, "source-bottom"), HandleRef(end.id, "target-top"))
        document.add_edge(HandleRef(a.id, "source-bottom"), HandleRef(b.id, "target-top"))

        removed = document.remove_node(hub.id)

        assert len(removed) == 3
        assert document.get_edges_for_node(hub.id) == []
        assert len(document.edges) == 1
        assert document.get_node(hub.id) is None


class TestEdges:
    """Tests for edge validation."""

    def test_add_valid_edge(self, document):
        a = document.add_node(NodeKind.AGENT)
        s = document.add_node(NodeKind.SYSTEM)
        edge = document.add_edge(HandleRef(a.id, "source-right"), HandleRef(s.id, "target-left"))
        assert edge.style == "smoothstep"
        assert document.edges == [edge]

    def test_duplicate_connection_returns_existing_edge(self, document):
        a = document.add_node(NodeKind.AGENT)
        s = document.add_node(NodeKind.SYSTEM)
        first = document.add_edge(HandleRef(a.id, "source-right"), HandleRef(s.id, "target-left"))
        second = document.add_edge(HandleRef(a.id, "source-right"), HandleRef(s.id, "target-left"))
        assert first is second
        assert len(document.edges) == 1

    @pytest.mark.parametrize("source_handle,target_handle", [
        ("target-left", "target-left"),   # wrong direction at source
        ("source-right", "source-right"), # wrong direction at target
        ("source-nowhere", "target-left"),
        ("source-right", "target-nowhere"),
    ])
    def test_invalid_handles_are_rejected(self, document, source_handle, target_handle):
        a = document.add_node(NodeKind.AGENT)
        s = document.add_node(NodeKind.SYSTEM)
        with pytest.raises(InvalidEdgeEndpoint):
            document.add_edge(HandleRef(a.id, source_handle), HandleRef(s.id, target_handle))
        assert document.edges == []

    def test_missing_node_is_rejected(self, document):
        a = document.add_node(NodeKind.AGENT)
        with pytest.raises(InvalidEdgeEndpoint):
            document.add_edge(HandleRef(a.id, "source-right"), HandleRef("ghost", "target-left"))
        assert document.edges == []

    def test_notes_cannot_be_connected(self, document):
        a = document.add_node(NodeKind.AGENT)
        note = document.add_node(NodeKind.NOTE)
        with pytest.raises(InvalidEdgeEndpoint):
            document.add_edge(HandleRef(a.id, "source-right"), HandleRef(note.id, "target-left"))

    def test_remove_edge(self, document):
        a = document.add_node(NodeKind.AGENT)
        s = document.add_node(NodeKind.SYSTEM)
        edge = document.add_edge(HandleRef(a.id, "source-right"), HandleRef(s.id, "target-left"))
        assert document.remove_edge(edge.id)
        assert not document.remove_edge(edge.id)
        assert document.edges == []
