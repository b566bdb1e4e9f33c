"""
Tests for the resize/drag controller.
"""

import pytest

from journey_canvas.canvas import (
    InteractionMode,
    Node,
    NodeKind,
    PointerEvent,
    Position,
    PositionUpdate,
    ResizeDragController,
    SizeUpdate,
)


@pytest.fixture
def controller():
    return ResizeDragController()


@pytest.fixture
def agent():
    return Node(id="a", kind=NodeKind.AGENT, position=Position(x=100, y=100))


class TestResize:
    """Tests for resize gestures."""

    def test_press_stops_propagation(self, controller, agent):
        result = controller.begin_resize(agent, PointerEvent(300, 200))
        assert result.accepted
        assert result.stop_propagation
        assert controller.mode("a") == InteractionMode.RESIZING

    def test_move_computes_size_from_origin(self, controller, agent):
        controller.begin_resize(agent, PointerEvent(300, 200))
        update = controller.pointer_move("a", PointerEvent(450, 350))
        assert isinstance(update, SizeUpdate)
        assert (update.size.width, update.size.height) == (350, 250)
        assert not update.final

    def test_move_clamps_to_minimum(self, controller, agent):
        controller.begin_resize(agent, PointerEvent(300, 200))
        update = controller.pointer_move("a", PointerEvent(110, 120))
        assert (update.size.width, update.size.height) == (200, 100)

    def test_move_clamps_to_maximum_width(self, controller, agent):
        controller.begin_resize(agent, PointerEvent(300, 200))
        update = controller.pointer_move("a", PointerEvent(5000, 300))
        assert update.size.width == 800

    def test_release_marks_final_and_returns_to_idle(self, controller, agent):
        controller.begin_resize(agent, PointerEvent(300, 200))
        controller.pointer_move("a", PointerEvent(400, 300))
        update = controller.pointer_up("a")
        assert update.final
        assert (update.size.width, update.size.height) == (300, 200)
        assert controller.mode("a") == InteractionMode.IDLE
        assert controller.active_node_ids == []

    def test_release_without_movement_yields_nothing(self, controller, agent):
        controller.begin_resize(agent, PointerEvent(300, 200))
        assert controller.pointer_up("a") is None
        assert controller.mode("a") == InteractionMode.IDLE

    def test_pointer_leave_ends_gesture(self, controller, agent):
        controller.begin_resize(agent, PointerEvent(300, 200))
        controller.pointer_move("a", PointerEvent(420, 260))
        update = controller.pointer_leave("a")
        assert update.final
        assert controller.pointer_move("a", PointerEvent(600, 600)) is None

    def test_terminal_nodes_are_not_resizable(self, controller):
        start = Node(id="s", kind=NodeKind.START)
        result = controller.begin_resize(start, PointerEvent(10, 10))
        assert not result.accepted
        assert controller.mode("s") == InteractionMode.IDLE


class TestMove:
    """Tests for drag gestures."""

    def test_move_keeps_grab_offset(self, controller, agent):
        controller.begin_move(agent, PointerEvent(120, 130))
        update = controller.pointer_move("a", PointerEvent(220, 330))
        assert isinstance(update, PositionUpdate)
        assert (update.position.x, update.position.y) == (200, 300)

    def test_release_with_pointer_applies_final_location(self, controller, agent):
        controller.begin_move(agent, PointerEvent(100, 100))
        update = controller.pointer_up("a", PointerEvent(150, 175))
        assert update.final
        assert (update.position.x, update.position.y) == (150, 175)

    def test_second_press_on_busy_node_is_rejected(self, controller, agent):
        controller.begin_move(agent, PointerEvent(100, 100))
        result = controller.begin_resize(agent, PointerEvent(300, 200))
        assert not result.accepted
        assert controller.mode("a") == InteractionMode.MOVING


class TestStrayEvents:
    """Tests for events that arrive with no gesture in progress."""

    def test_stray_move_is_noop(self, controller, agent):
        assert controller.pointer_move("a", PointerEvent(500, 500)) is None
        assert controller.mode("a") == InteractionMode.IDLE

    def test_stray_move_after_release_is_noop(self, controller, agent):
        controller.begin_resize(agent, PointerEvent(300, 200))
        controller.pointer_move("a", PointerEvent(400, 300))
        controller.pointer_up("a")
        assert controller.pointer_move("a", PointerEvent(900, 900)) is None

    def test_stray_release_is_noop(self, controller):
        assert controller.pointer_up("missing") is None

    def test_cancel_drops_all_gestures(self, controller, agent):
        other = Node(id="b", kind=NodeKind.SYSTEM)
        controller.begin_resize(agent, PointerEvent(300, 200))
        controller.begin_move(other, PointerEvent(0, 0))
        controller.cancel()
        assert controller.active_node_ids == []
