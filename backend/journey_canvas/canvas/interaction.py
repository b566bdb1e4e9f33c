"""
Pointer-driven resize and drag of canvas nodes.

Each node is independently ``idle``, ``resizing`` or ``moving``. The controller
owns one InteractionState per active gesture and drops it on release or
pointer-leave, so nothing outlives the gesture. It only produces update
events; applying them to the document is the caller's job.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from loguru import logger

from .node import Node
from .types import Position, Size, SizeLimits


class InteractionMode(str, Enum):
    """Gesture state of a single node."""
    IDLE = "idle"
    RESIZING = "resizing"
    MOVING = "moving"


@dataclass(frozen=True)
class PointerEvent:
    """Pointer location in canvas coordinates."""
    x: float
    y: float


@dataclass
class InteractionState:
    """Bookkeeping for one in-progress gesture."""
    node_id: str
    mode: InteractionMode
    origin: Position          # node position when the gesture began
    grab_offset: Position     # pointer minus origin at press time
    limits: SizeLimits
    moved: bool = False


@dataclass(frozen=True)
class PressResult:
    """Outcome of a pointer-down on a node affordance."""
    accepted: bool
    # The canvas must not treat the press as a pan or node-move gesture
    stop_propagation: bool = False


@dataclass(frozen=True)
class SizeUpdate:
    node_id: str
    size: Size
    final: bool = False


@dataclass(frozen=True)
class PositionUpdate:
    node_id: str
    position: Position
    final: bool = False


InteractionUpdate = Union[SizeUpdate, PositionUpdate]


class ResizeDragController:
    """Turns pointer events into discrete size and position updates."""

    def __init__(self) -> None:
        self._states: dict[str, InteractionState] = {}
        self._last: dict[str, InteractionUpdate] = {}

    def mode(self, node_id: str) -> InteractionMode:
        state = self._states.get(node_id)
        return state.mode if state else InteractionMode.IDLE

    @property
    def active_node_ids(self) -> list[str]:
        return list(self._states)

    def _begin(self, node: Node, pointer: PointerEvent, mode: InteractionMode) -> PressResult:
        if node.id in self._states:
            logger.debug(f"Ignoring {mode.value} press on busy node {node.id}")
            return PressResult(accepted=False, stop_propagation=True)
        self._states[node.id] = InteractionState(
            node_id=node.id,
            mode=mode,
            origin=node.position.model_copy(),
            grab_offset=Position(x=pointer.x - node.position.x, y=pointer.y - node.position.y),
            limits=node.spec.limits,
        )
        return PressResult(accepted=True, stop_propagation=True)

    def begin_resize(self, node: Node, pointer: PointerEvent) -> PressResult:
        """Pointer-down on the node's resize affordance."""
        if not node.spec.resizable:
            return PressResult(accepted=False)
        return self._begin(node, pointer, InteractionMode.RESIZING)

    def begin_move(self, node: Node, pointer: PointerEvent) -> PressResult:
        """Pointer-down on the body of a draggable node."""
        if not node.spec.draggable:
            return PressResult(accepted=False)
        return self._begin(node, pointer, InteractionMode.MOVING)

    def pointer_move(self, node_id: str, pointer: PointerEvent) -> Optional[InteractionUpdate]:
        """
        Track the pointer during a gesture.

        Returns None for stray moves that arrive while the node is idle.
        """
        state = self._states.get(node_id)
        if state is None:
            return None

        state.moved = True
        update: InteractionUpdate
        if state.mode == InteractionMode.RESIZING:
            update = SizeUpdate(
                node_id=node_id,
                size=Size(
                    width=state.limits.clamp_width(pointer.x - state.origin.x),
                    height=state.limits.clamp_height(pointer.y - state.origin.y),
                ),
            )
        else:
            update = PositionUpdate(
                node_id=node_id,
                position=Position(
                    x=pointer.x - state.grab_offset.x,
                    y=pointer.y - state.grab_offset.y,
                ),
            )
        self._last[node_id] = update
        return update

    def pointer_up(self, node_id: str, pointer: Optional[PointerEvent] = None) -> Optional[InteractionUpdate]:
        """
        End a gesture and release its state.

        Returns the final update (``final=True``), or None if the node wasn't
        in a gesture or the pointer never moved.
        """
        if node_id not in self._states:
            return None
        if pointer is not None:
            self.pointer_move(node_id, pointer)
        state = self._states.pop(node_id)
        last = self._last.pop(node_id, None)
        if not state.moved or last is None:
            return None
        if isinstance(last, SizeUpdate):
            return SizeUpdate(node_id=node_id, size=last.size, final=True)
        return PositionUpdate(node_id=node_id, position=last.position, final=True)

    def pointer_leave(self, node_id: str) -> Optional[InteractionUpdate]:
        """The tracked target lost the pointer; finish the gesture where it stands."""
        return self.pointer_up(node_id)

    def cancel(self, node_id: Optional[str] = None) -> None:
        """Drop gesture state without producing updates (all nodes if no id given)."""
        if node_id is None:
            self._states.clear()
            self._last.clear()
        else:
            self._states.pop(node_id, None)
            self._last.pop(node_id, None)
