"""
CanvasSession - one open journey canvas: model, sizing, gestures and saving.

All operations run on the event loop that owns the session. Layout changes
(dragging and resizing) are persisted by the debounced autosave; everything
else waits for an explicit save.
"""

from typing import TYPE_CHECKING, Any, Optional, Union

from loguru import logger

from journey_canvas import constants as const
from journey_canvas.canvas.edge import DEFAULT_EDGE_STYLE, Edge
from journey_canvas.canvas.graph_document import GraphDocument, HandleRef, NodeChange
from journey_canvas.canvas.handles import preferred_source_handle, preferred_target_handle
from journey_canvas.canvas.interaction import (
    InteractionUpdate,
    PointerEvent,
    PositionUpdate,
    PressResult,
    ResizeDragController,
    SizeUpdate,
)
from journey_canvas.canvas.node import Node
from journey_canvas.canvas.sizing import AutoSizer
from journey_canvas.canvas.types import NodeKind, Position
from journey_canvas.events import Event, EventBus, EventType
from journey_canvas.exceptions import (
    DocumentNotFound,
    InvalidEdgeEndpoint,
    MalformedDocument,
    SuggestionMergeRejected,
)
from journey_canvas.suggestions import merge_suggestion, parse_suggestion_payload

from .autosave import AutosaveScheduler, CommitResult, CommitTrigger
from .edit_session import EditSession, documents_equal, snapshot

if TYPE_CHECKING:
    from journey_canvas.persistence.base import PersistenceService


class CanvasSession:
    """Manages one graph document from load to close."""

    def __init__(
        self,
        persistence: "PersistenceService",
        document_id: str,
        event_bus: Optional[EventBus] = None,
        sizer: Optional[AutoSizer] = None,
        autosave_delay: float = const.AUTOSAVE_DELAY_SECONDS,
        autosave: bool = True,
    ):
        """
        Args:
            persistence: Where the document is loaded from and committed to
            document_id: ID of the document this session edits
            event_bus: Receives every session signal
            sizer: Auto-sizer for nodes (heuristic measurement by default)
            autosave_delay: Debounce window for layout autosave, in seconds
            autosave: Set False to only persist on explicit saves
        """
        self.persistence = persistence
        self.document_id = document_id
        self.event_bus = event_bus
        self.sizer = sizer or AutoSizer()
        self.controller = ResizeDragController()
        self.edit = EditSession()
        # Bumped whenever the committed baseline is restored or replaced
        self._generation = 0
        self.autosave = autosave
        self.scheduler = AutosaveScheduler(
            self._commit,
            delay=autosave_delay,
            on_result=self._on_commit_result,
        )

    @property
    def document(self) -> GraphDocument:
        """The working document. Replaced wholesale on cancel or suggestion merge."""
        return self.edit.working

    @property
    def dirty(self) -> bool:
        return self.edit.dirty

    def _emit(self, event_type: EventType, **data: Any) -> None:
        if self.event_bus is not None:
            self.event_bus.emit(Event(type=event_type, document_id=self.document_id, data=data))

    def state(self) -> dict:
        """Snapshot of the session for clients."""
        return {
            "document_id": self.document_id,
            "document": self.document.to_wire(),
            "dirty": self.dirty,
            "is_editing": self.edit.is_editing,
            "autosave_pending": self.scheduler.pending,
        }

    # === Lifecycle ===

    async def load(self) -> GraphDocument:
        """
        Load the document from persistence.

        A missing document starts a new empty graph. A malformed one is
        replaced by an empty graph so the session stays usable.
        """
        self.scheduler.cancel_pending()
        self.controller.cancel()

        recovered = False
        try:
            document = await self.persistence.load(self.document_id)
        except DocumentNotFound:
            logger.info(f"Document {self.document_id} not found, starting empty")
            document = GraphDocument()
        except MalformedDocument as e:
            logger.warning(f"Document {self.document_id} is malformed, starting empty: {e}")
            document = GraphDocument()
            recovered = True

        for node in document.nodes:
            if not node.manually_resized:
                node.size = self.sizer.size_node(node)

        self._generation += 1
        self.edit.replace_committed(document)
        self.edit.is_editing = False

        if recovered:
            self._emit(EventType.DOCUMENT_RECOVERED)
        self._emit(
            EventType.DOCUMENT_LOADED,
            node_count=len(document.nodes),
            edge_count=len(document.edges),
        )
        logger.info(
            f"Loaded document {self.document_id}: "
            f"{len(document.nodes)} nodes, {len(document.edges)} edges"
        )
        return self.document

    async def close(self) -> None:
        """Drop gestures and pending autosave, waiting for any running commit."""
        self.controller.cancel()
        await self.scheduler.close()
        logger.info(f"Closed canvas session for {self.document_id}")

    # === Nodes ===

    def add_node(
        self,
        kind: Union[NodeKind, str],
        position: Optional[Position] = None,
        label: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Node:
        """Add a node with kind defaults, sized to its text."""
        node = self.document.add_node(kind, position=position, label=label, content=content)
        node.size = self.sizer.size_node(node)
        self._emit(EventType.NODE_ADDED, node=node.model_dump(mode="json", by_alias=True))
        logger.debug(f"Added {node.kind.value} node {node.id}")
        return node

    def drop_node(self, tag: Any, x: float, y: float) -> Optional[Node]:
        """Add a node for a palette drop. Unknown tags are ignored."""
        kind = NodeKind.parse(tag)
        if kind is None:
            logger.warning(f"Ignoring drop of unknown node kind {tag!r}")
            return None
        return self.add_node(kind, position=Position(x=x, y=y))

    def append_node(self, kind: Union[NodeKind, str]) -> Node:
        """
        Add the next step to the right of the last node and connect to it.

        The edge comes from the most recent node that has an outgoing
        handle; notes never get one.
        """
        kind = NodeKind(kind)
        previous_nodes = list(self.document.nodes)
        if previous_nodes:
            last = previous_nodes[-1].position
            position = Position(x=last.x + const.APPEND_STEP_X, y=last.y)
        else:
            position = Position(x=const.APPEND_START_X, y=const.APPEND_START_Y)

        node = self.add_node(kind, position=position)
        target = preferred_target_handle(node.kind)
        if target is None:
            return node
        for previous in reversed(previous_nodes):
            if previous.kind == NodeKind.NOTE:
                continue
            source = preferred_source_handle(previous.kind)
            if source is not None:
                self.add_edge(HandleRef(previous.id, source.id), HandleRef(node.id, target.id))
                break
        return node

    def update_node(self, node_id: str, **changes: Any) -> NodeChange:
        """
        Update fields of a node and emit the matching signals.

        A label or content change drops any manual size and re-measures the
        node. An explicit size counts as a finished resize: it is clamped to
        the kind's limits, kept over re-measuring and autosaved like a
        position change.
        """
        explicit_size = "size" in changes
        change = self.document.update_node(node_id, **changes)
        node = change.node

        if change.content_changed:
            if not explicit_size:
                node.manually_resized = False
                size = self.sizer.size_node(node)
                if size != node.size:
                    node.size = size
                    change.size_changed = True
            self._emit(EventType.CONTENT_CHANGED, node_id=node_id, label=node.label)
        if explicit_size:
            node.manually_resized = True
            if change.size_changed:
                self._emit(EventType.NODE_RESIZED, node_id=node.id, size=node.size.model_dump())
                self._arm_autosave("size")
        if change.position_changed:
            self._position_changed(node)
        if change.changed:
            self._emit(EventType.NODE_UPDATED, node=node.model_dump(mode="json", by_alias=True))
        return change

    def remove_node(self, node_id: str) -> list[Edge]:
        """Remove a node and its edges. Returns the removed edges."""
        self.controller.cancel(node_id)
        removed = self.document.remove_node(node_id)
        for edge in removed:
            self._emit(EventType.EDGE_REMOVED, edge_id=edge.id)
        self._emit(EventType.NODE_REMOVED, node_id=node_id, removed_edges=[e.id for e in removed])
        logger.debug(f"Removed node {node_id} and {len(removed)} edges")
        return removed

    # === Edges ===

    def add_edge(
        self,
        source: HandleRef,
        target: HandleRef,
        style: str = DEFAULT_EDGE_STYLE,
    ) -> Optional[Edge]:
        """Connect two handles. Returns None (and signals) when the edge is invalid."""
        try:
            edge = self.document.add_edge(source, target, style=style)
        except InvalidEdgeEndpoint as e:
            logger.warning(f"Rejected edge in {self.document_id}: {e}")
            self._emit(EventType.EDGE_REJECTED, reason=str(e))
            return None
        self._emit(EventType.EDGE_ADDED, edge=edge.model_dump(mode="json", by_alias=True))
        return edge

    def remove_edge(self, edge_id: str) -> bool:
        removed = self.document.remove_edge(edge_id)
        if removed:
            self._emit(EventType.EDGE_REMOVED, edge_id=edge_id)
        return removed

    # === Pointer gestures ===

    def begin_resize(self, node_id: str, pointer: PointerEvent) -> PressResult:
        return self.controller.begin_resize(self.document.require_node(node_id), pointer)

    def begin_move(self, node_id: str, pointer: PointerEvent) -> PressResult:
        return self.controller.begin_move(self.document.require_node(node_id), pointer)

    def pointer_move(self, node_id: str, pointer: PointerEvent) -> Optional[InteractionUpdate]:
        return self._apply(self.controller.pointer_move(node_id, pointer))

    def pointer_up(self, node_id: str, pointer: Optional[PointerEvent] = None) -> Optional[InteractionUpdate]:
        return self._apply(self.controller.pointer_up(node_id, pointer))

    def pointer_leave(self, node_id: str) -> Optional[InteractionUpdate]:
        return self._apply(self.controller.pointer_leave(node_id))

    def _apply(self, update: Optional[InteractionUpdate]) -> Optional[InteractionUpdate]:
        if update is None:
            return None
        node = self.document.get_node(update.node_id)
        if node is None:
            # Node vanished mid-gesture (cancel or suggestion merge)
            self.controller.cancel(update.node_id)
            return None

        if isinstance(update, SizeUpdate):
            node.size = update.size.model_copy()
            if update.final:
                node.manually_resized = True
                self._emit(EventType.NODE_RESIZED, node_id=node.id, size=node.size.model_dump())
                self._arm_autosave("size")
        elif isinstance(update, PositionUpdate):
            if node.position != update.position:
                node.position = update.position.model_copy()
                self._position_changed(node)
            if update.final:
                self._emit(EventType.NODE_MOVED, node_id=node.id, position=node.position.model_dump())
        return update

    def _position_changed(self, node: Node) -> None:
        self._emit(EventType.POSITION_CHANGED, node_id=node.id, position=node.position.model_dump())
        self._arm_autosave("position")

    # === Editing and saving ===

    def start_editing(self) -> bool:
        started = self.edit.start_editing()
        if started:
            self._emit(EventType.EDITING_STARTED)
        return started

    def cancel_editing(self) -> None:
        """Discard all uncommitted changes, including any pending autosave and gesture."""
        self.scheduler.cancel_pending()
        self._generation += 1
        self.controller.cancel()
        self.edit.cancel_editing()
        self._emit(EventType.EDITING_CANCELLED)
        logger.info(f"Cancelled editing of {self.document_id}")

    async def save_now(self) -> CommitResult:
        """Commit the full working document immediately."""
        return await self.scheduler.save_now()

    async def save_changes(self) -> CommitResult:
        """Commit the working document and leave editing mode on success."""
        result = await self.save_now()
        if result.success:
            self.edit.is_editing = False
            self._emit(EventType.EDITING_SAVED)
        return result

    def _arm_autosave(self, reason: str) -> None:
        if not self.autosave:
            return
        self.scheduler.notify_change(reason)
        self._emit(EventType.AUTOSAVE_SCHEDULED, reason=reason, delay=self.scheduler.delay)

    def _committed_with_layout(self) -> GraphDocument:
        """The committed document with live positions and sizes applied."""
        document = snapshot(self.edit.committed)
        for node in document.nodes:
            live = self.document.get_node(node.id)
            if live is not None:
                node.position = live.position.model_copy()
                node.size = live.size.model_copy()
                node.manually_resized = live.manually_resized
        return document

    async def _commit(self, trigger: CommitTrigger) -> bool:
        if trigger == CommitTrigger.AUTOSAVE:
            document = self._committed_with_layout()
            if documents_equal(document, self.edit.committed):
                logger.debug(f"Autosave of {self.document_id}: no layout changes")
                return False
        else:
            document = snapshot(self.document)

        generation = self._generation
        await self.persistence.save(self.document_id, document)
        if generation != self._generation:
            # Cancelled or reloaded while the write was in flight: put the
            # store back to the restored baseline instead of adopting the write
            logger.info(f"Discarding stale {trigger.value} commit of {self.document_id}")
            await self.persistence.save(self.document_id, snapshot(self.edit.committed))
            return True
        self.edit.mark_committed(document)
        return True

    def _on_commit_result(self, result: CommitResult) -> None:
        if result.skipped:
            return
        if result.success:
            logger.info(f"Committed {self.document_id} ({result.trigger.value})")
            self._emit(EventType.COMMIT_SUCCEEDED, **result.to_dict())
        else:
            self._emit(EventType.COMMIT_FAILED, **result.to_dict())

    # === Suggestions ===

    def apply_suggestion(self, payload: Any) -> GraphDocument:
        """
        Replace the working graph with a suggested journey.

        The replacement is left uncommitted in editing mode, so cancelling
        restores the previous graph.

        Raises:
            SuggestionMergeRejected: empty or malformed payload; the document is untouched
        """
        try:
            entries = parse_suggestion_payload(payload)
            if not entries:
                raise SuggestionMergeRejected("Suggestion contains no steps")
            document = merge_suggestion(self.document, entries, sizer=self.sizer)
        except SuggestionMergeRejected as e:
            logger.warning(f"Rejected suggestion for {self.document_id}: {e}")
            self._emit(EventType.SUGGESTION_REJECTED, reason=str(e))
            raise

        self.controller.cancel()
        self.scheduler.cancel_pending()
        self.edit.working = document
        self.start_editing()
        self._emit(EventType.DOCUMENT_REPLACED, node_count=len(document.nodes))
        self._emit(
            EventType.SUGGESTION_APPLIED,
            node_count=len(document.nodes),
            edge_count=len(document.edges),
        )
        logger.info(f"Applied suggestion to {self.document_id}: {len(document.nodes)} nodes")
        return document
