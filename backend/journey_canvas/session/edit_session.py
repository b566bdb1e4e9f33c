"""
EditSession - committed/working snapshot pair with derived dirty state.
"""

from typing import Optional

from loguru import logger

from journey_canvas.canvas.graph_document import GraphDocument


def snapshot(document: GraphDocument) -> GraphDocument:
    """Independent deep copy of a document."""
    return document.model_copy(deep=True)


def canonical(document: GraphDocument) -> dict:
    """Order-insensitive representation used for equality checks."""
    return {
        "version": document.version,
        "nodes": {node.id: node.model_dump() for node in document.nodes},
        "edges": {edge.id: edge.model_dump() for edge in document.edges},
    }


def documents_equal(a: GraphDocument, b: GraphDocument) -> bool:
    return canonical(a) == canonical(b)


class EditSession:
    """
    Tracks the last persisted state of a document against the in-memory one.

    ``dirty`` is computed by comparing the two snapshots, never by counting
    mutations, so editing a value back to what was committed clears it.
    """

    def __init__(self, document: Optional[GraphDocument] = None):
        initial = document if document is not None else GraphDocument()
        self._initial = snapshot(initial)
        self.committed = snapshot(initial)
        self.working = snapshot(initial)
        self.is_editing = False

    @property
    def dirty(self) -> bool:
        return not documents_equal(self.working, self.committed)

    def start_editing(self) -> bool:
        """Enter editing mode. Returns False if already editing."""
        if self.is_editing:
            return False
        self.is_editing = True
        return True

    def cancel_editing(self) -> None:
        """Discard uncommitted changes and leave editing mode."""
        self.working = snapshot(self.committed)
        self.is_editing = False

    def save_changes(self) -> None:
        """Adopt the working state as committed and leave editing mode."""
        self.committed = snapshot(self.working)
        self.is_editing = False

    def mark_committed(self, document: GraphDocument) -> None:
        """Record a snapshot the persistence service has acknowledged."""
        self.committed = snapshot(document)

    def replace_committed(self, document: GraphDocument) -> None:
        """Adopt a freshly loaded document as both committed and working state."""
        self.committed = snapshot(document)
        self.working = snapshot(document)

    def reset(self) -> None:
        """Return to the state the session was created with."""
        logger.debug("Resetting edit session to its initial document")
        self.committed = snapshot(self._initial)
        self.working = snapshot(self._initial)
        self.is_editing = False
