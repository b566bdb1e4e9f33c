"""
In-process persistence service.

Keeps wire-format JSON strings in a dict, so documents go through the same
serialization path as a real backend.
"""

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Union

from journey_canvas.canvas.serialization import load_document
from journey_canvas.exceptions import DocumentNotFound, PersistenceCommitFailed

from .base import PersistenceService

if TYPE_CHECKING:
    from journey_canvas.canvas.graph_document import GraphDocument


class MemoryPersistenceService(PersistenceService):
    """Dict-backed PersistenceService, used by tests and single-process setups."""

    def __init__(self):
        self._documents: dict[str, str] = {}
        self._updated_at: dict[str, datetime] = {}
        # When set, save() fails without storing anything
        self.fail_saves = False
        self.save_count = 0

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass

    def put_raw(self, document_id: str, raw: Union[str, dict]) -> None:
        """Store a payload as-is, e.g. one written by an older client."""
        self._documents[document_id] = raw if isinstance(raw, str) else json.dumps(raw)
        self._updated_at[document_id] = datetime.now(timezone.utc)

    def get_raw(self, document_id: str) -> dict:
        if document_id not in self._documents:
            raise DocumentNotFound(f"Document {document_id} not found")
        return json.loads(self._documents[document_id])

    async def load(self, document_id: str) -> "GraphDocument":
        if document_id not in self._documents:
            raise DocumentNotFound(f"Document {document_id} not found")
        return load_document(self._documents[document_id])

    async def save(self, document_id: str, document: "GraphDocument") -> None:
        if self.fail_saves:
            raise PersistenceCommitFailed(f"Saving document {document_id} failed: backend unavailable")
        self.save_count += 1
        self.put_raw(document_id, document.to_wire())

    async def exists(self, document_id: str) -> bool:
        return document_id in self._documents

    async def delete(self, document_id: str) -> None:
        self._documents.pop(document_id, None)
        self._updated_at.pop(document_id, None)

    async def list_documents(self) -> list[dict]:
        listing = []
        for document_id, raw in self._documents.items():
            try:
                data = json.loads(raw)
            except ValueError:
                data = None
            listing.append({
                "id": document_id,
                "node_count": len(data.get("nodes") or []) if isinstance(data, dict) else 0,
                "edge_count": len(data.get("edges") or []) if isinstance(data, dict) else 0,
                "updated_at": self._updated_at[document_id].isoformat(),
            })
        return sorted(listing, key=lambda d: d["updated_at"], reverse=True)
