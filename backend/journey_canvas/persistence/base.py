"""
Abstract base class for persistence services.

A persistence service stores whole graph documents keyed by document id.
Commits are never partial: every save carries the full node and edge sets.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from journey_canvas.canvas.graph_document import GraphDocument


class PersistenceService(ABC):
    """
    Abstract async persistence service.
    
    All methods are async; callers must not block interaction while a
    commit is outstanding.
    """
    
    # === Lifecycle ===
    
    @abstractmethod
    async def initialize(self) -> None:
        """Open connections and create schema if needed."""
        ...
    
    @abstractmethod
    async def close(self) -> None:
        """Close connections."""
        ...
    
    # === Document Operations ===
    
    @abstractmethod
    async def load(self, document_id: str) -> "GraphDocument":
        """
        Load a document by ID.
        
        Raises:
            DocumentNotFound: no document stored under this id
            MalformedDocument: stored payload fails to parse or validate
        """
        ...
    
    @abstractmethod
    async def save(self, document_id: str, document: "GraphDocument") -> None:
        """
        Create or replace a document.
        
        Raises:
            PersistenceCommitFailed: the write did not go through
        """
        ...
    
    @abstractmethod
    async def exists(self, document_id: str) -> bool:
        """Check if a document exists."""
        ...
    
    @abstractmethod
    async def delete(self, document_id: str) -> None:
        """Delete a document. Deleting a missing document is a no-op."""
        ...
    
    @abstractmethod
    async def list_documents(self) -> list[dict]:
        """
        List stored documents.
        
        Returns:
            List of dicts with id, node_count, edge_count, updated_at
        """
        ...
