"""
SQLModel graph document database model.
"""

import json
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON, Text

if TYPE_CHECKING:
    from journey_canvas.canvas.graph_document import GraphDocument


class GraphDocumentDB(SQLModel, table=True):
    """
    Database model for persisted canvas documents.
    
    Maps to the 'graph_documents' table. The graph itself is an opaque JSON
    payload; positions are mirrored into ``node_positions`` for callers that
    only read the legacy position map.
    """
    __tablename__ = "graph_documents"
    
    id: str = Field(primary_key=True)
    version: int = Field(default=1)
    
    # Full wire document (nodes + edges)
    payload: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    
    # JSON-encoded nodeId -> {x, y} map
    node_positions: Optional[str] = Field(default=None, sa_column=Column(Text))
    
    # Timestamps
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    
    def to_document(self) -> "GraphDocument":
        """Convert database model to the in-memory document."""
        from journey_canvas.canvas.serialization import load_document
        
        data = dict(self.payload or {})
        if "nodePositions" not in data and self.node_positions:
            data["nodePositions"] = self.node_positions
        return load_document(data)
    
    @classmethod
    def from_document(cls, document_id: str, document: "GraphDocument") -> "GraphDocumentDB":
        """Create database model from the in-memory document."""
        from journey_canvas.canvas.serialization import dump_position_map
        
        return cls(
            id=document_id,
            version=document.version,
            payload=document.to_wire(),
            node_positions=json.dumps(dump_position_map(document)),
        )
