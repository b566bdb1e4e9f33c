from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict


class EventType(Enum):
    """Enumeration of all signals emitted by a canvas session."""
    NODE_ADDED = "node.added"
    NODE_REMOVED = "node.removed"
    NODE_UPDATED = "node.updated"
    NODE_RESIZED = "node.resized"
    NODE_MOVED = "node.moved"
    CONTENT_CHANGED = "content.changed"
    POSITION_CHANGED = "position.changed"
    EDGE_ADDED = "edge.added"
    EDGE_REMOVED = "edge.removed"
    EDGE_REJECTED = "edge.rejected"
    DOCUMENT_LOADED = "document.loaded"
    DOCUMENT_RECOVERED = "document.recovered"
    DOCUMENT_REPLACED = "document.replaced"
    EDITING_STARTED = "editing.started"
    EDITING_CANCELLED = "editing.cancelled"
    EDITING_SAVED = "editing.saved"
    AUTOSAVE_SCHEDULED = "autosave.scheduled"
    COMMIT_SUCCEEDED = "commit.succeeded"
    COMMIT_FAILED = "commit.failed"
    SUGGESTION_APPLIED = "suggestion.applied"
    SUGGESTION_REJECTED = "suggestion.rejected"


@dataclass
class Event:
    """Represents a single signal from a canvas session."""
    type: EventType
    document_id: str
    timestamp: datetime = field(default_factory=datetime.now)
    data: Dict[str, Any] = field(default_factory=dict)
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            'type': self.type.value,
            'document_id': self.document_id,
            'timestamp': self.timestamp.isoformat(),
            'data': self.data
        }
