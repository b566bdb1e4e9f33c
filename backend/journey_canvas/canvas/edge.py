"""
Edge class for the canvas engine.
"""

import uuid
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


DEFAULT_EDGE_STYLE = "smoothstep"


class Edge(BaseModel):
    """A connection between two node handles."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: f"edge_{uuid.uuid4().hex[:8]}")
    source_node_id: str
    source_handle_id: str
    target_node_id: str
    target_handle_id: str
    style: str = DEFAULT_EDGE_STYLE  # Presentation tag only

    def touches(self, node_id: str) -> bool:
        """Whether this edge has the node at either end."""
        return self.source_node_id == node_id or self.target_node_id == node_id
