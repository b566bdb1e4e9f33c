"""
Node class for the canvas engine.
"""

import uuid
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .types import KindSpec, NodeKind, Position, Size
from .handles import kind_spec


def new_node_id() -> str:
    return f"node_{uuid.uuid4().hex[:8]}"


class Node(BaseModel):
    """A step on the journey canvas."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_node_id)
    kind: NodeKind
    label: str = ""
    content: str = ""
    position: Position = Field(default_factory=Position)
    size: Size = Field(default_factory=Size)
    # Set by an interactive resize; cleared when label/content change again
    manually_resized: bool = False

    @property
    def spec(self) -> KindSpec:
        return kind_spec(self.kind)
