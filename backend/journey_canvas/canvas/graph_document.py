"""
GraphDocument class - the authoritative in-memory model of a journey canvas.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NamedTuple, Optional, Union

from pydantic import BaseModel, Field

from journey_canvas import constants as const
from journey_canvas.exceptions import InvalidEdgeEndpoint, NodeNotFound

from .edge import DEFAULT_EDGE_STYLE, Edge
from .handles import find_handle, kind_spec
from .node import Node, new_node_id
from .types import HandleType, NodeKind, Position, Size


UPDATABLE_FIELDS = ("label", "content", "position", "size", "manually_resized")


class HandleRef(NamedTuple):
    """One end of an edge: a node id plus one of its handle ids."""
    node_id: str
    handle_id: str


@dataclass
class NodeChange:
    """What an update actually changed on a node."""
    node: Node
    content_changed: bool = False
    position_changed: bool = False
    size_changed: bool = False

    @property
    def changed(self) -> bool:
        return self.content_changed or self.position_changed or self.size_changed


class GraphDocument(BaseModel):
    """The nodes and edges of one journey canvas, plus a format version tag."""
    version: int = const.DOCUMENT_VERSION
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by ID."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def require_node(self, node_id: str) -> Node:
        node = self.get_node(node_id)
        if node is None:
            raise NodeNotFound(f"Node {node_id} not found")
        return node

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def get_edges_for_node(self, node_id: str) -> list[Edge]:
        """Get all edges connected to a node."""
        return [edge for edge in self.edges if edge.touches(node_id)]

    def positions(self) -> dict[str, Position]:
        """The node id -> position map."""
        return {node.id: node.position.model_copy() for node in self.nodes}

    # Mutations

    def _unused_node_id(self) -> str:
        taken = {node.id for node in self.nodes}
        node_id = new_node_id()
        while node_id in taken:
            node_id = new_node_id()
        return node_id

    def add_node(
        self,
        kind: Union[NodeKind, str],
        position: Optional[Position] = None,
        label: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Node:
        """
        Create a node of the given kind with a fresh id and kind defaults.

        Args:
            kind: Node kind to instantiate
            position: Canvas coordinates (defaults to the origin)
            label: Overrides the kind's default label
            content: Overrides the kind's default content

        Returns:
            The inserted node
        """
        spec = kind_spec(NodeKind(kind))
        node = Node(
            id=self._unused_node_id(),
            kind=spec.kind,
            label=spec.default_label if label is None else label,
            content=spec.default_content if content is None else content,
            position=position.model_copy() if position else Position(),
            size=Size(width=spec.limits.min_width, height=spec.limits.min_height),
        )
        self.nodes.append(node)
        return node

    def insert_node(self, node: Node) -> Node:
        """Insert an already-built node, keeping its id."""
        if self.get_node(node.id) is not None:
            raise ValueError(f"Duplicate node id: {node.id}")
        self.nodes.append(node)
        return node

    def validate_edge(self, source: HandleRef, target: HandleRef) -> None:
        """Raise InvalidEdgeEndpoint unless both ends are existing, correctly typed handles."""
        for ref, expected in ((source, HandleType.SOURCE), (target, HandleType.TARGET)):
            node = self.get_node(ref.node_id)
            if node is None:
                raise InvalidEdgeEndpoint(f"Node {ref.node_id} does not exist")
            handle = find_handle(node.kind, ref.handle_id)
            if handle is None:
                raise InvalidEdgeEndpoint(
                    f"Node {ref.node_id} ({node.kind.value}) has no handle '{ref.handle_id}'"
                )
            if handle.type != expected:
                raise InvalidEdgeEndpoint(
                    f"Handle '{ref.handle_id}' on {ref.node_id} is a {handle.type.value} handle, "
                    f"expected {expected.value}"
                )

    def add_edge(
        self,
        source: HandleRef,
        target: HandleRef,
        style: str = DEFAULT_EDGE_STYLE,
        edge_id: Optional[str] = None,
    ) -> Edge:
        """
        Connect a source handle to a target handle.

        The graph is left untouched if either endpoint is invalid. Connecting
        the same pair of handles twice returns the existing edge.

        Raises:
            InvalidEdgeEndpoint: missing node, unknown handle or wrong direction
        """
        source, target = HandleRef(*source), HandleRef(*target)
        self.validate_edge(source, target)

        for edge in self.edges:
            if (
                edge.source_node_id == source.node_id
                and edge.source_handle_id == source.handle_id
                and edge.target_node_id == target.node_id
                and edge.target_handle_id == target.handle_id
            ):
                return edge

        kwargs: dict[str, Any] = {}
        if edge_id is not None:
            if self.get_edge(edge_id) is not None:
                raise InvalidEdgeEndpoint(f"Duplicate edge id: {edge_id}")
            kwargs["id"] = edge_id
        edge = Edge(
            source_node_id=source.node_id,
            source_handle_id=source.handle_id,
            target_node_id=target.node_id,
            target_handle_id=target.handle_id,
            style=style,
            **kwargs,
        )
        self.edges.append(edge)
        return edge

    def remove_node(self, node_id: str) -> list[Edge]:
        """
        Remove a node and every edge that references it.

        Returns:
            The edges removed along with the node
        """
        self.require_node(node_id)
        removed = self.get_edges_for_node(node_id)
        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.edges = [e for e in self.edges if not e.touches(node_id)]
        return removed

    def remove_edge(self, edge_id: str) -> bool:
        """Remove an edge. Returns False if it didn't exist."""
        before = len(self.edges)
        self.edges = [e for e in self.edges if e.id != edge_id]
        return len(self.edges) != before

    def update_node(self, node_id: str, **changes: Any) -> NodeChange:
        """
        Replace only the given fields of a node.

        Accepts ``label``, ``content``, ``position``, ``size`` and
        ``manually_resized``. Position and size may be models or plain dicts.
        Sizes are clamped to the node kind's limits.
        Fields whose new value equals the old one don't count as changes.
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update node fields: {', '.join(sorted(unknown))}")

        node = self.require_node(node_id)
        change = NodeChange(node=node)

        if "position" in changes:
            position = Position.model_validate(changes.pop("position")).model_copy()
            if position != node.position:
                node.position = position
                change.position_changed = True
        if "size" in changes:
            size = node.spec.limits.clamp(Size.model_validate(changes.pop("size")))
            if size != node.size:
                node.size = size
                change.size_changed = True
        for field_name in ("label", "content"):
            if field_name in changes:
                value = changes.pop(field_name)
                if value != getattr(node, field_name):
                    setattr(node, field_name, value)
                    change.content_changed = True
        if "manually_resized" in changes:
            node.manually_resized = bool(changes.pop("manually_resized"))

        return change

    # Persistence methods

    def to_wire(self) -> dict:
        """The JSON-ready wire representation (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)

    def save(self, path: Path) -> None:
        """Save the document to a JSON file."""
        with open(path, "w") as f:
            json.dump(self.to_wire(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> "GraphDocument":
        """Load a document from a JSON file."""
        from .serialization import load_document

        with open(path, "r") as f:
            return load_document(f.read())
