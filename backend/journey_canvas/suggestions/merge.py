"""
Suggestion merge: builds a complete graph document from suggested steps.

The merge replaces the current graph. Node ids are derived from kind and
payload index, so identical input yields identical ids. Steps are chained in
payload order; notes never join the chain.
"""

from typing import Any, Optional, Sequence, Union

from loguru import logger

from journey_canvas import constants as const
from journey_canvas.canvas.edge import Edge
from journey_canvas.canvas.graph_document import GraphDocument, HandleRef
from journey_canvas.canvas.handles import kind_spec, preferred_source_handle, preferred_target_handle
from journey_canvas.canvas.node import Node
from journey_canvas.canvas.sizing import AutoSizer
from journey_canvas.canvas.types import NodeKind, Position

from .payload import SuggestionEntry, parse_suggestion_payload


def suggestion_node_id(kind: NodeKind, index: int) -> str:
    return f"{kind.value}-{index}"


def default_layout_position(index: int, previous: Optional[Node]) -> Position:
    """
    Zig-zag placement: alternate columns, each row below the previous node.

    The row step grows with the previous node's height so tall nodes never
    overlap the next one.
    """
    x = const.LAYOUT_ORIGIN_X + (const.LAYOUT_ZIGZAG_OFFSET if index % 2 else 0)
    if previous is None:
        return Position(x=x, y=const.LAYOUT_ORIGIN_Y)
    step = max(const.LAYOUT_ROW_SPACING, previous.size.height + const.LAYOUT_ROW_GAP)
    return Position(x=x, y=previous.position.y + step)


def synthesize_edges(document: GraphDocument, nodes: Sequence[Node]) -> list[Edge]:
    """
    Chain nodes in order, skipping notes.

    Each non-note node connects to the next non-note node after it. Pairs
    whose kinds lack a suitable source or target handle are left unconnected.
    """
    flow = [node for node in nodes if node.kind != NodeKind.NOTE]
    edges = []
    for current, successor in zip(flow, flow[1:]):
        source = preferred_source_handle(current.kind)
        target = preferred_target_handle(successor.kind)
        if source is None or target is None:
            logger.debug(f"No flow handles between {current.id} and {successor.id}; not connecting")
            continue
        edges.append(document.add_edge(
            HandleRef(current.id, source.id),
            HandleRef(successor.id, target.id),
            edge_id=f"edge-{current.id}-{successor.id}",
        ))
    return edges


def merge_suggestion(
    current: GraphDocument,
    suggestion: Union[Sequence[SuggestionEntry], Any],
    sizer: Optional[AutoSizer] = None,
) -> GraphDocument:
    """
    Build the document that replaces ``current`` with the suggested steps.

    ``current`` itself is not modified; only its format version carries over.
    An empty suggestion produces an empty graph.

    Args:
        current: The document being replaced
        suggestion: Parsed entries or a raw payload (see parse_suggestion_payload)
        sizer: Auto-sizer for the new nodes

    Raises:
        SuggestionMergeRejected: a raw payload that can't be parsed
    """
    entries = parse_suggestion_payload(suggestion)
    sizer = sizer or AutoSizer()
    document = GraphDocument(version=current.version)

    previous: Optional[Node] = None
    nodes = []
    for index, entry in enumerate(entries):
        spec = kind_spec(entry.kind)
        label = entry.label or spec.default_label
        node = Node(
            id=suggestion_node_id(entry.kind, index),
            kind=entry.kind,
            label=label,
            content=entry.content,
        )
        node.size = sizer.size_node(node)
        node.position = entry.position or default_layout_position(index, previous)
        document.insert_node(node)
        nodes.append(node)
        previous = node

    synthesize_edges(document, nodes)
    logger.info(f"Merged suggestion: {len(document.nodes)} nodes, {len(document.edges)} edges")
    return document
