"""
Wire format for graph documents.

The canonical shape is ``{"version", "nodes": [...], "edges": [...]}`` with
camelCase keys. Older callers stored diagram nodes in the canvas library's own
shape (``type`` plus a ``data`` object, ``source``/``sourceHandle`` edges) and
kept positions in a separate ``nodePositions`` map, sometimes JSON-encoded.
``load_document`` accepts all of these and normalizes them.
"""

import json
from typing import Any, Union

from loguru import logger
from pydantic import ValidationError

from journey_canvas import constants as const
from journey_canvas.exceptions import InvalidEdgeEndpoint, MalformedDocument

from .edge import Edge
from .graph_document import GraphDocument, HandleRef
from .handles import preferred_source_handle, preferred_target_handle
from .node import Node
from .types import Position


def _parse_json(raw: Union[str, bytes]) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedDocument(f"Document is not valid JSON: {e}") from e


def _normalize_node(raw: Any) -> dict:
    if not isinstance(raw, dict):
        raise MalformedDocument(f"Node entry must be an object, got {type(raw).__name__}")
    node = dict(raw)
    data = node.pop("data", None)
    if "kind" not in node and "type" in node:
        node["kind"] = node.pop("type")
    if isinstance(data, dict):
        node.setdefault("label", data.get("label", ""))
        node.setdefault("content", data.get("content", ""))
    if node.get("position") is None:
        node.pop("position", None)
    return node


def _normalize_edge(raw: Any) -> dict:
    if not isinstance(raw, dict):
        raise MalformedDocument(f"Edge entry must be an object, got {type(raw).__name__}")
    edge = dict(raw)
    for legacy, canonical in (
        ("source", "sourceNodeId"),
        ("target", "targetNodeId"),
        ("sourceHandle", "sourceHandleId"),
        ("targetHandle", "targetHandleId"),
    ):
        if canonical not in edge and legacy in edge:
            edge[canonical] = edge.pop(legacy)
    if not isinstance(edge.get("style"), str):
        edge.pop("style", None)
    return edge


def _fill_default_handles(document: GraphDocument, edge: dict) -> dict:
    # Edges drawn without explicit handles attach to the default flow handles
    for node_key, handle_key, pick in (
        ("sourceNodeId", "sourceHandleId", preferred_source_handle),
        ("targetNodeId", "targetHandleId", preferred_target_handle),
    ):
        if edge.get(handle_key):
            continue
        node = document.get_node(str(edge.get(node_key)))
        handle = pick(node.kind) if node is not None else None
        if handle is not None:
            edge[handle_key] = handle.id
    return edge


def parse_position_map(raw: Any) -> dict[str, Position]:
    """Parse a legacy ``nodeId -> {x, y}`` map, possibly JSON-encoded."""
    if raw is None or raw == "":
        return {}
    if isinstance(raw, (str, bytes)):
        raw = _parse_json(raw)
    if not isinstance(raw, dict):
        raise MalformedDocument("nodePositions must be an object")
    try:
        return {str(node_id): Position.model_validate(pos) for node_id, pos in raw.items()}
    except ValidationError as e:
        raise MalformedDocument(f"Invalid entry in nodePositions: {e}") from e


def load_document(raw: Union[str, bytes, dict, None]) -> GraphDocument:
    """
    Parse and validate a persisted document.

    Node shape errors fail the whole document; edges whose endpoints don't
    resolve are dropped with a warning and the rest of the graph is kept.

    Raises:
        MalformedDocument: the payload isn't JSON or doesn't have a document shape
    """
    data = _parse_json(raw) if isinstance(raw, (str, bytes)) else raw
    if not isinstance(data, dict):
        raise MalformedDocument("Document must be a JSON object")

    raw_nodes = data.get("nodes") or []
    raw_edges = data.get("edges") or []
    if not isinstance(raw_nodes, list) or not isinstance(raw_edges, list):
        raise MalformedDocument("'nodes' and 'edges' must be arrays")

    version = data.get("version", const.DOCUMENT_VERSION)
    if not isinstance(version, int) or isinstance(version, bool):
        raise MalformedDocument(f"Invalid document version: {version!r}")

    document = GraphDocument(version=version)
    for raw_node in raw_nodes:
        try:
            node = Node.model_validate(_normalize_node(raw_node))
        except ValidationError as e:
            raise MalformedDocument(f"Invalid node: {e}") from e
        node.size = node.spec.limits.clamp(node.size)
        try:
            document.insert_node(node)
        except ValueError as e:
            raise MalformedDocument(str(e)) from e

    for node_id, position in parse_position_map(data.get("nodePositions")).items():
        node = document.get_node(node_id)
        if node is not None:
            node.position = position

    for raw_edge in raw_edges:
        edge_data = _normalize_edge(raw_edge)
        missing = [
            str(edge_data.get(key))
            for key in ("sourceNodeId", "targetNodeId")
            if document.get_node(str(edge_data.get(key))) is None
        ]
        if missing:
            logger.warning(f"Dropping edge {edge_data.get('id')} on load: unknown nodes {missing}")
            continue
        try:
            edge = Edge.model_validate(_fill_default_handles(document, edge_data))
        except ValidationError as e:
            raise MalformedDocument(f"Invalid edge: {e}") from e
        try:
            document.add_edge(
                HandleRef(edge.source_node_id, edge.source_handle_id),
                HandleRef(edge.target_node_id, edge.target_handle_id),
                style=edge.style,
                edge_id=edge.id,
            )
        except InvalidEdgeEndpoint as e:
            logger.warning(f"Dropping edge {edge.id} on load: {e}")

    return document


def dump_document(document: GraphDocument) -> dict:
    """Full wire representation of a document."""
    return document.to_wire()


def dump_position_map(document: GraphDocument) -> dict[str, dict[str, float]]:
    """The legacy ``nodeId -> {x, y}`` map for callers that store positions separately."""
    return {
        node_id: position.model_dump()
        for node_id, position in document.positions().items()
    }
