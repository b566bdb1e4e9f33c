"""
Parsing of externally produced suggestion payloads.

A suggestion service returns a loosely typed list of steps. Ids, positions
and edges are never trusted; kinds and text are coerced where possible.
"""

import json
import math
from typing import Any, Optional

from loguru import logger
from pydantic import BaseModel, ValidationError

from journey_canvas.canvas.types import NodeKind, Position
from journey_canvas.exceptions import SuggestionMergeRejected


# Container keys a service may wrap its step list in
PAYLOAD_LIST_KEYS = ("nodes", "steps", "suggestions")


class SuggestionEntry(BaseModel):
    """One suggested step."""
    kind: NodeKind
    label: str = ""
    content: str = ""
    position: Optional[Position] = None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _position(value: Any) -> Optional[Position]:
    if not isinstance(value, dict):
        return None
    x, y = value.get("x"), value.get("y")
    if isinstance(x, bool) or isinstance(y, bool):
        return None
    if not isinstance(x, (int, float)) or not isinstance(y, (int, float)):
        return None
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    try:
        return Position(x=x, y=y)
    except ValidationError:
        return None


def parse_entry(raw: Any, index: int) -> Optional[SuggestionEntry]:
    """Coerce one raw entry; returns None for entries that aren't objects."""
    if not isinstance(raw, dict):
        logger.warning(f"Skipping suggestion entry {index}: not an object")
        return None
    tag = raw.get("kind", raw.get("type"))
    kind = NodeKind.parse(tag)
    if kind is None:
        logger.warning(f"Suggestion entry {index} has unknown kind {tag!r}, using agent")
        kind = NodeKind.AGENT
    return SuggestionEntry(
        kind=kind,
        label=_text(raw.get("label", raw.get("title"))),
        content=_text(raw.get("content", raw.get("description"))),
        position=_position(raw.get("position")),
    )


def parse_suggestion_payload(raw: Any) -> list[SuggestionEntry]:
    """
    Turn a raw payload into suggestion entries.

    Accepts a JSON string, a list of entries, or an object wrapping the
    list under one of ``nodes``/``steps``/``suggestions``. An empty list is
    valid and yields no entries.

    Raises:
        SuggestionMergeRejected: the payload has no recognizable step list
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise SuggestionMergeRejected(f"Suggestion payload is not valid JSON: {e}") from e

    if isinstance(raw, dict):
        for key in PAYLOAD_LIST_KEYS:
            if isinstance(raw.get(key), list):
                raw = raw[key]
                break
        else:
            raise SuggestionMergeRejected("Suggestion payload has no step list")

    if not isinstance(raw, list):
        raise SuggestionMergeRejected(
            f"Suggestion payload must be a list, got {type(raw).__name__}"
        )

    entries = []
    for index, item in enumerate(raw):
        if isinstance(item, SuggestionEntry):
            entries.append(item)
            continue
        entry = parse_entry(item, index)
        if entry is not None:
            entries.append(entry)
    return entries
