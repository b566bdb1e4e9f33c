"""
The kind table: handles, size limits and default text for every node kind.

Handle ids are part of the persisted edge format, so renaming one breaks
existing documents.
"""

from typing import Optional

from .types import HandleSide, HandleSpec, HandleType, KindSpec, NodeKind, SizeLimits


def _source(handle_id: str, side: HandleSide, offset: float = 0.5) -> HandleSpec:
    return HandleSpec(id=handle_id, type=HandleType.SOURCE, side=side, offset=offset)


def _target(handle_id: str, side: HandleSide, offset: float = 0.5) -> HandleSpec:
    return HandleSpec(id=handle_id, type=HandleType.TARGET, side=side, offset=offset)


# Terminal nodes render at a fixed narrow width; notes are wider but unconnected.
_TERMINAL_LIMITS = SizeLimits(min_width=200, max_width=400)
_NOTE_LIMITS = SizeLimits(min_width=300, max_width=600)


KIND_TABLE: dict[NodeKind, KindSpec] = {
    NodeKind.AGENT: KindSpec(
        kind=NodeKind.AGENT,
        handles=(
            _target("target-left", HandleSide.LEFT, 0.3),
            _target("target-top", HandleSide.TOP),
            _target("target-bottom", HandleSide.BOTTOM),
            _source("source-right", HandleSide.RIGHT, 0.3),
            _source("source-right-bottom", HandleSide.RIGHT, 0.7),
            _source("source-bottom", HandleSide.BOTTOM),
        ),
        default_label="Agent Process",
        default_content="Describe how the agent handles this step",
    ),
    NodeKind.SYSTEM: KindSpec(
        kind=NodeKind.SYSTEM,
        handles=(
            _target("target-left", HandleSide.LEFT, 0.3),
            _target("target-left-bottom", HandleSide.LEFT, 0.7),
            _target("target-top", HandleSide.TOP),
            _source("source-right", HandleSide.RIGHT, 0.3),
            _source("source-right-bottom", HandleSide.RIGHT, 0.7),
            _source("source-bottom", HandleSide.BOTTOM),
        ),
        default_label="Backend System",
        default_content="Integration with external system or database",
    ),
    NodeKind.GUARDRAIL: KindSpec(
        kind=NodeKind.GUARDRAIL,
        handles=(
            _target("target-left", HandleSide.LEFT, 0.3),
            _target("target-top", HandleSide.TOP),
            _source("source-right", HandleSide.RIGHT, 0.3),
            _source("source-right-bottom", HandleSide.RIGHT, 0.7),
            _source("source-bottom", HandleSide.BOTTOM),
        ),
        default_label="Guardrail Check",
        default_content="Define validation, safety checks, or constraints",
    ),
    NodeKind.DECISION: KindSpec(
        kind=NodeKind.DECISION,
        handles=(
            _target("target-left", HandleSide.LEFT, 0.3),
            _target("target-top", HandleSide.TOP),
            _source("source-right-1", HandleSide.RIGHT, 0.2),
            _source("source-right-2", HandleSide.RIGHT, 0.4),
            _source("source-right-3", HandleSide.RIGHT, 0.6),
            _source("source-right-4", HandleSide.RIGHT, 0.8),
            _source("source-bottom-1", HandleSide.BOTTOM, 0.25),
            _source("source-bottom-2", HandleSide.BOTTOM, 0.5),
            _source("source-bottom-3", HandleSide.BOTTOM, 0.75),
        ),
        default_label="Decision Point",
        default_content="Define a decision with multiple possible outcomes",
    ),
    NodeKind.ESCALATION: KindSpec(
        kind=NodeKind.ESCALATION,
        handles=(
            _target("target-left", HandleSide.LEFT, 0.3),
            _target("target-left-bottom", HandleSide.LEFT, 0.7),
            _target("target-top", HandleSide.TOP),
            _source("source-right", HandleSide.RIGHT, 0.3),
            _source("source-bottom", HandleSide.BOTTOM),
            _source("source-bottom-human", HandleSide.BOTTOM, 0.75),
        ),
        default_label="Escalation Point",
        default_content="Define when and how to escalate to human agents",
    ),
    NodeKind.START: KindSpec(
        kind=NodeKind.START,
        handles=(
            _source("source-right", HandleSide.RIGHT),
            _source("source-bottom", HandleSide.BOTTOM),
        ),
        limits=_TERMINAL_LIMITS,
        resizable=False,
        default_label="Start",
        default_content="Journey entry point",
    ),
    NodeKind.END: KindSpec(
        kind=NodeKind.END,
        handles=(
            _target("target-left", HandleSide.LEFT),
            _target("target-top", HandleSide.TOP),
        ),
        limits=_TERMINAL_LIMITS,
        resizable=False,
        default_label="End",
        default_content="Journey completed",
    ),
    NodeKind.RETURN: KindSpec(
        kind=NodeKind.RETURN,
        handles=(
            _target("target-left", HandleSide.LEFT, 0.3),
            _target("target-top", HandleSide.TOP),
            _source("source-right", HandleSide.RIGHT, 0.3),
            _source("source-bottom", HandleSide.BOTTOM),
        ),
        limits=_TERMINAL_LIMITS,
        resizable=False,
        default_label="Return",
        default_content="Return to an earlier step",
    ),
    NodeKind.NOTE: KindSpec(
        kind=NodeKind.NOTE,
        limits=_NOTE_LIMITS,
        default_label="Note",
        default_content="Add documentation for this journey",
    ),
}


def kind_spec(kind: NodeKind) -> KindSpec:
    """Get the static spec for a node kind."""
    return KIND_TABLE[NodeKind(kind)]


def find_handle(kind: NodeKind, handle_id: str) -> Optional[HandleSpec]:
    """Look up a handle of a kind by id."""
    for handle in kind_spec(kind).handles:
        if handle.id == handle_id:
            return handle
    return None


def preferred_source_handle(kind: NodeKind) -> Optional[HandleSpec]:
    """Pick the handle used when synthesizing a flow edge out of a node."""
    sources = kind_spec(kind).source_handles()
    for preferred in ("source-bottom", "source-bottom-1"):
        for handle in sources:
            if handle.id == preferred:
                return handle
    return sources[0] if sources else None


def preferred_target_handle(kind: NodeKind) -> Optional[HandleSpec]:
    """Pick the handle used when synthesizing a flow edge into a node."""
    targets = kind_spec(kind).target_handles()
    for handle in targets:
        if handle.id == "target-top":
            return handle
    return targets[0] if targets else None
