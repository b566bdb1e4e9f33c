"""
Type definitions for the canvas engine.

Contains enums, geometry primitives, and the per-kind configuration structs.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from journey_canvas import constants as const


class NodeKind(str, Enum):
    """Kinds of steps that can be placed on a journey canvas."""
    AGENT = "agent"
    SYSTEM = "system"
    GUARDRAIL = "guardrail"
    DECISION = "decision"
    ESCALATION = "escalation"
    START = "start"
    END = "end"
    RETURN = "return"
    NOTE = "note"

    @classmethod
    def parse(cls, tag: object) -> Optional["NodeKind"]:
        """Parse a loose string tag (palette drop, suggestion payload) into a kind."""
        if isinstance(tag, cls):
            return tag
        if not isinstance(tag, str):
            return None
        try:
            return cls(tag.strip().lower())
        except ValueError:
            return None


class HandleType(str, Enum):
    """Direction of a connection handle."""
    SOURCE = "source"
    TARGET = "target"


class HandleSide(str, Enum):
    """Border of the node a handle sits on."""
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


class Position(BaseModel):
    """2D position of a node on the canvas."""
    x: float = 0.0
    y: float = 0.0


class Size(BaseModel):
    """Box dimensions of a node."""
    width: float = const.DEFAULT_MIN_WIDTH
    height: float = const.DEFAULT_MIN_HEIGHT


class SizeLimits(BaseModel):
    """Clamping rules and text metrics for one node kind."""
    model_config = ConfigDict(frozen=True)

    min_width: float = const.DEFAULT_MIN_WIDTH
    max_width: float = const.DEFAULT_MAX_WIDTH
    min_height: float = const.DEFAULT_MIN_HEIGHT
    line_height: float = const.LINE_HEIGHT
    char_width: float = const.CHAR_WIDTH
    padding: float = const.NODE_PADDING
    icon_width: float = const.ICON_WIDTH

    def clamp_width(self, width: float) -> float:
        return min(self.max_width, max(self.min_width, width))

    def clamp_height(self, height: float) -> float:
        return max(self.min_height, height)

    def clamp(self, size: Size) -> Size:
        """A copy of ``size`` pulled inside these limits."""
        return Size(width=self.clamp_width(size.width), height=self.clamp_height(size.height))


class HandleSpec(BaseModel):
    """A typed connection anchor at a fixed place on a node's border."""
    model_config = ConfigDict(frozen=True)

    id: str
    type: HandleType
    side: HandleSide
    offset: float = 0.5  # Fraction along the side, 0..1


class KindSpec(BaseModel):
    """Static description of a node kind: handles, sizing and defaults."""
    model_config = ConfigDict(frozen=True)

    kind: NodeKind
    handles: tuple[HandleSpec, ...] = ()
    limits: SizeLimits = Field(default_factory=SizeLimits)
    draggable: bool = True
    resizable: bool = True
    default_label: str = ""
    default_content: str = ""

    def source_handles(self) -> tuple[HandleSpec, ...]:
        return tuple(h for h in self.handles if h.type == HandleType.SOURCE)

    def target_handles(self) -> tuple[HandleSpec, ...]:
        return tuple(h for h in self.handles if h.type == HandleType.TARGET)
