"""
Canvas module - graph document model, sizing and pointer interaction.
"""

from .types import (
    NodeKind,
    HandleType,
    HandleSide,
    Position,
    Size,
    SizeLimits,
    HandleSpec,
    KindSpec,
)
from .handles import KIND_TABLE, kind_spec, find_handle
from .node import Node
from .edge import Edge
from .graph_document import GraphDocument, HandleRef, NodeChange
from .serialization import load_document, dump_document, dump_position_map
from .sizing import AutoSizer, MeasurementAdapter, HeuristicMeasurementAdapter, Measurement
from .interaction import (
    ResizeDragController,
    InteractionMode,
    PointerEvent,
    SizeUpdate,
    PositionUpdate,
    PressResult,
)

__all__ = [
    # Types
    "NodeKind",
    "HandleType",
    "HandleSide",
    "Position",
    "Size",
    "SizeLimits",
    "HandleSpec",
    "KindSpec",
    "KIND_TABLE",
    "kind_spec",
    "find_handle",
    # Core classes
    "Node",
    "Edge",
    "GraphDocument",
    "HandleRef",
    "NodeChange",
    "load_document",
    "dump_document",
    "dump_position_map",
    # Sizing
    "AutoSizer",
    "MeasurementAdapter",
    "HeuristicMeasurementAdapter",
    "Measurement",
    # Interaction
    "ResizeDragController",
    "InteractionMode",
    "PointerEvent",
    "SizeUpdate",
    "PositionUpdate",
    "PressResult",
]
