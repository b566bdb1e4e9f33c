"""
Session module - edit tracking, autosave and the canvas session orchestrator.
"""

from .edit_session import EditSession, documents_equal, snapshot
from .autosave import AutosaveScheduler, CommitResult, CommitTrigger
from .canvas_session import CanvasSession

__all__ = [
    "EditSession",
    "documents_equal",
    "snapshot",
    "AutosaveScheduler",
    "CommitResult",
    "CommitTrigger",
    "CanvasSession",
]
