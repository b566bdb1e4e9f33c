from .event import Event, EventType
from .eventbus import EventBus

__all__ = ["Event", "EventType", "EventBus"]
