"""
WebSocket server for Journey Canvas using FastAPI + python-socketio.

Handles:
- Opening documents into per-document canvas sessions
- Node/edge editing, palette drops and resize/drag gestures
- Edit mode, autosave and manual saves
- Applying generated journey and use-case field suggestions
- Event forwarding to every client viewing a document
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from loguru import logger
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import socketio

from journey_canvas.config import load_settings
from journey_canvas.events import EventBus, EventType
from journey_canvas.exceptions import CanvasError, SuggestionMergeRejected
from journey_canvas.persistence import get_persistence_service
from journey_canvas.session import CanvasSession
from journey_canvas.suggestions import merge_field_suggestion
from journey_canvas.canvas import HandleRef, NodeKind, PointerEvent, Position, Size


settings = load_settings()

# Global components (initialized in lifespan)
event_bus: EventBus = None
persistence = None

# document_id -> open session
_sessions: dict[str, CanvasSession] = {}
# document_id -> task loading that session
_loads: dict[str, asyncio.Task] = {}
# sid -> document_id the client is viewing
_client_documents: dict[str, str] = {}


def event_handler(event):
    """Forward canvas events to the clients viewing the document."""
    try:
        asyncio.create_task(sio.emit('canvas_event', event.to_dict(), room=event.document_id))
    except Exception as e:
        logger.error(f"Failed to emit event: {e}")


def commit_handler(event):
    """Turn commit results into notifications; autosaves only notify on failure."""
    if event.type == EventType.COMMIT_SUCCEEDED and event.data.get("silent"):
        return
    if event.type == EventType.COMMIT_SUCCEEDED:
        payload = {"type": "success", "message": "Journey saved"}
    else:
        payload = {"type": "error", "message": f"Save failed: {event.data.get('error')}"}
    payload["trigger"] = event.data.get("trigger")
    try:
        asyncio.create_task(sio.emit('notification', payload, room=event.document_id))
    except Exception as e:
        logger.error(f"Failed to emit notification: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - initialize and cleanup resources."""
    global event_bus, persistence

    logger.info("Initializing Journey Canvas server...")

    event_bus = EventBus()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    persistence = await get_persistence_service(settings.db_backend, db_path=str(settings.db_path))

    event_bus.subscribe_all(event_handler)
    event_bus.subscribe(EventType.COMMIT_SUCCEEDED, commit_handler)
    event_bus.subscribe(EventType.COMMIT_FAILED, commit_handler)

    logger.info(f"Server initialized. Data directory: {settings.data_dir}")

    yield

    logger.info("Shutting down Journey Canvas server...")
    for session in list(_sessions.values()):
        await session.close()
    _sessions.clear()
    _loads.clear()
    await persistence.close()


# Create FastAPI app
app = FastAPI(lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create async Socket.IO server
sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins="*",
)
socket_app = socketio.ASGIApp(sio, app)


# ==================== Helper Functions ====================

async def _open_session(document_id: str) -> CanvasSession:
    """Get the session for a document, creating and loading it once."""
    session = _sessions.get(document_id)
    if session is None:
        session = CanvasSession(
            persistence,
            document_id,
            event_bus=event_bus,
            autosave_delay=settings.autosave_delay,
        )
        # Registered before loading so concurrent opens share one session
        _sessions[document_id] = session
        _loads[document_id] = asyncio.create_task(session.load())
    try:
        await _loads[document_id]
    except Exception:
        _sessions.pop(document_id, None)
        _loads.pop(document_id, None)
        raise
    return session


async def _current_session(sid) -> Optional[CanvasSession]:
    document_id = _client_documents.get(sid)
    session = _sessions.get(document_id) if document_id else None
    if session is None:
        await sio.emit("error", {"message": "No document loaded"}, room=sid)
    return session


async def _broadcast_state(session: CanvasSession) -> None:
    await sio.emit("canvas_state", session.state(), room=session.document_id)


def _pointer(data: dict) -> PointerEvent:
    return PointerEvent(x=float(data.get("x", 0)), y=float(data.get("y", 0)))


# ==================== Socket.IO Event Handlers ====================

@sio.event
async def connect(sid, environ):
    logger.info(f"Client connected: {sid}")


@sio.event
async def disconnect(sid):
    logger.info(f"Client disconnected: {sid}")
    _client_documents.pop(sid, None)


# ==================== Documents ====================

@sio.event
async def list_documents(sid):
    documents = await persistence.list_documents()
    await sio.emit("document_list", {"documents": documents}, room=sid)


@sio.event
async def load_document(sid, data):
    """Open a document and join its room."""
    document_id = data.get("document_id")
    if not document_id:
        await sio.emit("error", {"message": "document_id is required"}, room=sid)
        return
    previous = _client_documents.get(sid)
    if previous and previous != document_id:
        await sio.leave_room(sid, previous)
    session = await _open_session(document_id)
    _client_documents[sid] = document_id
    await sio.enter_room(sid, document_id)
    await sio.emit("canvas_state", session.state(), room=sid)


# ==================== Nodes ====================

@sio.event
async def drop_node(sid, data):
    """Add a node dropped from the palette."""
    session = await _current_session(sid)
    if session is None:
        return
    node = session.drop_node(data.get("kind"), float(data.get("x", 0)), float(data.get("y", 0)))
    if node is None:
        await sio.emit("error", {"message": f"Unknown node kind: {data.get('kind')}"}, room=sid)
        return
    await _broadcast_state(session)


@sio.event
async def append_node(sid, data):
    """Add the next journey step after the last node."""
    session = await _current_session(sid)
    if session is None:
        return
    kind = NodeKind.parse(data.get("kind"))
    if kind is None:
        await sio.emit("error", {"message": f"Unknown node kind: {data.get('kind')}"}, room=sid)
        return
    session.append_node(kind)
    await _broadcast_state(session)


@sio.event
async def update_node(sid, data):
    """Update label, content, position or size of a node."""
    session = await _current_session(sid)
    if session is None:
        return
    changes = {key: data[key] for key in ("label", "content") if key in data}
    try:
        if "position" in data:
            changes["position"] = Position.model_validate(data["position"])
        if "size" in data:
            changes["size"] = Size.model_validate(data["size"])
        session.update_node(data.get("node_id"), **changes)
    except (CanvasError, ValueError) as e:
        await sio.emit("error", {"message": str(e)}, room=sid)
        return
    await _broadcast_state(session)


@sio.event
async def remove_node(sid, data):
    session = await _current_session(sid)
    if session is None:
        return
    try:
        session.remove_node(data.get("node_id"))
    except CanvasError as e:
        await sio.emit("error", {"message": str(e)}, room=sid)
        return
    await _broadcast_state(session)


# ==================== Edges ====================

@sio.event
async def add_edge(sid, data):
    """Connect a source handle to a target handle."""
    session = await _current_session(sid)
    if session is None:
        return
    edge = session.add_edge(
        HandleRef(data.get("source_node_id"), data.get("source_handle_id")),
        HandleRef(data.get("target_node_id"), data.get("target_handle_id")),
    )
    if edge is None:
        await sio.emit("notification", {"type": "warning", "message": "Invalid connection"}, room=sid)
        return
    await _broadcast_state(session)


@sio.event
async def remove_edge(sid, data):
    session = await _current_session(sid)
    if session is None:
        return
    if session.remove_edge(data.get("edge_id")):
        await _broadcast_state(session)


# ==================== Gestures ====================

@sio.event
async def resize_start(sid, data):
    session = await _current_session(sid)
    if session is None:
        return
    try:
        result = session.begin_resize(data.get("node_id"), _pointer(data))
    except CanvasError as e:
        await sio.emit("error", {"message": str(e)}, room=sid)
        return
    await sio.emit("press_result", {"accepted": result.accepted, "stop_propagation": result.stop_propagation}, room=sid)


@sio.event
async def move_start(sid, data):
    session = await _current_session(sid)
    if session is None:
        return
    try:
        result = session.begin_move(data.get("node_id"), _pointer(data))
    except CanvasError as e:
        await sio.emit("error", {"message": str(e)}, room=sid)
        return
    await sio.emit("press_result", {"accepted": result.accepted, "stop_propagation": result.stop_propagation}, room=sid)


@sio.event
async def pointer_move(sid, data):
    session = await _current_session(sid)
    if session is None:
        return
    if session.pointer_move(data.get("node_id"), _pointer(data)) is not None:
        await _broadcast_state(session)


@sio.event
async def pointer_up(sid, data):
    session = await _current_session(sid)
    if session is None:
        return
    pointer = _pointer(data) if "x" in data and "y" in data else None
    if session.pointer_up(data.get("node_id"), pointer) is not None:
        await _broadcast_state(session)


@sio.event
async def pointer_leave(sid, data):
    session = await _current_session(sid)
    if session is None:
        return
    if session.pointer_leave(data.get("node_id")) is not None:
        await _broadcast_state(session)


# ==================== Editing and Saving ====================

@sio.event
async def start_editing(sid):
    session = await _current_session(sid)
    if session is None:
        return
    session.start_editing()
    await _broadcast_state(session)


@sio.event
async def cancel_editing(sid):
    session = await _current_session(sid)
    if session is None:
        return
    session.cancel_editing()
    await _broadcast_state(session)


@sio.event
async def save_now(sid):
    """Commit the document right away (the save button)."""
    session = await _current_session(sid)
    if session is None:
        return
    await session.save_changes()
    await _broadcast_state(session)


# ==================== Suggestions ====================

@sio.event
async def apply_suggestion(sid, data):
    """Replace the canvas with a generated journey."""
    session = await _current_session(sid)
    if session is None:
        return
    try:
        session.apply_suggestion(data.get("suggestion"))
    except SuggestionMergeRejected as e:
        await sio.emit("notification", {"type": "error", "message": f"Suggestion rejected: {e}"}, room=sid)
        return
    await _broadcast_state(session)
    await sio.emit("notification", {"type": "success", "message": "Suggestion applied"}, room=sid)


@sio.event
async def apply_field_suggestion(sid, data):
    """Merge suggested use-case fields into the record the client sent."""
    try:
        result = merge_field_suggestion(data.get("fields") or {}, data.get("suggestion"))
    except SuggestionMergeRejected as e:
        await sio.emit("notification", {"type": "error", "message": f"Suggestion rejected: {e}"}, room=sid)
        return
    await sio.emit("field_suggestion", {"fields": result.fields, "changed": result.changed}, room=sid)


# ==================== Main ====================

if __name__ == "__main__":
    import uvicorn

    print("=" * 50)
    print("Journey Canvas Server")
    print("=" * 50)
    print(f"Data directory: {settings.data_dir}")
    print("=" * 50)

    uvicorn.run(socket_app, host="0.0.0.0", port=5000)
