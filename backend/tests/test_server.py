"""
Tests for the socket.io handlers in server.py.
"""

import asyncio

import pytest

import server
from journey_canvas.canvas import NodeKind, Position
from journey_canvas.events import EventBus
from journey_canvas.persistence import MemoryPersistenceService


class FailingLoadPersistence(MemoryPersistenceService):
    """Memory persistence whose reads blow up."""

    async def load(self, document_id):
        raise RuntimeError("storage offline")


@pytest.fixture
async def emitted(monkeypatch):
    """Wire the server globals to in-memory services and record every emit."""
    persistence = MemoryPersistenceService()
    await persistence.initialize()
    monkeypatch.setattr(server, "persistence", persistence)
    monkeypatch.setattr(server, "event_bus", EventBus())

    calls = []

    async def fake_emit(event, data=None, room=None, **kwargs):
        calls.append((event, data, room))

    monkeypatch.setattr(server.sio, "emit", fake_emit)
    yield calls

    for session in list(server._sessions.values()):
        await session.close()
    server._sessions.clear()
    server._loads.clear()
    server._client_documents.clear()
    await persistence.close()


def _events(calls, name):
    return [data for event, data, _ in calls if event == name]


class TestOpenSession:
    """Tests for per-document session creation."""

    @pytest.mark.asyncio
    async def test_concurrent_opens_share_one_session(self, emitted):
        first, second = await asyncio.gather(
            server._open_session("shared"),
            server._open_session("shared"),
        )
        assert first is second
        assert server._sessions["shared"] is first
        assert first.document.nodes == []

    @pytest.mark.asyncio
    async def test_failed_load_is_not_cached(self, emitted, monkeypatch):
        monkeypatch.setattr(server, "persistence", FailingLoadPersistence())
        with pytest.raises(RuntimeError):
            await server._open_session("broken")
        assert "broken" not in server._sessions
        assert "broken" not in server._loads


class TestUpdateNode:
    """Tests for the update_node handler."""

    @pytest.mark.asyncio
    async def test_malformed_position_reports_error(self, emitted):
        session = await server._open_session("doc")
        node = session.add_node(NodeKind.AGENT, Position(x=10, y=10))
        server._client_documents["sid-1"] = "doc"

        await server.update_node("sid-1", {"node_id": node.id, "position": {"x": "abc"}})

        errors = _events(emitted, "error")
        assert len(errors) == 1
        assert node.position == Position(x=10, y=10)
        assert _events(emitted, "canvas_state") == []

    @pytest.mark.asyncio
    async def test_size_update_is_clamped(self, emitted):
        session = await server._open_session("doc")
        node = session.add_node(NodeKind.AGENT)
        server._client_documents["sid-1"] = "doc"

        await server.update_node("sid-1", {"node_id": node.id, "size": {"width": 9000, "height": 300}})

        assert (node.size.width, node.size.height) == (800, 300)
        assert node.manually_resized
        assert len(_events(emitted, "canvas_state")) == 1

    @pytest.mark.asyncio
    async def test_without_loaded_document(self, emitted):
        await server.update_node("nobody", {"node_id": "x", "label": "y"})
        assert _events(emitted, "error") == [{"message": "No document loaded"}]


class TestFieldSuggestions:
    """Tests for merging use-case field suggestions."""

    @pytest.mark.asyncio
    async def test_merges_suggested_fields(self, emitted):
        await server.apply_field_suggestion("sid-1", {
            "fields": {"scope": "Billing", "title": "Refunds"},
            "suggestion": {"scope": "Billing and refunds", "potentialRisks": ["Fraud", "Chargebacks"]},
        })

        [reply] = _events(emitted, "field_suggestion")
        assert reply["fields"]["title"] == "Refunds"
        assert reply["fields"]["scope"] == "Billing and refunds"
        assert reply["fields"]["potentialRisks"] == "Fraud\nChargebacks"
        assert reply["changed"] == ["scope", "potentialRisks"]

    @pytest.mark.asyncio
    async def test_unusable_suggestion_notifies(self, emitted):
        await server.apply_field_suggestion("sid-1", {"fields": {}, "suggestion": "not json"})

        assert _events(emitted, "field_suggestion") == []
        [notice] = _events(emitted, "notification")
        assert notice["type"] == "error"
