"""Tests for StreamEmitter."""

import pytest

from agentdocs.application.stream_emitter import StreamEmitter
from agentdocs.domain.stream_event import StreamEventType
from agentdocs.infrastructure.persistence.streams import (
    FilesystemEventStream,
    InMemoryEventStream,
)


@pytest.fixture
def stream() -> InMemoryEventStream:
    return InMemoryEventStream()


@pytest.fixture
def emitter(stream) -> StreamEmitter:
    return StreamEmitter(stream, "research_agent")


class TestEmit:
    def test_emit_publishes(self, emitter, stream) -> None:
        event = emitter.emit(StreamEventType.ALERT, {"message": "x"}, to_agent="qa_agent")

        assert stream.events() == [event]
        assert event.from_agent == "research_agent"
        assert event.timestamp.endswith("+00:00")

    def test_event_ids_are_unique(self, emitter) -> None:
        first = emitter.emit(StreamEventType.PROGRESS_UPDATE, {})
        second = emitter.emit(StreamEventType.PROGRESS_UPDATE, {})

        assert first.event_id != second.event_id


class TestConvenienceMethods:
    """Each helper fills in type, default recipient and qualifier."""

    def test_progress_update(self, emitter) -> None:
        event = emitter.progress_update("task-1", 50, "in_progress", eta="1h")

        assert event.event is StreamEventType.PROGRESS_UPDATE
        assert event.to_agent == "project_manager_agent"
        assert event.data == {
            "task_id": "task-1",
            "progress": 50,
            "status": "in_progress",
            "eta": "1h",
        }

    def test_dashboard_update_is_broadcast(self, emitter) -> None:
        event = emitter.dashboard_update("sprint", {"velocity": 12})

        assert event.to_agent is None
        assert event.qualifier == "sprint"

    def test_incremental_test_request(self, emitter) -> None:
        event = emitter.incremental_test_request("login", ["unit"])

        assert event.to_agent == "testing_agent"
        assert event.data["priority"] == "normal"

    def test_handoff(self, emitter) -> None:
        event = emitter.handoff("project_manager_agent", {"report": "done"})

        assert event.event is StreamEventType.AGENT_COORDINATION
        assert event.qualifier == "handoff"

    def test_unknown_coordination_type(self, emitter) -> None:
        with pytest.raises(ValueError):
            emitter.coordination("project_manager_agent", "gossip", {})

    def test_alert(self, emitter) -> None:
        event = emitter.alert("blocker", "API down", severity="high")

        assert event.qualifier == "blocker"
        assert event.data == {"message": "API down", "severity": "high"}

    def test_performance_metric(self, emitter) -> None:
        event = emitter.performance_metric("latency", 120.5, unit="ms")

        assert event.to_agent == "optimization_agent"
        assert event.data == {"value": 120.5, "unit": "ms"}

    def test_stakeholder_decision(self, emitter) -> None:
        without = emitter.stakeholder_decision("scope", "Ship?", ["yes", "no"])
        with_deadline = emitter.stakeholder_decision(
            "scope", "Ship?", ["yes", "no"], deadline="2025-02-01"
        )

        assert "deadline" not in without.data
        assert with_deadline.data["deadline"] == "2025-02-01"

    def test_context_optimization(self, emitter) -> None:
        event = emitter.context_optimization({"method": "json_optimized"})

        assert event.to_agent == "document_manager_agent"

    def test_document_synced(self, emitter) -> None:
        event = emitter.document_synced({"status": "success"})

        assert event.event is StreamEventType.DOCUMENT_SYNC
        assert event.to_agent is None


def test_alert_reaches_recipient_segment(tmp_path, fixed_now) -> None:
    stream = FilesystemEventStream(tmp_path, clock=lambda: fixed_now)
    emitter = StreamEmitter(stream, "research_agent")

    emitter.alert("blocker", "API down")

    assert [e.qualifier for e in stream.read_latest("project_manager_agent")] == ["blocker"]
