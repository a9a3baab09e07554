"""Agent stream event emission service."""

import uuid
from datetime import UTC, datetime
from typing import Any

from agentdocs.domain.interfaces import EventStreamInterface
from agentdocs.domain.stream_event import (
    CoordinationType,
    StreamEvent,
    StreamEventType,
)

PROJECT_MANAGER = "project_manager_agent"
TESTING_AGENT = "testing_agent"
OPTIMIZATION_AGENT = "optimization_agent"
DOCUMENT_MANAGER = "document_manager_agent"


class StreamEmitter:
    """Emits stream events on behalf of one agent.

    Provides convenience methods for every event type agents exchange,
    handling IDs, timestamps and default recipients.
    """

    def __init__(self, stream: EventStreamInterface, agent_name: str) -> None:
        self._stream = stream
        self.agent_name = agent_name

    def _now(self) -> str:
        return datetime.now(UTC).isoformat()

    def emit(
        self,
        event: StreamEventType,
        data: dict[str, Any],
        to_agent: str | None = None,
        qualifier: str | None = None,
    ) -> StreamEvent:
        """Publish an event of any type from this agent."""
        stream_event = StreamEvent(
            event_id=str(uuid.uuid4()),
            event=event,
            from_agent=self.agent_name,
            to_agent=to_agent,
            data=data,
            qualifier=qualifier,
            timestamp=self._now(),
        )
        self._stream.publish(stream_event)
        return stream_event

    def progress_update(
        self,
        task_id: str,
        progress: float,
        status: str,
        to_agent: str = PROJECT_MANAGER,
        **details: Any,
    ) -> StreamEvent:
        """Report task progress (0-100) to the coordinating agent."""
        return self.emit(
            StreamEventType.PROGRESS_UPDATE,
            {"task_id": task_id, "progress": progress, "status": status, **details},
            to_agent=to_agent,
        )

    def dashboard_update(self, update_type: str, data: dict[str, Any]) -> StreamEvent:
        return self.emit(StreamEventType.DASHBOARD_UPDATE, data, qualifier=update_type)

    def incremental_test_request(
        self,
        feature: str,
        test_scope: list[str],
        to_agent: str = TESTING_AGENT,
        priority: str = "normal",
    ) -> StreamEvent:
        return self.emit(
            StreamEventType.INCREMENTAL_TEST_REQUEST,
            {"feature": feature, "test_scope": test_scope, "priority": priority},
            to_agent=to_agent,
        )

    def coordination(
        self,
        to_agent: str,
        coordination_type: CoordinationType | str,
        data: dict[str, Any],
    ) -> StreamEvent:
        """Hand off, request, notify or ask another agent for approval."""
        kind = CoordinationType(coordination_type)
        return self.emit(
            StreamEventType.AGENT_COORDINATION, data, to_agent=to_agent, qualifier=kind.value
        )

    def handoff(self, to_agent: str, data: dict[str, Any]) -> StreamEvent:
        return self.coordination(to_agent, CoordinationType.HANDOFF, data)

    def alert(
        self,
        alert_type: str,
        message: str,
        severity: str = "medium",
        to_agent: str = PROJECT_MANAGER,
    ) -> StreamEvent:
        return self.emit(
            StreamEventType.ALERT,
            {"message": message, "severity": severity},
            to_agent=to_agent,
            qualifier=alert_type,
        )

    def performance_metric(
        self,
        metric_type: str,
        value: float,
        unit: str = "",
        to_agent: str = OPTIMIZATION_AGENT,
    ) -> StreamEvent:
        return self.emit(
            StreamEventType.PERFORMANCE_METRIC,
            {"value": value, "unit": unit},
            to_agent=to_agent,
            qualifier=metric_type,
        )

    def stakeholder_decision(
        self,
        decision_type: str,
        question: str,
        options: list[str],
        deadline: str | None = None,
        to_agent: str = PROJECT_MANAGER,
    ) -> StreamEvent:
        data: dict[str, Any] = {"question": question, "options": options}
        if deadline:
            data["deadline"] = deadline
        return self.emit(
            StreamEventType.STAKEHOLDER_DECISION_REQUIRED,
            data,
            to_agent=to_agent,
            qualifier=decision_type,
        )

    def context_optimization(
        self, data: dict[str, Any], to_agent: str = DOCUMENT_MANAGER
    ) -> StreamEvent:
        return self.emit(StreamEventType.CONTEXT_OPTIMIZATION, data, to_agent=to_agent)

    def document_synced(self, result: dict[str, Any]) -> StreamEvent:
        return self.emit(StreamEventType.DOCUMENT_SYNC, result)
