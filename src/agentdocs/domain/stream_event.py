"""Agent event stream models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class StreamEventType(str, Enum):
    """Types of events agents publish to the stream."""

    PROGRESS_UPDATE = "progress_update"
    DASHBOARD_UPDATE = "dashboard_update"
    INCREMENTAL_TEST_REQUEST = "incremental_test_request"
    AGENT_COORDINATION = "agent_coordination"
    ALERT = "alert"
    PERFORMANCE_METRIC = "performance_metric"
    STAKEHOLDER_DECISION_REQUIRED = "stakeholder_decision_required"
    CONTEXT_OPTIMIZATION = "context_optimization"
    DOCUMENT_SYNC = "document_sync"


class CoordinationType(str, Enum):
    HANDOFF = "handoff"
    REQUEST = "request"
    NOTIFICATION = "notification"
    APPROVAL = "approval"


# Top-level key under which each event type serialises its qualifier
QUALIFIER_KEYS: dict[StreamEventType, str] = {
    StreamEventType.AGENT_COORDINATION: "coordination_type",
    StreamEventType.ALERT: "alert_type",
    StreamEventType.PERFORMANCE_METRIC: "metric_type",
    StreamEventType.DASHBOARD_UPDATE: "update_type",
    StreamEventType.STAKEHOLDER_DECISION_REQUIRED: "decision_type",
}

STREAM_TYPES: dict[StreamEventType, str] = {
    StreamEventType.PROGRESS_UPDATE: "progress",
    StreamEventType.DASHBOARD_UPDATE: "dashboard",
    StreamEventType.INCREMENTAL_TEST_REQUEST: "testing",
    StreamEventType.AGENT_COORDINATION: "coordination",
    StreamEventType.ALERT: "alerts",
    StreamEventType.PERFORMANCE_METRIC: "performance",
    StreamEventType.STAKEHOLDER_DECISION_REQUIRED: "decisions",
    StreamEventType.CONTEXT_OPTIMIZATION: "context",
    StreamEventType.DOCUMENT_SYNC: "documents",
}


@dataclass(frozen=True)
class StreamEvent:
    """Single event published by an agent.

    ``qualifier`` narrows the event type (``handoff`` for coordination,
    ``blocker`` for alerts, ...) and is written under the key given by
    ``QUALIFIER_KEYS``.
    """

    event_id: str
    event: StreamEventType
    from_agent: str
    data: dict[str, Any] = field(default_factory=dict)
    to_agent: str | None = None
    qualifier: str | None = None
    timestamp: str = ""  # ISO 8601

    @property
    def stream_type(self) -> str:
        return STREAM_TYPES[self.event]


@dataclass(frozen=True)
class StreamStats:
    """Counters over the stream directories."""

    total_files: int = 0
    total_events: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    by_agent: dict[str, int] = field(default_factory=dict)
    latest_activity: str | None = None


def event_to_dict(event: StreamEvent) -> dict[str, Any]:
    """Serialize event to the JSON Lines record shape."""
    data: dict[str, Any] = {
        "event_id": event.event_id,
        "event": event.event.value,
        "from": event.from_agent,
        "to": event.to_agent,
        "data": event.data,
        "timestamp": event.timestamp,
        "stream_type": event.stream_type,
    }
    if event.qualifier is not None:
        data[QUALIFIER_KEYS.get(event.event, "qualifier")] = event.qualifier
    return data


def event_from_dict(data: dict[str, Any]) -> StreamEvent:
    """Deserialize a JSON Lines record.

    Raises:
        KeyError: If required keys are missing
        ValueError: If the event type is unknown
    """
    event_type = StreamEventType(data["event"])
    qualifier_key = QUALIFIER_KEYS.get(event_type, "qualifier")
    return StreamEvent(
        event_id=data["event_id"],
        event=event_type,
        from_agent=data["from"],
        to_agent=data.get("to"),
        data=data.get("data") or {},
        qualifier=data.get(qualifier_key),
        timestamp=data.get("timestamp", ""),
    )
