"""Event stream implementations."""

import json
import logging
import re
from collections import Counter
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta
from pathlib import Path

from agentdocs.domain.exceptions import InvalidAgentName
from agentdocs.domain.interfaces import EventStreamInterface
from agentdocs.domain.stream_event import (
    StreamEvent,
    StreamEventType,
    StreamStats,
    event_from_dict,
    event_to_dict,
)

logger = logging.getLogger(__name__)

GENERAL_PREFIX = "events"
DASHBOARD_PREFIX = "dashboard"

_PREFIX_PATTERN = re.compile(r"[a-z0-9_]+")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _check_prefix(prefix: str) -> str:
    """Segment prefixes must be agent ids (lower-case letters, digits and '_')."""
    if not _PREFIX_PATTERN.fullmatch(prefix):
        raise InvalidAgentName(prefix)
    return prefix


def _matches(
    event: StreamEvent,
    event_type: StreamEventType | None,
    from_agent: str | None,
    to_agent: str | None,
) -> bool:
    return (
        (event_type is None or event.event == event_type)
        and (from_agent is None or event.from_agent == from_agent)
        and (to_agent is None or event.to_agent == to_agent)
    )


def _stats(events: Iterable[StreamEvent], total_files: int) -> StreamStats:
    events = list(events)
    return StreamStats(
        total_files=total_files,
        total_events=len(events),
        by_type=dict(Counter(e.event.value for e in events)),
        by_agent=dict(Counter(e.from_agent for e in events)),
        latest_activity=max((e.timestamp for e in events), default=None),
    )


class InMemoryEventStream(EventStreamInterface):
    """In-memory implementation for testing."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._events: list[StreamEvent] = []
        self._clock = clock

    def publish(self, event: StreamEvent) -> str:
        if event.to_agent:
            _check_prefix(event.to_agent)
        self._events.append(event)
        return event.event_id

    def events(
        self,
        event_type: StreamEventType | None = None,
        from_agent: str | None = None,
        to_agent: str | None = None,
    ) -> list[StreamEvent]:
        return sorted(
            [e for e in self._events if _matches(e, event_type, from_agent, to_agent)],
            key=lambda e: e.timestamp,
        )

    def stats(self) -> StreamStats:
        return _stats(self._events, total_files=0)

    def cleanup(self, days_to_keep: int = 30) -> list[str]:
        cutoff = self._clock() - timedelta(days=days_to_keep)
        expired = [
            e for e in self._events if datetime.fromisoformat(e.timestamp) < cutoff
        ]
        self._events = [e for e in self._events if e not in expired]
        return [e.event_id for e in expired]


class FilesystemEventStream(EventStreamInterface):
    """
    Filesystem implementation storing events as JSON Lines.

    Segments roll over every minute and are named
    ``<prefix>-YYYY-MM-DDTHH-MM.jsonl``. Every event goes to the general
    ``events`` segment and the dashboard segment; addressed events are also
    copied to the recipient's own segment.
    """

    def __init__(
        self, base_path: Path | str, clock: Callable[[], datetime] = _utcnow
    ) -> None:
        self.base_path = Path(base_path)
        self.streams_dir = self.base_path / "streams"
        self.dashboard_dir = self.base_path / "orchestration" / "streams"
        self._clock = clock

    def _segment(self, directory: Path, prefix: str, stamp: str) -> Path:
        return directory / f"{prefix}-{stamp}.jsonl"

    def _append(self, path: Path, record: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record) + "\n")

    def publish(self, event: StreamEvent) -> str:
        """
        Append an event to the general, dashboard and recipient segments.

        Raises:
            InvalidAgentName: If the recipient is not a valid agent id
        """
        if event.to_agent:
            _check_prefix(event.to_agent)
        record = event_to_dict(event)
        # Every copy of one event shares a segment stamp
        stamp = self._clock().strftime("%Y-%m-%dT%H-%M")
        self._append(self._segment(self.streams_dir, GENERAL_PREFIX, stamp), record)
        self._append(self._segment(self.dashboard_dir, DASHBOARD_PREFIX, stamp), record)
        if event.to_agent:
            self._append(self._segment(self.streams_dir, event.to_agent, stamp), record)
        logger.debug(
            "Published %s from %s to %s",
            event.event.value,
            event.from_agent,
            event.to_agent or "(broadcast)",
        )
        return event.event_id

    def segments(self, prefix: str = GENERAL_PREFIX) -> list[Path]:
        """
        Segment files for ``prefix``, oldest first.

        Raises:
            InvalidAgentName: If ``prefix`` is not a valid agent id
        """
        _check_prefix(prefix)
        directory = self.dashboard_dir if prefix == DASHBOARD_PREFIX else self.streams_dir
        if not directory.is_dir():
            return []
        return sorted(directory.glob(f"{prefix}-????-??-??T??-??.jsonl"))

    def _read_segment(self, path: Path) -> list[StreamEvent]:
        events: list[StreamEvent] = []
        with open(path, encoding="utf-8") as f:
            for number, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    events.append(event_from_dict(json.loads(line)))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning("Skipping malformed event %s:%d (%s)", path.name, number, e)
        return events

    def read_latest(
        self, prefix: str = GENERAL_PREFIX, max_events: int = 100
    ) -> list[StreamEvent]:
        """The most recent ``max_events`` events across a prefix's segments."""
        if max_events <= 0:
            return []
        events: list[StreamEvent] = []
        for path in reversed(self.segments(prefix)):
            events = self._read_segment(path) + events
            if len(events) >= max_events:
                break
        return events[-max_events:]

    def events(
        self,
        event_type: StreamEventType | None = None,
        from_agent: str | None = None,
        to_agent: str | None = None,
    ) -> list[StreamEvent]:
        events = [
            event
            for path in self.segments(GENERAL_PREFIX)
            for event in self._read_segment(path)
            if _matches(event, event_type, from_agent, to_agent)
        ]
        return sorted(events, key=lambda e: e.timestamp)

    def _all_files(self) -> list[Path]:
        return [
            path
            for directory in (self.streams_dir, self.dashboard_dir)
            if directory.is_dir()
            for path in directory.glob("*.jsonl")
        ]

    def stats(self) -> StreamStats:
        # Dashboard and per-agent segments duplicate the general segments
        return _stats(self.events(), total_files=len(self._all_files()))

    def cleanup(self, days_to_keep: int = 30) -> list[str]:
        cutoff = (self._clock() - timedelta(days=days_to_keep)).timestamp()
        removed: list[str] = []
        for path in self._all_files():
            if path.stat().st_mtime < cutoff:
                path.unlink()
                removed.append(path.name)
                logger.info("Removed old stream file %s", path.name)
        return sorted(removed)
