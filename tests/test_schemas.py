"""Tests for the bundled JSON schemas."""

import jsonschema
import pytest

from agentdocs.domain.stream_event import StreamEvent, StreamEventType, event_to_dict
from agentdocs.schemas import (
    SCHEMA_FILES,
    get_schema,
    iter_errors,
    validate,
    validate_agent,
    validate_document,
    validate_handoff,
    validate_stream_event,
)


class TestSchemaLoading:
    @pytest.mark.parametrize("kind", list(SCHEMA_FILES))
    def test_schemas_are_valid_draft_2020_12(self, kind: str) -> None:
        schema = get_schema(kind)

        jsonschema.Draft202012Validator.check_schema(schema)
        assert schema["$id"].endswith(SCHEMA_FILES[kind])

    def test_unknown_kind(self) -> None:
        with pytest.raises(KeyError, match="Unknown schema 'nope'"):
            get_schema("nope")


class TestGeneratedSummaries:
    """Summaries produced by conversion satisfy their schemas."""

    def test_agent_summary(self, converted_store) -> None:
        data = converted_store.read_json("machine-data/ai-agents-json/research_agent.json")

        validate_agent(data)

    def test_document_summary(self, converted_store) -> None:
        data = converted_store.read_json("machine-data/project-documents-json/planning/prd.json")

        validate_document(data)

    def test_agent_summary_is_not_a_document(self, converted_store) -> None:
        data = converted_store.read_json("machine-data/ai-agents-json/research_agent.json")

        with pytest.raises(jsonschema.ValidationError):
            validate_document(data)


class TestStreamEventSchema:
    def test_serialized_event(self) -> None:
        event = StreamEvent(
            event_id="e1",
            event=StreamEventType.AGENT_COORDINATION,
            from_agent="research_agent",
            to_agent="project_manager_agent",
            data={"report": "done"},
            qualifier="handoff",
            timestamp="2025-01-15T10:30:00+00:00",
        )

        validate_stream_event(event_to_dict(event))

    def test_bad_coordination_type(self) -> None:
        record = {
            "event_id": "e1",
            "event": "agent_coordination",
            "from": "research_agent",
            "data": {},
            "timestamp": "2025-01-15T10:30:00+00:00",
            "stream_type": "coordination",
            "coordination_type": "gossip",
        }

        with pytest.raises(jsonschema.ValidationError):
            validate("stream_event", record)


class TestHandoffSchema:
    def test_valid_handoff(self) -> None:
        validate_handoff(
            {
                "meta": {"agent": "research_agent"},
                "summary": "Market is growing",
                "next_agent_needs": {"project_manager_agent": ["market sizing"]},
            }
        )

    def test_iter_errors_lists_every_problem(self) -> None:
        errors = iter_errors("handoff", {"meta": {}, "next_agent_needs": {"pm": "x"}})

        assert errors == [
            "(root): 'summary' is a required property",
            "meta: 'agent' is a required property",
            "next_agent_needs/pm: 'x' is not of type 'array'",
        ]

    def test_iter_errors_empty_when_valid(self) -> None:
        assert iter_errors("handoff", {"meta": {"agent": "a"}, "summary": "s"}) == []
