"""agentdocs JSON Schema definitions and validation utilities.

Schemas:
    - document.schema.json: Summary generated from a general markdown document
    - agent.schema.json: Summary generated from an agent persona document
    - stream_event.schema.json: One JSON Lines record in an event stream
    - handoff.schema.json: Envelope one agent passes to the next
      (``meta`` / ``summary`` / ``next_agent_needs``)

Usage:
    from agentdocs.schemas import validate_agent

    with open("machine-data/ai-agents-json/research_agent.json") as f:
        data = json.load(f)
    validate_agent(data)  # Raises jsonschema.ValidationError if invalid
"""

from __future__ import annotations

import json
from functools import cache
from importlib.resources import files
from typing import Any

import jsonschema

SCHEMA_FILES = {
    "document": "document.schema.json",
    "agent": "agent.schema.json",
    "stream_event": "stream_event.schema.json",
    "handoff": "handoff.schema.json",
}


@cache
def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from the schemas package.

    Args:
        name: Schema filename (e.g., 'agent.schema.json')

    Returns:
        Parsed JSON schema as a dictionary
    """
    schema_text = files("agentdocs.schemas").joinpath(name).read_text()
    result: dict[str, Any] = json.loads(schema_text)
    return result


def get_schema(kind: str) -> dict[str, Any]:
    """Get a bundled schema by kind.

    Args:
        kind: One of ``SCHEMA_FILES`` keys

    Raises:
        KeyError: If the kind is unknown
    """
    if kind not in SCHEMA_FILES:
        raise KeyError(f"Unknown schema '{kind}'. Available: {', '.join(SCHEMA_FILES)}")
    return _load_schema(SCHEMA_FILES[kind])


def validate(kind: str, data: Any) -> None:
    """Validate ``data`` against the schema for ``kind``.

    Raises:
        jsonschema.ValidationError: If validation fails
    """
    jsonschema.validate(data, get_schema(kind))


def iter_errors(kind: str, data: Any) -> list[str]:
    """All validation problems as ``path: message`` strings (empty when valid)."""
    schema = get_schema(kind)
    validator = jsonschema.validators.validator_for(schema)(schema)
    return [
        f"{'/'.join(str(p) for p in error.absolute_path) or '(root)'}: {error.message}"
        for error in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    ]


def validate_document(data: dict[str, Any]) -> None:
    """Validate a document summary against the schema."""
    validate("document", data)


def validate_agent(data: dict[str, Any]) -> None:
    """Validate an agent summary against the schema."""
    validate("agent", data)


def validate_stream_event(data: dict[str, Any]) -> None:
    validate("stream_event", data)


def validate_handoff(data: dict[str, Any]) -> None:
    validate("handoff", data)


__all__ = [
    "SCHEMA_FILES",
    "get_schema",
    "iter_errors",
    "validate",
    "validate_agent",
    "validate_document",
    "validate_handoff",
    "validate_stream_event",
]
