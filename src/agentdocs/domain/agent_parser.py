"""
Agent profile extraction.

Turns an agent persona document into the agent summary used for progressive
context loading. The markdown conventions recognised here are the ones the
agent documents share: ``## Overview``, ``## Core Responsibilities`` with H3
responsibilities, ``## Workflows`` with H3 workflows, ``## Agent Coordination``
with ``### Inputs From`` / ``### Outputs To`` bullets, and
``## Context Optimization Priorities`` with ``#### From <Agent>`` blocks.
"""

import json
import re
from collections.abc import Mapping
from typing import Any

from agentdocs.domain.layout import normalize_agent_id
from agentdocs.domain.markdown import (
    Heading,
    bold_bullets,
    child_sections,
    estimate_tokens,
    first_heading,
    parse_headings,
    section_body,
)

AGENT_SCHEMA_VERSION = "2.0.0"
MAX_SUMMARY_LENGTH = 500
MAX_CAPABILITIES = 5
DEFAULT_SUMMARY = "AI agent specialist"

_TITLE_RE = re.compile(r"^(.+?)(?:\s+-\s+(.+))?$")
_AGENT_BULLET_RE = re.compile(r"^\s*[-*]\s*\*\*(.+?)\*\*:\s*(.+)$")
_REFERENCE_RE = re.compile(r"^\s*[-*]\s*\*\*(.+?)\*\*:\s*`(.+?)`")
_BACKTICK_BULLET_RE = re.compile(r"^\s*[-*]\s*`([^`]+)`")

RECOMMENDATION_DESCRIPTIONS = {
    "minimal": "Identity and responsibilities only",
    "standard": "Adds workflows and coordination for planning hand-offs",
    "detailed": "Everything, following md references as needed",
}


def snake_case(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def mirror_reference(path: str, mirrors: Mapping[str, str]) -> str:
    """Rewrite a markdown path under a source dir to its JSON mirror."""
    for source, output in mirrors.items():
        marker = source.rstrip("/") + "/"
        index = path.find(marker)
        while index > 0 and path[index - 1] != "/":
            index = path.find(marker, index + 1)
        if index < 0:
            continue
        mirrored = path[:index] + output.rstrip("/") + "/" + path[index + len(marker) :]
        return mirrored[:-3] + ".json" if mirrored.endswith(".md") else mirrored
    return path


def _h2_index(text: str) -> dict[str, Heading]:
    index: dict[str, Heading] = {}
    for heading in parse_headings(text):
        if heading.level == 2:
            index.setdefault(heading.title, heading)
    return index


def _first_paragraph(body: str) -> str:
    paragraph = re.split(r"\n\s*\n", body.strip(), maxsplit=1)[0]
    return " ".join(paragraph.replace("*", "").split())


def _agent_bullets(body: str) -> dict[str, list[str]]:
    agents: dict[str, list[str]] = {}
    for line in body.splitlines():
        match = _AGENT_BULLET_RE.match(line)
        if match:
            agents.setdefault(normalize_agent_id(match.group(1)), []).append(
                match.group(2).strip()
            )
    return agents


def _coordination(text: str) -> tuple[dict[str, list[str]], dict[str, list[str]]]:
    inputs: dict[str, list[str]] = {}
    outputs: dict[str, list[str]] = {}
    for heading, body in child_sections(text, "Agent Coordination"):
        title = heading.title.lower()
        if title.startswith("inputs from"):
            inputs.update(_agent_bullets(body))
        elif title.startswith("outputs to"):
            outputs.update(_agent_bullets(body))
    return inputs, outputs


def _context_priorities(text: str) -> dict[str, dict[str, list[str]]]:
    blocks = child_sections(text, "Context Optimization Priorities", level=3)
    blocks += child_sections(text, "Context Optimization Priorities", level=4)
    priorities: dict[str, dict[str, list[str]]] = {}
    for heading, body in blocks:
        if not heading.title.lower().startswith("from "):
            continue
        source = normalize_agent_id(heading.title[5:])
        fields: dict[str, list[str]] = {"critical": [], "optional": []}
        mode: str | None = None
        for line in body.splitlines():
            lowered = line.lower()
            if "**critical data**" in lowered:
                mode = "critical"
            elif "**optional data**" in lowered:
                mode = "optional"
            elif mode is not None:
                match = _BACKTICK_BULLET_RE.match(line)
                if match:
                    fields[mode].append(match.group(1))
        if fields["critical"] or fields["optional"]:
            priorities[source] = fields
    return priorities


def _streaming_events(text: str) -> list[str]:
    events: list[str] = []
    for line in section_body(text, "Streaming Events").splitlines():
        match = _BACKTICK_BULLET_RE.match(line)
        if match and match.group(1) not in events:
            events.append(match.group(1))
    return events


def build_agent_json(
    text: str,
    *,
    agent_id: str,
    source_file: str,
    file_hash: str,
    today: str,
    mirrors: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    Build the agent summary for an agent persona document.

    Args:
        text: Markdown source
        agent_id: Agent identifier (file stem, e.g. ``research_agent``)
        source_file: Root-relative path used in ``md_reference`` values
        file_hash: md5 of ``text``
        today: ISO date recorded as ``meta.last_updated``
        mirrors: ``{source_dir: output_dir}`` used to rewrite reference paths

    Returns:
        Agent summary dict (see ``agent.schema.json``)
    """
    h2 = _h2_index(text)

    def reference(title: str, fallback: str) -> str:
        heading = h2.get(title)
        return f"{source_file}#{heading.anchor if heading else fallback}"

    def tokens(title: str) -> int:
        return estimate_tokens(section_body(text, title))

    heading = first_heading(text)
    title_match = _TITLE_RE.match(heading.title) if heading else None
    title = title_match.group(1) if title_match else agent_id
    subtitle = (title_match.group(2) or "") if title_match else ""

    summary = _first_paragraph(section_body(text, "Overview"))[:MAX_SUMMARY_LENGTH]
    summary = summary or DEFAULT_SUMMARY

    responsibilities = [h.title for h, _ in child_sections(text, "Core Responsibilities")]
    capabilities = [snake_case(r) for r in responsibilities] or [
        snake_case(name) for name in bold_bullets(section_body(text, "Core Responsibilities"))
    ]

    workflows = [
        {
            "name": h.title,
            "tokens": estimate_tokens(body),
            "md_reference": f"{source_file}#{h.anchor}",
        }
        for h, body in child_sections(text, "Workflows")
    ]

    reference_docs: dict[str, dict[str, str]] = {}
    for line in section_body(text, "Reference Documentation").splitlines():
        match = _REFERENCE_RE.match(line)
        if match:
            md_path = match.group(2)
            reference_docs[snake_case(match.group(1))] = {
                "path": mirror_reference(md_path, mirrors or {}),
                "md_path": md_path,
            }

    inputs, outputs = _coordination(text)
    priorities = _context_priorities(text)
    full_md_tokens = estimate_tokens(text)

    agent: dict[str, Any] = {
        "meta": {
            "agent": agent_id,
            "title": title,
            "subtitle": subtitle,
            "version": AGENT_SCHEMA_VERSION,
            "last_updated": today,
            "estimated_tokens": estimate_tokens(
                json.dumps(
                    {
                        "summary": summary,
                        "core_responsibilities": {"summary": responsibilities},
                        "workflows": {"available": [w["name"] for w in workflows]},
                        "coordination": {"inputs": inputs, "outputs": outputs},
                    }
                )
            ),
            "full_md_tokens": full_md_tokens,
            "md_file": source_file,
            "file_hash": file_hash,
        },
        "summary": summary,
        "core_responsibilities": {
            "summary": responsibilities,
            "details_tokens": tokens("Core Responsibilities"),
            "md_reference": reference("Core Responsibilities", "core-responsibilities"),
        },
        "capabilities": capabilities[:MAX_CAPABILITIES],
        "workflows": {
            "available": workflows,
            "total_tokens": sum(w["tokens"] for w in workflows),
            "md_reference": reference("Workflows", "workflows"),
        },
        "reference_documentation": reference_docs,
        "coordination": {
            "inputs": inputs,
            "outputs": outputs,
            "md_reference": reference("Agent Coordination", "agent-coordination"),
        },
        "dependencies": {
            "required_before": list(inputs),
            "provides_to": list(outputs),
        },
        "context_priorities": priorities,
        "streaming_events": _streaming_events(text),
    }

    for section, key in (("Success Metrics", "success_metrics"), ("Clear Boundaries", "boundaries")):
        if section in h2:
            agent[key] = {
                "tokens": tokens(section),
                "md_reference": reference(section, snake_case(section)),
            }

    minimal_tokens = estimate_tokens(
        json.dumps([agent["meta"], summary, responsibilities])
    )
    standard_tokens = minimal_tokens + estimate_tokens(
        json.dumps([workflows, agent["coordination"], priorities])
    )
    agent["context_recommendations"] = {
        "minimal": {
            "sections": ["meta", "summary", "core_responsibilities.summary"],
            "tokens": minimal_tokens,
            "description": RECOMMENDATION_DESCRIPTIONS["minimal"],
        },
        "standard": {
            "sections": ["minimal", "workflows.available", "coordination", "context_priorities"],
            "tokens": standard_tokens,
            "description": RECOMMENDATION_DESCRIPTIONS["standard"],
        },
        "detailed": {
            "sections": [
                "standard",
                "reference_documentation",
                "success_metrics",
                "boundaries",
                "all_md_references_as_needed",
            ],
            "tokens": full_md_tokens,
            "description": RECOMMENDATION_DESCRIPTIONS["detailed"],
        },
    }
    return agent
