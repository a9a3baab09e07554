"""
Markdown analysis primitives.

Pure functions over markdown text: heading parsing with GitHub-compatible
anchors, token estimation, section extraction and the heuristics used to
classify documents. Nothing here touches the filesystem.
"""

import math
import re
from dataclasses import dataclass

from agentdocs.domain.exceptions import SectionNotFound

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_BULLET_RE = re.compile(r"^\s*[-*]\s+(.+)$")
_BOLD_BULLET_RE = re.compile(r"^\s*[-*]\s+\*\*(.+?)\*\*")
_MARKUP_RE = re.compile(r"[#*`\[\]()]")

PREVIEW_LENGTH = 150
KEY_POINT_SECTIONS = frozenset(
    {"key features", "key concepts", "core concepts", "key benefits", "key points"}
)
MAX_KEY_POINTS = 10
NO_SUMMARY = "Document summary not available"


# =============================================================================
# ANCHORS AND TOKENS
# =============================================================================


def generate_anchor(heading: str) -> str:
    """GitHub-style anchor for a heading title."""
    anchor = heading.lower()
    anchor = re.sub(r"[^\w\s-]", "", anchor)
    anchor = re.sub(r"\s+", "-", anchor)
    anchor = re.sub(r"-+", "-", anchor)
    return anchor.strip("-")


class AnchorRegistry:
    """Hands out unique anchors within one document (``x``, ``x-1``, ``x-2``)."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}

    def anchor_for(self, heading: str) -> str:
        base = generate_anchor(heading)
        count = self._counts.get(base, 0)
        self._counts[base] = count + 1
        return base if count == 0 else f"{base}-{count}"


def estimate_tokens(text: str) -> int:
    """Rough token count: a quarter of the characters left after markup removal."""
    if not text:
        return 0
    return math.ceil(len(_MARKUP_RE.sub("", text)) / 4)


def preview(text: str, limit: int = PREVIEW_LENGTH) -> str:
    text = text.strip()
    return text if len(text) <= limit else text[:limit] + "..."


# =============================================================================
# HEADINGS AND SECTIONS
# =============================================================================


@dataclass(frozen=True)
class Heading:
    """An ATX heading with its unique anchor."""

    level: int
    title: str
    line: int  # 0-based index into text.splitlines()
    anchor: str


def parse_headings(text: str) -> list[Heading]:
    """All ATX headings outside fenced code blocks, in document order."""
    registry = AnchorRegistry()
    headings: list[Heading] = []
    fence: str | None = None
    for index, line in enumerate(text.splitlines()):
        fence_match = _FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
            elif marker == fence:
                fence = None
            continue
        if fence is not None:
            continue
        match = _HEADING_RE.match(line)
        if match:
            title = match.group(2).strip()
            headings.append(
                Heading(
                    level=len(match.group(1)),
                    title=title,
                    line=index,
                    anchor=registry.anchor_for(title),
                )
            )
    return headings


def _span(
    lines: list[str], headings: list[Heading], index: int, stop_level: int
) -> str:
    """Text after ``headings[index]`` up to the next heading at or above ``stop_level``."""
    start = headings[index].line + 1
    end = next(
        (h.line for h in headings[index + 1 :] if h.level <= stop_level), len(lines)
    )
    return "\n".join(lines[start:end]).strip()


def _unique_key(mapping: dict, title: str) -> str:
    if title not in mapping:
        return title
    n = 2
    while f"{title} ({n})" in mapping:
        n += 1
    return f"{title} ({n})"


def extract_sections(
    text: str, reference_path: str
) -> tuple[list[dict], dict[str, dict]]:
    """
    Summarise the H2/H3 structure of a document.

    Args:
        text: Markdown source
        reference_path: Path used in generated ``md_reference`` values

    Returns:
        Tuple of (H2 section list, detail map keyed by H2 title with
        H3 ``subsections``)
    """
    lines = text.splitlines()
    headings = parse_headings(text)
    sections: list[dict] = []
    details: dict[str, dict] = {}
    current: dict | None = None

    for index, heading in enumerate(headings):
        if heading.level == 1:
            current = None
            continue
        if heading.level == 2:
            # H4+ directly beneath an H2 fold into it, H3 opens a subsection
            body = _span(lines, headings, index, stop_level=3)
            reference = f"{reference_path}#{heading.anchor}"
            tokens = estimate_tokens(body)
            sections.append(
                {
                    "title": heading.title,
                    "level": 2,
                    "md_reference": reference,
                    "content_preview": preview(body),
                    "tokens": tokens,
                }
            )
            current = {
                "md_reference": reference,
                "tokens": tokens,
                "content_preview": preview(body),
                "subsections": {},
            }
            details[_unique_key(details, heading.title)] = current
        elif heading.level == 3 and current is not None:
            body = _span(lines, headings, index, stop_level=3)
            subsections = current["subsections"]
            subsections[_unique_key(subsections, heading.title)] = {
                "md_reference": f"{reference_path}#{heading.anchor}",
                "tokens": estimate_tokens(body),
                "content_preview": preview(body),
            }

    return sections, details


def find_section(text: str, anchor: str) -> tuple[Heading, str]:
    """
    Locate the section whose heading produces ``anchor``.

    The returned content starts with the heading line and runs until the
    next heading of the same or a higher level.

    Raises:
        SectionNotFound: If no heading matches
    """
    anchor = anchor.lstrip("#")
    lines = text.splitlines()
    headings = parse_headings(text)
    for index, heading in enumerate(headings):
        if heading.anchor == anchor:
            end = next(
                (h.line for h in headings[index + 1 :] if h.level <= heading.level),
                len(lines),
            )
            return heading, "\n".join(lines[heading.line : end]).strip()
    raise SectionNotFound(anchor)


def section_body(text: str, title: str, level: int = 2) -> str:
    """Body of the first heading titled ``title`` (case-insensitive), or ``""``."""
    lines = text.splitlines()
    headings = parse_headings(text)
    wanted = title.strip().lower()
    for index, heading in enumerate(headings):
        if heading.level == level and heading.title.lower() == wanted:
            return _span(lines, headings, index, stop_level=level)
    return ""


def child_sections(
    text: str, parent_title: str, level: int = 3
) -> list[tuple[Heading, str]]:
    """Headings of ``level`` nested under the H2 ``parent_title`` with their bodies."""
    lines = text.splitlines()
    headings = parse_headings(text)
    wanted = parent_title.strip().lower()
    children: list[tuple[Heading, str]] = []
    inside = False
    for index, heading in enumerate(headings):
        if heading.level <= 2:
            inside = heading.level == 2 and heading.title.lower() == wanted
            continue
        if inside and heading.level == level:
            children.append((heading, _span(lines, headings, index, stop_level=level)))
    return children


def first_heading(text: str, level: int = 1) -> Heading | None:
    return next((h for h in parse_headings(text) if h.level == level), None)


# =============================================================================
# SUMMARIES AND CLASSIFICATION
# =============================================================================


def extract_summary(text: str) -> str:
    """First three sentences of ``## Overview``, else the first line after the H1."""
    overview = " ".join(section_body(text, "Overview").split())
    if overview:
        sentences = [s.strip() for s in re.split(r"\.\s+", overview) if s.strip()]
        summary = ". ".join(sentences[:3])
        return summary + "." if len(sentences) > 3 else summary

    title = first_heading(text)
    if title is not None:
        for line in text.splitlines()[title.line + 1 :]:
            stripped = line.strip()
            if stripped and not _HEADING_RE.match(stripped):
                return stripped
    return NO_SUMMARY


def extract_key_points(text: str) -> list[str]:
    """Bullets from Key Features / Key Concepts style sections."""
    lines = text.splitlines()
    headings = parse_headings(text)
    points: list[str] = []
    for index, heading in enumerate(headings):
        if heading.level < 2 or heading.title.lower() not in KEY_POINT_SECTIONS:
            continue
        for line in _span(lines, headings, index, stop_level=6).splitlines():
            match = _BULLET_RE.match(line)
            if match:
                item = match.group(1).strip()
                if 10 < len(item) < 100:
                    points.append(item)
    return points[:MAX_KEY_POINTS]


def bold_bullets(text: str, limit: int | None = None) -> list[str]:
    """Names from ``- **Name**`` bullet items."""
    names = [m.group(1).strip() for m in map(_BOLD_BULLET_RE.match, text.splitlines()) if m]
    return names if limit is None else names[:limit]


def determine_document_type(file_name: str, text: str) -> str:
    name = file_name.lower()
    if "guide" in name or "## Step-by-step" in text:
        return "guide"
    if "template" in name:
        return "template"
    if "workflow" in name:
        return "workflow"
    if "standard" in name or "specification" in name:
        return "standard"
    if "## API" in text or "## Architecture" in text:
        return "technical"
    return "general_documentation"


def determine_usage_context(text: str) -> list[str]:
    lowered = text.lower()
    contexts: list[str] = []
    if "agent" in lowered and "coordination" in lowered:
        contexts.append("agent_coordination")
    if "workflow" in lowered or "process" in lowered:
        contexts.append("workflow_guidance")
    if re.search(r"\bapi\b", lowered) or "integration" in lowered:
        contexts.append("technical_integration")
    if "sprint" in lowered or "agile" in lowered:
        contexts.append("sprint_management")
    if "deploy" in lowered or "production" in lowered:
        contexts.append("deployment")
    return contexts or ["general_reference"]


def extract_markdown_summary(text: str, limit: int = 200) -> str:
    """Short plain-text summary used when no JSON summary exists."""
    summary: list[str] = []
    length = 0
    inside = False
    for line in text.splitlines():
        if line.startswith("## Overview") or line.startswith("## Summary"):
            inside = True
            continue
        if inside and line.startswith("##"):
            break
        stripped = line.strip()
        if inside and stripped:
            summary.append(stripped)
            length += len(stripped) + 1
            if length > limit:
                break
    return " ".join(summary) or "No summary available"
