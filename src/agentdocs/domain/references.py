"""Extraction of cross-document references from markdown."""

import re
from collections.abc import Iterator
from dataclasses import dataclass

from agentdocs.domain.layout import normalize_agent_id

_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_INLINE_CODE_RE = re.compile(r"`[^`]*`")
_LINK_RE = re.compile(r"\[([^\]]*)\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")
_BOLD_AGENT_RE = re.compile(r"\*\*([A-Z][\w&/ -]*? Agent)\*\*")
_CODE_AGENT_RE = re.compile(r"`([a-z0-9_]+_agent)`")


@dataclass(frozen=True)
class MarkdownLink:
    text: str
    target: str
    line: int  # 1-based

    @property
    def path(self) -> str:
        return self.target.partition("#")[0]

    @property
    def anchor(self) -> str:
        return self.target.partition("#")[2]


@dataclass(frozen=True)
class AgentMention:
    name: str  # As written ("Research Agent", "research_agent")
    agent_id: str
    line: int  # 1-based


def _prose_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield (1-based line number, line) for lines outside fenced code blocks."""
    fence: str | None = None
    for number, line in enumerate(text.splitlines(), start=1):
        match = _FENCE_RE.match(line)
        if match:
            if fence is None:
                fence = match.group(1)
            elif match.group(1) == fence:
                fence = None
            continue
        if fence is None:
            yield number, line


def is_external(target: str) -> bool:
    return bool(_SCHEME_RE.match(target)) or target.startswith("//")


def extract_links(text: str) -> list[MarkdownLink]:
    """Local markdown links (including images), skipping code and external URLs."""
    links: list[MarkdownLink] = []
    for number, line in _prose_lines(text):
        for match in _LINK_RE.finditer(_INLINE_CODE_RE.sub("", line)):
            target = match.group(2)
            if not is_external(target):
                links.append(MarkdownLink(match.group(1), target, number))
    return links


def extract_agent_mentions(text: str) -> list[AgentMention]:
    """Bold ``**Name Agent**`` mentions and backticked ``name_agent`` ids."""
    mentions: list[AgentMention] = []
    for number, line in _prose_lines(text):
        for match in _BOLD_AGENT_RE.finditer(line):
            name = match.group(1)
            mentions.append(AgentMention(name, normalize_agent_id(name), number))
        for match in _CODE_AGENT_RE.finditer(line):
            name = match.group(1)
            mentions.append(AgentMention(name, name, number))
    return mentions
