"""Document structure rules."""

from collections.abc import Iterator

from agentdocs.domain.corpus import CorpusIndex
from agentdocs.domain.interfaces import LintRuleInterface
from agentdocs.domain.markdown import parse_headings
from agentdocs.domain.models import LintFinding, LintSeverity


class MissingOverviewRule(LintRuleInterface):
    """Agent documents need an ``## Overview`` to produce a useful summary."""

    name = "missing-overview"
    severity = LintSeverity.WARNING

    def check(self, corpus: CorpusIndex) -> Iterator[LintFinding]:
        for path, text in corpus.agent_documents().items():
            if not any(
                h.level == 2 and h.title.lower() == "overview" for h in parse_headings(text)
            ):
                yield LintFinding(
                    self.name, self.severity, path, "Agent document has no '## Overview' section"
                )


class DuplicateHeadingRule(LintRuleInterface):
    """Repeated H2 titles get suffixed anchors that references rarely expect."""

    name = "duplicate-heading"
    severity = LintSeverity.WARNING

    def check(self, corpus: CorpusIndex) -> Iterator[LintFinding]:
        for path, text in corpus.documents.items():
            seen: dict[str, int] = {}
            for heading in parse_headings(text):
                if heading.level != 2:
                    continue
                key = heading.title.lower()
                if key in seen:
                    yield LintFinding(
                        self.name,
                        self.severity,
                        path,
                        f"Duplicate section '{heading.title}' (first at line {seen[key]}),"
                        f" anchor becomes #{heading.anchor}",
                        heading.line + 1,
                    )
                else:
                    seen[key] = heading.line + 1
