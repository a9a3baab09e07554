"""Cross-agent reference rule."""

from collections.abc import Iterator

from agentdocs.domain.corpus import CorpusIndex
from agentdocs.domain.interfaces import LintRuleInterface
from agentdocs.domain.models import LintFinding, LintSeverity
from agentdocs.domain.references import extract_agent_mentions


class UnknownAgentRule(LintRuleInterface):
    """Flags mentions of agents that have no document in the agents collection."""

    name = "unknown-agent"
    severity = LintSeverity.ERROR

    def check(self, corpus: CorpusIndex) -> Iterator[LintFinding]:
        for path, text in corpus.documents.items():
            seen: set[tuple[str, int]] = set()
            for mention in extract_agent_mentions(text):
                key = (mention.agent_id, mention.line)
                if mention.agent_id in corpus.agent_ids or key in seen:
                    continue
                seen.add(key)
                yield LintFinding(
                    self.name,
                    self.severity,
                    path,
                    f"Reference to unknown agent '{mention.name}' ({mention.agent_id})",
                    mention.line,
                )
