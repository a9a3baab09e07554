"""
JSON mirror rules.

Stale and orphaned summaries silently feed agents outdated context.
"""

from collections.abc import Iterator

from agentdocs.domain.conversion import content_hash
from agentdocs.domain.corpus import CorpusIndex
from agentdocs.domain.interfaces import LintRuleInterface
from agentdocs.domain.models import LintFinding, LintSeverity


class StaleJsonRule(LintRuleInterface):
    """Markdown whose JSON mirror is missing, unreadable or out of date."""

    name = "stale-json"
    severity = LintSeverity.WARNING

    def check(self, corpus: CorpusIndex) -> Iterator[LintFinding]:
        layout = corpus.layout
        for path, text in corpus.documents.items():
            if not layout.is_convertible(path) or layout.collection_for(path) is None:
                continue
            json_path = layout.json_path_for(path)
            try:
                data = corpus.read_json(json_path)
            except ValueError:
                yield LintFinding(
                    self.name, self.severity, path, f"JSON mirror {json_path} is not valid JSON"
                )
                continue
            if data is None:
                yield LintFinding(self.name, self.severity, path, f"No JSON mirror at {json_path}")
                continue
            meta = data.get("meta") if isinstance(data, dict) else None
            stored = meta.get("file_hash") if isinstance(meta, dict) else None
            if stored != content_hash(text):
                yield LintFinding(
                    self.name,
                    self.severity,
                    path,
                    f"JSON mirror {json_path} is out of date",
                )


class OrphanJsonRule(LintRuleInterface):
    """JSON mirrors left behind after their markdown was deleted."""

    name = "orphan-json"
    severity = LintSeverity.WARNING

    def check(self, corpus: CorpusIndex) -> Iterator[LintFinding]:
        for json_path in corpus.json_files:
            md_path = corpus.layout.md_path_for(json_path)
            if not corpus.exists(md_path):
                yield LintFinding(
                    self.name,
                    self.severity,
                    json_path,
                    f"No markdown source {md_path}",
                )
