"""Corpus consistency checks."""

import logging
from collections.abc import Iterable

from agentdocs.domain.corpus import CorpusIndex
from agentdocs.domain.interfaces import DocumentStoreInterface, LintRuleInterface
from agentdocs.domain.layout import CorpusLayout
from agentdocs.domain.models import DocumentKind, LintFinding, LintReport

logger = logging.getLogger(__name__)


class CorpusLinter:
    """Runs lint rules over every markdown document in a corpus.

    Besides the collection documents, extra root-relative markdown files
    (typically the index document) can be linted too.
    """

    def __init__(
        self,
        layout: CorpusLayout,
        store: DocumentStoreInterface,
        rules: Iterable[LintRuleInterface],
        extra_documents: Iterable[str] = (),
    ) -> None:
        self._layout = layout
        self._store = store
        self._rules = list(rules)
        self._extra = list(extra_documents)

    def build_index(self) -> CorpusIndex:
        documents: dict[str, str] = {}
        agent_ids: set[str] = set()
        json_files: list[str] = []
        for collection in self._layout.collections.values():
            for path in self._store.list_files(collection.source_dir, ".md"):
                text = self._store.read_text(path)
                if text is None:
                    continue
                documents[path] = text
                if collection.kind is DocumentKind.AGENT and self._layout.is_convertible(path):
                    agent_ids.add(self._layout.agent_id_for(path))
            json_files.extend(self._store.list_files(collection.output_dir, ".json"))

        for path in self._extra:
            text = self._store.read_text(path)
            if text is not None:
                documents.setdefault(path, text)

        return CorpusIndex(
            layout=self._layout,
            documents=documents,
            json_files=tuple(json_files),
            exists=self._store.exists,
            read_text=self._store.read_text,
            read_json=self._store.read_json,
            agent_ids=frozenset(agent_ids),
        )

    def lint(self) -> LintReport:
        corpus = self.build_index()
        findings: list[LintFinding] = []
        for rule in self._rules:
            found = list(rule.check(corpus))
            logger.debug("Rule %s: %d findings", rule.name, len(found))
            findings.extend(found)
        findings.sort(key=lambda f: (f.path, f.line or 0, f.rule))
        report = LintReport(findings=tuple(findings), documents_checked=len(corpus.documents))
        logger.info(
            "Linted %d documents: %d errors, %d warnings",
            report.documents_checked,
            len(report.errors),
            len(report.warnings),
        )
        return report
