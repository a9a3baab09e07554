"""
Broken link rule.

Pure rule over the corpus snapshot - checks relative links and anchors.
"""

import posixpath
from collections.abc import Iterator
from pathlib import PurePosixPath
from urllib.parse import unquote

from agentdocs.domain.corpus import CorpusIndex
from agentdocs.domain.interfaces import LintRuleInterface
from agentdocs.domain.markdown import parse_headings
from agentdocs.domain.models import LintFinding, LintSeverity
from agentdocs.domain.references import extract_links


class BrokenLinkRule(LintRuleInterface):
    """
    Flags relative links whose target file does not exist and anchors that
    no heading in the target markdown produces.
    """

    name = "broken-link"
    severity = LintSeverity.ERROR

    def __init__(self) -> None:
        self._anchors: dict[str, frozenset[str]] = {}

    def _anchors_of(self, corpus: CorpusIndex, path: str) -> frozenset[str] | None:
        if path not in self._anchors:
            text = corpus.documents.get(path)
            if text is None:
                text = corpus.read_text(path)
            if text is None:
                return None
            self._anchors[path] = frozenset(h.anchor for h in parse_headings(text))
        return self._anchors[path]

    def _suggest(self, corpus: CorpusIndex, target: str) -> str:
        name = PurePosixPath(target).name
        candidates = sorted(p for p in corpus.documents if PurePosixPath(p).name == name)
        return f" (did you mean {candidates[0]}?)" if candidates else ""

    def check(self, corpus: CorpusIndex) -> Iterator[LintFinding]:
        self._anchors.clear()
        for path, text in corpus.documents.items():
            base = PurePosixPath(path).parent.as_posix()
            for link in extract_links(text):
                target = path
                if link.path:
                    raw = unquote(link.path)
                    target = posixpath.normpath(
                        raw.lstrip("/") if raw.startswith("/") else posixpath.join(base, raw)
                    )
                    if target == ".." or target.startswith("../"):
                        yield LintFinding(
                            self.name,
                            self.severity,
                            path,
                            f"Link '{link.target}' points outside the corpus",
                            link.line,
                        )
                        continue
                    if not corpus.exists(target):
                        yield LintFinding(
                            self.name,
                            self.severity,
                            path,
                            f"Link target '{link.path}' does not exist"
                            + self._suggest(corpus, target),
                            link.line,
                        )
                        continue
                if not link.anchor or not target.endswith(".md"):
                    continue
                anchors = self._anchors_of(corpus, target)
                if anchors is not None and link.anchor not in anchors:
                    yield LintFinding(
                        self.name,
                        self.severity,
                        path,
                        f"Anchor '#{link.anchor}' not found in {target}",
                        link.line,
                    )
