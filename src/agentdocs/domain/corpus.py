"""Read-only snapshot of a corpus, handed to lint rules."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from agentdocs.domain.layout import CorpusLayout
from agentdocs.domain.models import DocumentKind


@dataclass(frozen=True)
class CorpusIndex:
    """Markdown documents and JSON mirrors present in a corpus.

    Store lookups are bound to the store the index was built from so rules
    can check targets that are not collection documents.
    """

    layout: CorpusLayout
    documents: dict[str, str]  # root-relative md path -> text
    json_files: tuple[str, ...]
    exists: Callable[[str], bool]
    read_text: Callable[[str], str | None]
    read_json: Callable[[str], Any]
    agent_ids: frozenset[str] = field(default_factory=frozenset)

    def agent_documents(self) -> dict[str, str]:
        return {
            path: text
            for path, text in self.documents.items()
            if (c := self.layout.collection_for(path)) is not None
            and c.kind is DocumentKind.AGENT
            and self.layout.is_convertible(path)
        }
