"""
Domain interfaces (Ports) for agentdocs.

These abstract base classes define the contracts that adapters must satisfy.
Paths crossing these ports are root-relative POSIX strings.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable

    from agentdocs.domain.corpus import CorpusIndex
    from agentdocs.domain.models import LintFinding, LintSeverity
    from agentdocs.domain.stream_event import (
        StreamEvent,
        StreamEventType,
        StreamStats,
    )


class DocumentStoreInterface(ABC):
    """
    Port for reading markdown sources and writing their JSON mirrors.
    """

    @abstractmethod
    def read_text(self, path: str) -> str | None:
        """
        Read a text file.

        Args:
            path: Root-relative path

        Returns:
            File contents with invalid UTF-8 bytes replaced by U+FFFD, or
            None if the file does not exist
        """
        pass

    @abstractmethod
    def write_text(self, path: str, text: str) -> None:
        """Write a text file, creating parent directories."""
        pass

    @abstractmethod
    def read_json(self, path: str) -> Any:
        """
        Read and parse a JSON file.

        Returns:
            Parsed JSON, or None if the file does not exist

        Raises:
            ValueError: If the file exists but is not valid JSON
        """
        pass

    @abstractmethod
    def write_json(self, path: str, data: Any) -> None:
        """Write ``data`` as indented JSON, replacing the file atomically."""
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def remove(self, path: str, prune_until: str | None = None) -> bool:
        """
        Delete a file.

        Args:
            path: Root-relative path of the file
            prune_until: Directory at which to stop removing emptied parents

        Returns:
            True if a file was removed
        """
        pass

    @abstractmethod
    def list_files(self, directory: str, suffix: str) -> list[str]:
        """
        Recursively list files below ``directory`` ending in ``suffix``.

        Returns:
            Sorted root-relative paths (empty if the directory is missing)
        """
        pass


class EventStreamInterface(ABC):
    """
    Port for publishing and reading agent stream events.
    """

    @abstractmethod
    def publish(self, event: "StreamEvent") -> str:
        """
        Append an event to the stream.

        Returns:
            The event_id

        Raises:
            InvalidAgentName: If the recipient is not a valid agent id
        """
        pass

    @abstractmethod
    def events(
        self,
        event_type: "StreamEventType | None" = None,
        from_agent: str | None = None,
        to_agent: str | None = None,
    ) -> list["StreamEvent"]:
        """All matching events, oldest first."""
        pass

    @abstractmethod
    def stats(self) -> "StreamStats":
        pass

    @abstractmethod
    def cleanup(self, days_to_keep: int = 30) -> list[str]:
        """
        Delete stream segments older than ``days_to_keep``.

        Returns:
            Names of the removed segments
        """
        pass


class LintRuleInterface(ABC):
    """
    Port for corpus consistency checks.

    Rules are discovered through the ``agentdocs.lint_rules`` entry point group.
    """

    name: str = "rule"
    severity: "LintSeverity"

    @abstractmethod
    def check(self, corpus: "CorpusIndex") -> "Iterable[LintFinding]":
        """
        Inspect the corpus.

        Args:
            corpus: Snapshot of documents and JSON mirrors

        Returns:
            Findings; empty when the corpus satisfies the rule
        """
        pass
