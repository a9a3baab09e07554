"""
Infrastructure layer for agentdocs.

Contains adapters for external concerns (filesystem persistence, event
streams, rule registry).
"""

from agentdocs.infrastructure.persistence import (
    FilesystemDocumentStore,
    FilesystemEventStream,
    InMemoryDocumentStore,
    InMemoryEventStream,
)
from agentdocs.infrastructure.registry import RuleRegistry

__all__ = [
    # Persistence
    "FilesystemDocumentStore",
    "InMemoryDocumentStore",
    # Streams
    "FilesystemEventStream",
    "InMemoryEventStream",
    # Registry
    "RuleRegistry",
]
