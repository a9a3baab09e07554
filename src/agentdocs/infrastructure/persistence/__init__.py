"""
Persistence adapters for documents and event streams.
"""

from agentdocs.infrastructure.persistence.filesystem import FilesystemDocumentStore
from agentdocs.infrastructure.persistence.memory import InMemoryDocumentStore
from agentdocs.infrastructure.persistence.streams import (
    FilesystemEventStream,
    InMemoryEventStream,
)

__all__ = [
    "FilesystemDocumentStore",
    "InMemoryDocumentStore",
    "FilesystemEventStream",
    "InMemoryEventStream",
]
