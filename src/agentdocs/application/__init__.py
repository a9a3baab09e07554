"""
Application layer for agentdocs.

Contains the services that coordinate domain logic through the store and
stream ports.
"""

from agentdocs.application.context_loader import CONTEXT_BUNDLES, AgentContextLoader
from agentdocs.application.linter import CorpusLinter
from agentdocs.application.query_service import DocumentQueryService
from agentdocs.application.stream_emitter import StreamEmitter
from agentdocs.application.sync_service import DocumentSyncService

__all__ = [
    "AgentContextLoader",
    "CONTEXT_BUNDLES",
    "CorpusLinter",
    "DocumentQueryService",
    "DocumentSyncService",
    "StreamEmitter",
]
