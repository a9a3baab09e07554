"""
agentdocs: machine-readable companions for markdown agent corpora.

Keeps JSON summaries of agent persona documents and project documentation in
step with their markdown, serves them progressively to agents, streams
inter-agent events as JSON Lines and lints the corpus for broken references.

Example:
    from agentdocs import CorpusLayout, DocumentSyncService, FilesystemDocumentStore

    layout = CorpusLayout("/path/to/corpus")
    store = FilesystemDocumentStore(layout.root)
    sync = DocumentSyncService(layout, store)
    result = sync.sync_file("ai-agents/research_agent.md")
"""

# Application layer (use cases)
from agentdocs.application import (
    CONTEXT_BUNDLES,
    AgentContextLoader,
    CorpusLinter,
    DocumentQueryService,
    DocumentSyncService,
    StreamEmitter,
)

# Domain
from agentdocs.domain import (
    AgentDocsError,
    Collection,
    ConfigurationError,
    ContextLevel,
    ContextLoadError,
    CorpusIndex,
    CorpusLayout,
    DocumentKind,
    DocumentNotFound,
    InvalidAgentName,
    InvalidReference,
    LintFinding,
    LintReport,
    LintSeverity,
    SectionNotFound,
    StreamEvent,
    StreamEventType,
    SyncError,
    SyncResult,
    SyncStatus,
)

# Infrastructure (explicit import encouraged for dependency injection)
from agentdocs.infrastructure import (
    FilesystemDocumentStore,
    FilesystemEventStream,
    InMemoryDocumentStore,
    InMemoryEventStream,
    RuleRegistry,
)

__version__ = "0.3.0"

__all__ = [
    # Version
    "__version__",
    # Domain
    "Collection",
    "ContextLevel",
    "CorpusIndex",
    "CorpusLayout",
    "DocumentKind",
    "LintFinding",
    "LintReport",
    "LintSeverity",
    "StreamEvent",
    "StreamEventType",
    "SyncResult",
    "SyncStatus",
    # Domain exceptions
    "AgentDocsError",
    "ConfigurationError",
    "ContextLoadError",
    "DocumentNotFound",
    "InvalidAgentName",
    "InvalidReference",
    "SectionNotFound",
    "SyncError",
    # Application layer
    "AgentContextLoader",
    "CONTEXT_BUNDLES",
    "CorpusLinter",
    "DocumentQueryService",
    "DocumentSyncService",
    "StreamEmitter",
    # Infrastructure
    "FilesystemDocumentStore",
    "FilesystemEventStream",
    "InMemoryDocumentStore",
    "InMemoryEventStream",
    "RuleRegistry",
]
