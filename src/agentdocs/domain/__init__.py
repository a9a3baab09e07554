"""
Domain layer for agentdocs.

Contains the markdown analysis and summary builders with no external
dependencies.
"""

from agentdocs.domain.corpus import CorpusIndex
from agentdocs.domain.exceptions import (
    AgentDocsError,
    ConfigurationError,
    ContextLoadError,
    DocumentNotFound,
    InvalidAgentName,
    InvalidReference,
    SectionNotFound,
    SyncError,
)
from agentdocs.domain.interfaces import (
    DocumentStoreInterface,
    EventStreamInterface,
    LintRuleInterface,
)
from agentdocs.domain.layout import DEFAULT_COLLECTIONS, CorpusLayout
from agentdocs.domain.models import (
    Collection,
    ContextLevel,
    ContextLoadResult,
    ConversionOutcome,
    ConversionRecord,
    ConversionReport,
    ConversionStats,
    DocumentKind,
    LintFinding,
    LintReport,
    LintSeverity,
    MultiSectionLoad,
    SectionLoad,
    SyncResult,
    SyncStatus,
)
from agentdocs.domain.stream_event import (
    CoordinationType,
    StreamEvent,
    StreamEventType,
    StreamStats,
)

__all__ = [
    # Corpus
    "Collection",
    "CorpusIndex",
    "CorpusLayout",
    "DEFAULT_COLLECTIONS",
    "DocumentKind",
    # Exceptions
    "AgentDocsError",
    "ConfigurationError",
    "ContextLoadError",
    "DocumentNotFound",
    "InvalidAgentName",
    "InvalidReference",
    "SectionNotFound",
    "SyncError",
    # Interfaces
    "DocumentStoreInterface",
    "EventStreamInterface",
    "LintRuleInterface",
    # Models
    "ContextLevel",
    "ContextLoadResult",
    "ConversionOutcome",
    "ConversionRecord",
    "ConversionReport",
    "ConversionStats",
    "LintFinding",
    "LintReport",
    "LintSeverity",
    "MultiSectionLoad",
    "SectionLoad",
    "SyncResult",
    "SyncStatus",
    # Streams
    "CoordinationType",
    "StreamEvent",
    "StreamEventType",
    "StreamStats",
]
