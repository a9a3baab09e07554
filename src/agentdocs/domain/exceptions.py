"""
Domain exceptions for agentdocs.

Single-document operations raise these; bulk operations catch them per file,
log the failure and keep going.
"""


class AgentDocsError(Exception):
    """Base class for every error raised by agentdocs."""


class ConfigurationError(AgentDocsError):
    """Raised when configuration files are invalid or missing."""


class SyncError(AgentDocsError):
    """
    Raised when a markdown document cannot be converted to its JSON summary.

    Carries the offending source path so bulk conversions can report it.
    """

    def __init__(self, message: str, source_path: str):
        """
        Args:
            message: Human-readable error message
            source_path: Root-relative path of the markdown document
        """
        super().__init__(f"{source_path}: {message}")
        self.source_path = source_path


class InvalidReference(AgentDocsError):
    """Raised when an md_reference is not of the form ``path.md#anchor``."""

    def __init__(self, reference: str):
        super().__init__(
            f"Invalid reference format: {reference!r} (expected 'file.md#anchor')"
        )
        self.reference = reference


class DocumentNotFound(AgentDocsError):
    """Raised when a referenced markdown or JSON document does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Document not found: {path}")
        self.path = path


class SectionNotFound(AgentDocsError):
    """Raised when no heading in a document produces the requested anchor."""

    def __init__(self, anchor: str, path: str | None = None):
        where = f" in {path}" if path else ""
        super().__init__(f"Section '{anchor}' not found{where}")
        self.anchor = anchor
        self.path = path


class ContextLoadError(AgentDocsError):
    """Raised when context for an agent cannot be assembled."""


class InvalidAgentName(AgentDocsError):
    """Raised when an agent name cannot be used as a stream segment prefix."""

    def __init__(self, name: str):
        super().__init__(
            f"Invalid agent name: {name!r} (expected lower-case letters, digits and '_')"
        )
        self.name = name
