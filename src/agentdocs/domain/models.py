"""
Domain models for agentdocs.

Pure data structures describing corpus collections, synchronisation outcomes,
context loads and lint findings. All models are immutable (frozen dataclasses).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# CORPUS COLLECTIONS
# =============================================================================


class DocumentKind(Enum):
    """Which summary builder a collection uses."""

    AGENT = "agent"  # Persona documents -> agent summaries
    GENERAL = "general"  # Any other documentation -> document summaries


@dataclass(frozen=True)
class Collection:
    """A directory of markdown documents mirrored into a JSON output directory."""

    name: str  # Identifier used on the CLI and in config ("agents")
    source_dir: str  # Root-relative markdown directory ("ai-agents")
    output_dir: str  # Root-relative JSON directory ("machine-data/ai-agents-json")
    kind: DocumentKind = DocumentKind.GENERAL


# =============================================================================
# SYNCHRONISATION
# =============================================================================


class SyncStatus(Enum):
    """Outcome of synchronising one markdown file."""

    CONVERTED = "success"
    SKIPPED = "skipped"
    REMOVED = "removed"


@dataclass(frozen=True)
class SyncResult:
    """Result of a single-file sync, as reported back to the editor hook."""

    status: SyncStatus
    source_file: str
    reason: str = ""
    json_file: str | None = None
    checksum: str | None = None
    file_size: int | None = None
    duration_ms: float = 0.0
    created: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "status": self.status.value,
            "source_file": self.source_file,
            "duration": f"{self.duration_ms:.1f}ms",
        }
        if self.reason:
            data["reason"] = self.reason
        if self.json_file is not None:
            data["json_path"] = self.json_file
        if self.checksum is not None:
            data["checksum"] = self.checksum
        if self.file_size is not None:
            data["file_size"] = self.file_size
        if self.status is SyncStatus.CONVERTED:
            data["created"] = self.created
        return data


class ConversionOutcome(Enum):
    """Per-file outcome inside a bulk conversion."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class ConversionRecord:
    """One markdown file processed by a bulk conversion."""

    source_file: str
    json_file: str
    outcome: ConversionOutcome
    full_md_tokens: int = 0
    estimated_tokens: int = 0
    reduction: float = 0.0  # Percent of tokens saved by the summary
    error: str | None = None


@dataclass(frozen=True)
class ConversionStats:
    """Aggregate counters for a bulk conversion."""

    processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    average_reduction: float = 0.0

    @classmethod
    def from_records(cls, records: tuple[ConversionRecord, ...]) -> "ConversionStats":
        counts = {outcome: 0 for outcome in ConversionOutcome}
        for record in records:
            counts[record.outcome] += 1
        converted = [
            r.reduction
            for r in records
            if r.outcome in (ConversionOutcome.CREATED, ConversionOutcome.UPDATED)
        ]
        average = round(sum(converted) / len(converted), 1) if converted else 0.0
        return cls(
            processed=len(records),
            created=counts[ConversionOutcome.CREATED],
            updated=counts[ConversionOutcome.UPDATED],
            skipped=counts[ConversionOutcome.SKIPPED],
            errors=counts[ConversionOutcome.ERROR],
            average_reduction=average,
        )


@dataclass(frozen=True)
class ConversionReport:
    """Everything a bulk conversion did, persisted as a JSON report."""

    timestamp: str
    collections: tuple[str, ...]
    records: tuple[ConversionRecord, ...]
    index_updates: int = 0

    @property
    def stats(self) -> ConversionStats:
        return ConversionStats.from_records(self.records)

    def to_dict(self) -> dict[str, Any]:
        stats = self.stats
        return {
            "timestamp": self.timestamp,
            "collections": list(self.collections),
            "stats": {
                "processed": stats.processed,
                "created": stats.created,
                "updated": stats.updated,
                "skipped": stats.skipped,
                "errors": stats.errors,
                "average_token_reduction": stats.average_reduction,
                "index_updates": self.index_updates,
            },
            "files": [
                {
                    "source": r.source_file,
                    "json": r.json_file,
                    "outcome": r.outcome.value,
                    "full_md_tokens": r.full_md_tokens,
                    "estimated_tokens": r.estimated_tokens,
                    "token_reduction": r.reduction,
                    **({"error": r.error} if r.error else {}),
                }
                for r in self.records
            ],
        }


# =============================================================================
# CONTEXT LOADING
# =============================================================================


class ContextLevel(Enum):
    """Progressive context depth, from cheapest to most complete."""

    MINIMAL = "minimal"
    STANDARD = "standard"
    DETAILED = "detailed"


@dataclass(frozen=True)
class SectionLoad:
    """Markdown section resolved from an md_reference."""

    reference: str
    heading: str
    content: str
    tokens: int
    cached: bool = False


@dataclass(frozen=True)
class MultiSectionLoad:
    """Batch of section loads; failures are collected rather than raised."""

    sections: dict[str, SectionLoad] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        return sum(s.tokens for s in self.sections.values())


@dataclass(frozen=True)
class ContextLoadResult:
    """Context assembled for an agent from one or more source agents."""

    method: str  # "json_optimized" or "fallback_mixed"
    data: dict[str, Any]
    metrics: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# LINTING
# =============================================================================


class LintSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class LintFinding:
    """A single consistency problem found in the corpus."""

    rule: str
    severity: LintSeverity
    path: str  # Root-relative file the problem was found in
    message: str
    line: int | None = None  # 1-based, None for file-level findings


@dataclass(frozen=True)
class LintReport:
    """Findings from linting a corpus."""

    findings: tuple[LintFinding, ...]
    documents_checked: int

    @property
    def errors(self) -> tuple[LintFinding, ...]:
        return tuple(f for f in self.findings if f.severity is LintSeverity.ERROR)

    @property
    def warnings(self) -> tuple[LintFinding, ...]:
        return tuple(f for f in self.findings if f.severity is LintSeverity.WARNING)

    @property
    def ok(self) -> bool:
        return not self.errors
