"""
Markdown to JSON synchronisation.

Keeps the JSON mirrors of a corpus in step with their markdown sources, one
file at a time (editor hook) or a whole collection at a time (bulk conversion).
"""

import logging
import re
import time
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

import jsonschema

from agentdocs.application.stream_emitter import StreamEmitter
from agentdocs.domain.agent_parser import build_agent_json
from agentdocs.domain.conversion import build_document_json, content_hash, token_reduction
from agentdocs.domain.exceptions import AgentDocsError, SyncError
from agentdocs.domain.interfaces import DocumentStoreInterface
from agentdocs.domain.layout import CorpusLayout
from agentdocs.domain.models import (
    Collection,
    ConversionOutcome,
    ConversionRecord,
    ConversionReport,
    DocumentKind,
    SyncResult,
    SyncStatus,
)
from agentdocs.schemas import validate_agent, validate_document

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DocumentSyncService:
    """Converts markdown documents into validated JSON summaries."""

    def __init__(
        self,
        layout: CorpusLayout,
        store: DocumentStoreInterface,
        emitter: StreamEmitter | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._layout = layout
        self._store = store
        self._emitter = emitter
        self._clock = clock

    # -------------------------------------------------------------------------
    # Conversion
    # -------------------------------------------------------------------------

    def build_summary(self, rel_path: str, text: str, checksum: str) -> dict[str, Any]:
        """
        Build and validate the summary for one markdown document.

        Raises:
            SyncError: If the document is outside every collection or the
                generated summary does not match its schema
        """
        collection = self._layout.collection_for(rel_path)
        if collection is None:
            raise SyncError("outside conversion directories", rel_path)
        now = self._clock()
        try:
            if collection.kind is DocumentKind.AGENT:
                summary = build_agent_json(
                    text,
                    agent_id=self._layout.agent_id_for(rel_path),
                    source_file=rel_path,
                    file_hash=checksum,
                    today=now.date().isoformat(),
                    mirrors={
                        c.source_dir: c.output_dir
                        for c in self._layout.collections.values()
                    },
                )
                validate_agent(summary)
            else:
                summary = build_document_json(
                    text,
                    source_file=rel_path,
                    file_hash=checksum,
                    timestamp=now.isoformat(),
                )
                validate_document(summary)
        except jsonschema.ValidationError as e:
            raise SyncError(f"generated summary is invalid: {e.message}", rel_path) from e
        return summary

    def _stored_hash(self, json_path: str) -> tuple[bool, str | None]:
        """(mirror exists, stored file_hash); corrupted mirrors have no hash."""
        try:
            data = self._store.read_json(json_path)
        except ValueError:
            logger.warning("Corrupted JSON %s will be regenerated", json_path)
            return True, None
        if data is None:
            return False, None
        meta = data.get("meta") if isinstance(data, dict) else None
        return True, meta.get("file_hash") if isinstance(meta, dict) else None

    # -------------------------------------------------------------------------
    # Single file (hook)
    # -------------------------------------------------------------------------

    def sync_file(self, path: str) -> SyncResult:
        """
        Bring the JSON mirror of one markdown file up to date.

        Handles creation, modification and deletion of the markdown file.

        Args:
            path: Absolute or root-relative path of the markdown file

        Returns:
            SyncResult describing what happened

        Raises:
            SyncError: If the summary cannot be generated
        """
        start = time.perf_counter()
        rel = self._layout.relative(path)

        def elapsed() -> float:
            return (time.perf_counter() - start) * 1000

        if not rel.endswith(".md"):
            return SyncResult(SyncStatus.SKIPPED, rel, reason="not a markdown file")
        collection = self._layout.collection_for(rel)
        if collection is None:
            return SyncResult(
                SyncStatus.SKIPPED, rel, reason="outside conversion directories"
            )
        if not self._layout.is_convertible(rel):
            return SyncResult(SyncStatus.SKIPPED, rel, reason="excluded from conversion")

        json_path = self._layout.json_path_for(rel)
        text = self._store.read_text(rel)
        if text is None:
            return self._handle_deleted(rel, json_path, collection, elapsed)

        checksum = content_hash(text)
        existed, stored = self._stored_hash(json_path)
        if stored == checksum:
            logger.debug("%s unchanged", rel)
            return SyncResult(
                SyncStatus.SKIPPED,
                rel,
                reason="JSON already up to date",
                json_file=json_path,
                checksum=checksum,
                duration_ms=elapsed(),
            )

        self._store.write_json(json_path, self.build_summary(rel, text, checksum))
        result = SyncResult(
            SyncStatus.CONVERTED,
            rel,
            json_file=json_path,
            checksum=checksum,
            file_size=len(text.encode("utf-8")),
            duration_ms=elapsed(),
            created=not existed,
        )
        logger.info("Converted %s -> %s", rel, json_path)
        self._notify(result)
        return result

    def _handle_deleted(
        self,
        rel: str,
        json_path: str,
        collection: Collection,
        elapsed: Callable[[], float],
    ) -> SyncResult:
        if not self._store.remove(json_path, prune_until=collection.output_dir):
            return SyncResult(
                SyncStatus.SKIPPED, rel, reason="no JSON file to remove", duration_ms=elapsed()
            )
        result = SyncResult(
            SyncStatus.REMOVED,
            rel,
            reason="source markdown deleted",
            json_file=json_path,
            duration_ms=elapsed(),
        )
        logger.info("Removed %s (source deleted)", json_path)
        self._notify(result)
        return result

    def _notify(self, result: SyncResult) -> None:
        if self._emitter is not None:
            self._emitter.document_synced(result.to_dict())

    # -------------------------------------------------------------------------
    # Bulk conversion
    # -------------------------------------------------------------------------

    def _convert_one(self, rel: str, force: bool) -> ConversionRecord:
        json_path = self._layout.json_path_for(rel)
        try:
            text = self._store.read_text(rel)
            if text is None:
                raise SyncError("file disappeared during conversion", rel)
            checksum = content_hash(text)
            existed, stored = self._stored_hash(json_path)
            if not force and stored == checksum:
                return ConversionRecord(rel, json_path, ConversionOutcome.SKIPPED)
            summary = self.build_summary(rel, text, checksum)
            self._store.write_json(json_path, summary)
        except (AgentDocsError, OSError, ValueError) as e:
            logger.error("Failed to convert %s: %s", rel, e)
            return ConversionRecord(rel, json_path, ConversionOutcome.ERROR, error=str(e))

        meta = summary["meta"]
        return ConversionRecord(
            rel,
            json_path,
            ConversionOutcome.UPDATED if existed else ConversionOutcome.CREATED,
            full_md_tokens=meta["full_md_tokens"],
            estimated_tokens=meta["estimated_tokens"],
            reduction=token_reduction(summary),
        )

    def convert_collection(self, name: str, force: bool = False) -> list[ConversionRecord]:
        """
        Convert every markdown document in a collection.

        Per-file failures are logged and recorded, never raised.

        Raises:
            KeyError: If the collection does not exist
        """
        collection = self._layout.get(name)
        records = [
            self._convert_one(rel, force)
            for rel in self._store.list_files(collection.source_dir, ".md")
            if self._layout.is_convertible(rel)
        ]
        logger.info("Collection %s: %d documents processed", name, len(records))
        return records

    def convert_all(
        self,
        names: Iterable[str] | None = None,
        force: bool = False,
        index_file: str | None = None,
    ) -> ConversionReport:
        """
        Convert several collections and optionally repoint an index document.

        Args:
            names: Collections to convert (all when None)
            force: Regenerate summaries even when the hash is unchanged
            index_file: Root-relative index document whose markdown references
                should be rewritten to the JSON mirrors
        """
        selected = list(names) if names else list(self._layout.collections)
        records: list[ConversionRecord] = []
        for name in selected:
            records.extend(self.convert_collection(name, force=force))

        index_updates = 0
        if index_file:
            index_updates = self.update_index_references(index_file, records)

        report = ConversionReport(
            timestamp=self._clock().isoformat(),
            collections=tuple(selected),
            records=tuple(records),
            index_updates=index_updates,
        )
        stats = report.stats
        logger.info(
            "Conversion finished: %d processed, %d created, %d updated, %d skipped, %d errors",
            stats.processed,
            stats.created,
            stats.updated,
            stats.skipped,
            stats.errors,
        )
        return report

    def write_report(self, report: ConversionReport, reports_dir: str) -> str:
        """Persist a report as ``conversion-report-YYYY-MM-DD.json``; returns its path."""
        path = f"{reports_dir.rstrip('/')}/conversion-report-{report.timestamp[:10]}.json"
        self._store.write_json(path, report.to_dict())
        return path

    def update_index_references(
        self, index_file: str, records: Iterable[ConversionRecord]
    ) -> int:
        """
        Rewrite quoted references to converted markdown files in ``index_file``.

        A timestamped backup of the original is written next to it first.

        Returns:
            Number of references rewritten
        """
        original = self._store.read_text(index_file)
        if original is None:
            logger.warning("Index file %s not found, skipping reference update", index_file)
            return 0

        text = original
        count = 0
        for record in records:
            if record.outcome is ConversionOutcome.ERROR:
                continue
            pattern = re.compile(
                r"([\"'`])([^\"'`\s]*/)?" + re.escape(record.source_file) + r"\1"
            )
            text, n = pattern.subn(
                lambda m, json_file=record.json_file: (
                    f"{m.group(1)}{m.group(2) or ''}{json_file}{m.group(1)}"
                ),
                text,
            )
            count += n

        if count:
            stamp = self._clock().strftime("%Y%m%dT%H%M%S")
            self._store.write_text(f"{index_file}.backup-{stamp}", original)
            self._store.write_text(index_file, text)
            logger.info("Updated %d references in %s", count, index_file)
        return count

    def prune_orphans(self, name: str | None = None) -> list[str]:
        """Delete JSON mirrors whose markdown source no longer exists."""
        collections = (
            [self._layout.get(name)] if name else list(self._layout.collections.values())
        )
        removed: list[str] = []
        for collection in collections:
            for json_path in self._store.list_files(collection.output_dir, ".json"):
                if self._store.exists(self._layout.md_path_for(json_path)):
                    continue
                if self._store.remove(json_path, prune_until=collection.output_dir):
                    logger.info("Removed orphaned %s", json_path)
                    removed.append(json_path)
        return removed
