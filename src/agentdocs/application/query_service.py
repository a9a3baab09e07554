"""
JSON summary queries.

Answers ``file.json#/path/to/value`` queries against the JSON mirrors of a
corpus, with a TTL cache and a markdown fallback for documents that have not
been converted yet.
"""

import json
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from agentdocs.domain.interfaces import DocumentStoreInterface
from agentdocs.domain.json_path import extract_pointer, field_value, split_query
from agentdocs.domain.layout import CorpusLayout
from agentdocs.domain.markdown import extract_markdown_summary

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0
DEFAULT_CONTEXT_LIMIT = 50_000
DEFAULT_OPTIONAL_LIMIT = 10_000


@dataclass(frozen=True)
class _CacheEntry:
    value: Any
    expires_at: float


def _size(value: Any) -> int:
    return len(json.dumps(value)) if value else 0


class DocumentQueryService:
    """Cached path queries over JSON summaries."""

    def __init__(
        self,
        layout: CorpusLayout,
        store: DocumentStoreInterface,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._layout = layout
        self._store = store
        self._ttl = ttl
        self._clock = clock
        self._cache: dict[tuple[str, bool], _CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def query(
        self,
        query_path: str,
        allow_markdown_fallback: bool = True,
        ttl: float | None = None,
    ) -> Any:
        """
        Resolve ``file.json#/pointer`` to a value.

        Args:
            query_path: File reference with an optional ``#/slash/path``
            allow_markdown_fallback: Return the markdown source when the
                JSON mirror is missing or unreadable
            ttl: Cache lifetime for this result (service default when None)

        Returns:
            The value, a markdown fallback document, or None when nothing
            matches
        """
        key = (query_path, allow_markdown_fallback)
        now = self._clock()
        entry = self._cache.get(key)
        if entry is not None and entry.expires_at > now:
            self._hits += 1
            return entry.value
        self._misses += 1

        file_ref, pointer = split_query(query_path)
        json_path = self._layout.resolve_json_reference(file_ref)
        data = self._read_json(json_path)
        if data is not None:
            value = extract_pointer(data, pointer) if pointer else data
        elif allow_markdown_fallback:
            value = self._markdown_fallback(json_path)
        else:
            value = None

        if value is not None:
            self._cache[key] = _CacheEntry(value, now + (self._ttl if ttl is None else ttl))
        return value

    def query_many(self, queries: Mapping[str, str]) -> dict[str, Any]:
        """Run several queries; keys of the result match the input mapping."""
        return {name: self.query(query_path) for name, query_path in queries.items()}

    def agent_summary(self, agent: str) -> dict[str, Any] | None:
        """The JSON summary of an agent, without markdown fallback."""
        data = self.query(f"{agent}.json", allow_markdown_fallback=False)
        return data if isinstance(data, dict) else None

    def _read_json(self, json_path: str) -> Any:
        try:
            return self._store.read_json(json_path)
        except ValueError as e:
            logger.warning("Unreadable JSON %s: %s", json_path, e)
            return None

    def _markdown_fallback(self, json_path: str) -> dict[str, Any] | None:
        try:
            md_path = self._layout.md_path_for(json_path)
        except ValueError:
            return None
        text = self._store.read_text(md_path)
        if text is None:
            return None
        logger.debug("Falling back to markdown for %s", md_path)
        return {
            "meta": {
                "source": "markdown_fallback",
                "file_path": md_path,
                "timestamp": datetime.now(UTC).isoformat(),
            },
            "content": text,
            "summary": extract_markdown_summary(text),
        }

    # -------------------------------------------------------------------------
    # Context priorities
    # -------------------------------------------------------------------------

    def _priority_fields(self, agent: str, source: str, kind: str) -> list[str]:
        summary = self.agent_summary(agent)
        if summary is None:
            return []
        priorities = summary.get("context_priorities")
        if not isinstance(priorities, dict):
            return []
        fields = (priorities.get(source) or {}).get(kind)
        return list(fields) if isinstance(fields, list) else []

    def critical_data(self, agent: str, source: str) -> dict[str, Any] | None:
        """
        Fields ``agent`` marks critical from ``source``, read from the source's summary.

        Returns:
            Field -> value for fields present in the source summary, or None
            when the agent declares no critical fields or the source has no
            summary
        """
        fields = self._priority_fields(agent, source, "critical")
        source_data = self.agent_summary(source) if fields else None
        if source_data is None:
            return None
        result: dict[str, Any] = {}
        for field in fields:
            value = field_value(source_data, field)
            if value is not None:
                result[field] = value
        return result

    def optional_data(
        self, agent: str, source: str, limit: float = DEFAULT_OPTIONAL_LIMIT
    ) -> dict[str, Any] | None:
        """Optional fields in declaration order, stopping before ``limit`` bytes."""
        fields = self._priority_fields(agent, source, "optional")
        source_data = self.agent_summary(source) if fields else None
        if source_data is None:
            return None
        result: dict[str, Any] = {}
        used = 0
        for field in fields:
            value = field_value(source_data, field)
            if value is None:
                continue
            size = len(json.dumps(value))
            if used + size > limit:
                break
            result[field] = value
            used += size
        return result

    def optimized_context(
        self,
        agent: str,
        sources: Iterable[str],
        context_limit: int = DEFAULT_CONTEXT_LIMIT,
    ) -> dict[str, Any]:
        """
        Critical data from every source first, then optional data in what is left.

        The remaining context limit is shared equally between sources.
        """
        sources = list(sources)
        critical: dict[str, Any] = {}
        optional: dict[str, Any] = {}
        for source in sources:
            data = self.critical_data(agent, source)
            if data:
                critical[source] = data

        critical_size = _size(critical)
        remaining = max(0, context_limit - critical_size)
        share = remaining / len(sources) if sources else 0
        for source in sources:
            data = self.optional_data(agent, source, share)
            if data:
                optional[source] = data

        optional_size = _size(optional)
        return {
            "critical": critical,
            "optional": optional,
            "metadata": {
                "agent": agent,
                "timestamp": datetime.now(UTC).isoformat(),
                "sources": sources,
                "optimization_stats": {
                    "critical_size": critical_size,
                    "optional_size": optional_size,
                    "total_size": critical_size + optional_size,
                },
            },
        }

    # -------------------------------------------------------------------------
    # Cache
    # -------------------------------------------------------------------------

    def cache_stats(self) -> dict[str, Any]:
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "total_queries": total,
            "cache_size": len(self._cache),
            "hit_rate": f"{self._hits / total * 100:.2f}%" if total else "0%",
        }

    def cleanup_expired(self) -> int:
        """Drop expired cache entries; returns how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._cache.items() if entry.expires_at <= now]
        for key in expired:
            del self._cache[key]
        return len(expired)

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.debug("Query cache cleared")
