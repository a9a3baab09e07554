"""
Progressive context loading for agents.

An agent starts from the cheapest view of another agent's summary and only
follows ``md_reference`` pointers back into markdown when it needs detail.
"""

import copy
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from agentdocs.application.query_service import DEFAULT_CONTEXT_LIMIT, DocumentQueryService
from agentdocs.application.stream_emitter import StreamEmitter
from agentdocs.domain.exceptions import (
    AgentDocsError,
    ContextLoadError,
    DocumentNotFound,
    InvalidReference,
    SectionNotFound,
)
from agentdocs.domain.interfaces import DocumentStoreInterface
from agentdocs.domain.json_path import MISSING, extract_dotted
from agentdocs.domain.layout import CorpusLayout
from agentdocs.domain.markdown import bold_bullets, estimate_tokens, find_section
from agentdocs.domain.models import (
    ContextLevel,
    ContextLoadResult,
    MultiSectionLoad,
    SectionLoad,
)

logger = logging.getLogger(__name__)

ALL_MD_REFERENCES = "all_md_references_as_needed"
LEVEL_NAMES = frozenset(level.value for level in ContextLevel)

# Source agents each kind of agent usually needs context from
CONTEXT_BUNDLES: dict[str, tuple[str, ...]] = {
    "development": ("prd_agent", "testing_agent", "security_agent", "ui_ux_agent"),
    "business": ("research_agent", "finance_agent", "analysis_agent", "marketing_agent"),
    "infrastructure": ("devops_agent", "security_agent", "dba_agent", "api_agent"),
    "marketing": (
        "research_agent",
        "analytics_growth_intelligence_agent",
        "customer_lifecycle_retention_agent",
        "seo_agent",
    ),
    "orchestration": ("project_manager_agent", "scrum_master_agent", "document_manager_agent"),
}


def _assign(context: dict[str, Any], dotted: str, value: Any) -> None:
    parts = dotted.split(".")
    target = context
    for part in parts[:-1]:
        child = target.get(part)
        if not isinstance(child, dict):
            child = {}
            target[part] = child
        target = child
    target[parts[-1]] = value


def collect_md_references(data: Any, prefix: str = "") -> dict[str, str]:
    """Every ``md_reference`` in ``data`` keyed by the dotted path of its owner."""
    references: dict[str, str] = {}
    if isinstance(data, dict):
        for key, value in data.items():
            if key == "md_reference" and isinstance(value, str):
                references[prefix or "root"] = value
            else:
                references.update(
                    collect_md_references(value, f"{prefix}.{key}" if prefix else str(key))
                )
    elif isinstance(data, list):
        for index, item in enumerate(data):
            references.update(
                collect_md_references(item, f"{prefix}.{index}" if prefix else str(index))
            )
    return references


class AgentContextLoader:
    """Loads context for one agent from other agents' summaries and markdown."""

    def __init__(
        self,
        agent_name: str,
        query_service: DocumentQueryService,
        store: DocumentStoreInterface,
        layout: CorpusLayout,
        emitter: StreamEmitter | None = None,
        section_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.agent_name = agent_name
        self._query = query_service
        self._store = store
        self._layout = layout
        self._emitter = emitter
        self._section_ttl = section_ttl
        self._clock = clock
        self._sections: dict[str, tuple[SectionLoad, float]] = {}

    # -------------------------------------------------------------------------
    # Markdown sections
    # -------------------------------------------------------------------------

    def _markdown_path(self, path: str) -> str:
        rel = self._layout.relative(path)
        if self._layout.collection_for(rel) is not None:
            return rel
        # References may carry the corpus directory name as a prefix
        for collection in self._layout.collections.values():
            marker = f"/{collection.source_dir}/"
            index = rel.find(marker)
            if index >= 0:
                return rel[index + 1 :]
        return rel

    def _split_reference(self, reference: str) -> tuple[str, str]:
        path, sep, anchor = reference.partition("#")
        if not sep or not path.strip() or not anchor.strip():
            raise InvalidReference(reference)
        return self._markdown_path(path.strip()), anchor.strip()

    def load_section(self, md_reference: str) -> SectionLoad:
        """
        Load the markdown section an ``md_reference`` points at.

        Args:
            md_reference: ``path/to/file.md#anchor``

        Returns:
            SectionLoad; ``cached`` is True when served from the section cache

        Raises:
            InvalidReference: If the reference has no path or anchor
            DocumentNotFound: If the markdown file does not exist
            SectionNotFound: If no heading produces the anchor
        """
        now = self._clock()
        cached = self._sections.get(md_reference)
        if cached is not None and cached[1] > now:
            return replace(cached[0], cached=True)

        md_path, anchor = self._split_reference(md_reference)
        text = self._store.read_text(md_path)
        if text is None:
            raise DocumentNotFound(md_path)
        try:
            heading, content = find_section(text, anchor)
        except SectionNotFound as e:
            raise SectionNotFound(anchor, md_path) from e

        load = SectionLoad(
            reference=md_reference,
            heading=heading.title,
            content=content,
            tokens=estimate_tokens(content),
        )
        self._sections[md_reference] = (load, now + self._section_ttl)
        logger.debug("Loaded %s (%d tokens)", md_reference, load.tokens)
        return load

    def load_sections(self, references: Mapping[str, str]) -> MultiSectionLoad:
        """Load several sections; failures are reported per name instead of raised."""
        sections: dict[str, SectionLoad] = {}
        errors: dict[str, str] = {}
        for name, reference in references.items():
            try:
                sections[name] = self.load_section(reference)
            except AgentDocsError as e:
                errors[name] = str(e)
        return MultiSectionLoad(sections=sections, errors=errors)

    # -------------------------------------------------------------------------
    # Progressive levels
    # -------------------------------------------------------------------------

    def load_progressive(
        self, agent_json: dict[str, Any], level: ContextLevel | str = ContextLevel.MINIMAL
    ) -> dict[str, Any]:
        """
        Assemble the view of an agent summary recommended for ``level``.

        Args:
            agent_json: Agent summary
            level: ``minimal``, ``standard`` or ``detailed``

        Returns:
            The selected parts of the summary; dict-shaped recommendations
            also add ``_context_metadata``

        Raises:
            ValueError: If the level is unknown
        """
        level = ContextLevel(level)
        recommendations = agent_json.get("context_recommendations") or {}
        context: dict[str, Any] = {}
        loaded: list[str] = []
        self._apply_level(agent_json, recommendations, level.value, context, loaded, set())

        recommendation = recommendations.get(level.value)
        if isinstance(recommendation, dict):
            context["_context_metadata"] = {
                "level": level.value,
                "estimated_tokens": recommendation.get("tokens", 0),
                "description": recommendation.get("description", ""),
                "sections_loaded": loaded,
            }
        return context

    def _apply_level(
        self,
        agent_json: dict[str, Any],
        recommendations: dict[str, Any],
        level: str,
        context: dict[str, Any],
        loaded: list[str],
        visited: set[str],
    ) -> None:
        if level in visited:
            return
        visited.add(level)
        recommendation = recommendations.get(level)
        if isinstance(recommendation, dict):
            items = recommendation.get("sections") or []
        elif isinstance(recommendation, list):
            items = recommendation
        else:
            items = []

        for item in items:
            if item in LEVEL_NAMES:
                self._apply_level(agent_json, recommendations, item, context, loaded, visited)
            elif item == ALL_MD_REFERENCES:
                context["md_references"] = collect_md_references(agent_json)
                loaded.append(item)
            elif "." in item:
                value = extract_dotted(agent_json, item)
                if value is not MISSING:
                    _assign(context, item, copy.deepcopy(value))
                    loaded.append(item)
            elif item in agent_json:
                context[item] = copy.deepcopy(agent_json[item])
                loaded.append(item)

    def collect_md_references(self, data: Any) -> dict[str, str]:
        return collect_md_references(data)

    # -------------------------------------------------------------------------
    # Cross-agent context
    # -------------------------------------------------------------------------

    def _reduction(self, sources: list[str], total_size: int) -> float:
        full = 0
        for source in sources:
            json_path = self._layout.resolve_json_reference(f"{source}.json")
            try:
                text = self._store.read_text(self._layout.md_path_for(json_path))
            except ValueError:
                text = None
            full += len(text) if text else 0
        if full == 0:
            return 0.0
        return round(max(0.0, (1 - total_size / full) * 100), 1)

    def load_optimized(
        self,
        sources: Iterable[str],
        context_limit: int = DEFAULT_CONTEXT_LIMIT,
        allow_markdown_fallback: bool = True,
    ) -> ContextLoadResult:
        """
        Critical-first context from ``sources``, falling back per source.

        Raises:
            ContextLoadError: If no JSON context exists and fallback is disabled
        """
        start = time.perf_counter()
        sources = list(sources)
        optimized = self._query.optimized_context(self.agent_name, sources, context_limit)
        if optimized["critical"] or optimized["optional"]:
            total = optimized["metadata"]["optimization_stats"]["total_size"]
            result = ContextLoadResult(
                method="json_optimized",
                data=optimized,
                metrics={
                    "reduction_percentage": self._reduction(sources, total),
                    "load_time_ms": round((time.perf_counter() - start) * 1000, 2),
                    "sources_loaded": len(sources),
                },
            )
            logger.info(
                "%s: optimized context from %d sources (%.1f%% reduction)",
                self.agent_name,
                len(sources),
                result.metrics["reduction_percentage"],
            )
            self._report(result)
            return result

        if not allow_markdown_fallback:
            raise ContextLoadError(
                f"No optimized context for {self.agent_name} and markdown fallback disabled"
            )
        return self._load_fallback(sources, start)

    def _load_fallback(self, sources: list[str], start: float) -> ContextLoadResult:
        logger.info("%s: using fallback context loading", self.agent_name)
        data: dict[str, Any] = {}
        json_sources = 0
        for source in sources:
            summary = self._query.agent_summary(source)
            if summary is not None:
                json_sources += 1
                data[source] = {
                    "source": "json",
                    "critical_data": self._query.critical_data(self.agent_name, source) or {},
                    "summary": summary.get("summary", ""),
                    "capabilities": list(summary.get("capabilities") or [])[:5],
                }
                continue
            fallback = self._query.query(f"{source}.json", allow_markdown_fallback=True)
            if isinstance(fallback, dict) and fallback.get("meta", {}).get("source") == "markdown_fallback":
                data[source] = {
                    "source": "markdown",
                    "summary": fallback["summary"],
                    "capabilities": bold_bullets(fallback["content"], limit=3),
                }
            else:
                logger.warning("%s: no context available from %s", self.agent_name, source)

        result = ContextLoadResult(
            method="fallback_mixed",
            data={
                "sources": data,
                "metadata": {
                    "agent": self.agent_name,
                    "timestamp": datetime.now(UTC).isoformat(),
                    "sources": sources,
                },
            },
            metrics={
                "load_time_ms": round((time.perf_counter() - start) * 1000, 2),
                "sources_loaded": len(data),
                "json_sources": json_sources,
                "markdown_sources": len(data) - json_sources,
            },
        )
        self._report(result)
        return result

    def _report(self, result: ContextLoadResult) -> None:
        if self._emitter is not None:
            self._emitter.context_optimization(
                {"agent": self.agent_name, "method": result.method, **result.metrics}
            )

    def load_critical(self, sources: Iterable[str]) -> dict[str, Any]:
        """Critical fields only, keyed by source agent."""
        critical: dict[str, Any] = {}
        for source in sources:
            data = self._query.critical_data(self.agent_name, source)
            if data:
                critical[source] = data
        return critical

    def load_agent_data(self, source: str, data_path: str | None = None) -> Any:
        """A source agent's summary, or one value in it (slash or dotted path)."""
        if not data_path:
            return self._query.query(f"{source}.json")
        pointer = data_path if data_path.startswith("/") else "/" + data_path.replace(".", "/")
        return self._query.query(f"{source}.json#{pointer}")

    def load_bundle(self, name: str, **options: Any) -> ContextLoadResult:
        """
        Optimized context from a named bundle of source agents.

        Raises:
            KeyError: If the bundle does not exist
        """
        if name not in CONTEXT_BUNDLES:
            raise KeyError(f"Unknown bundle '{name}'. Available: {', '.join(CONTEXT_BUNDLES)}")
        return self.load_optimized(CONTEXT_BUNDLES[name], **options)

    # -------------------------------------------------------------------------
    # Cache
    # -------------------------------------------------------------------------

    def stats(self) -> dict[str, Any]:
        return {
            "agent": self.agent_name,
            "section_cache_size": len(self._sections),
            "query_cache": self._query.cache_stats(),
        }

    def clear_cache(self) -> None:
        self._sections.clear()
        self._query.clear_cache()
