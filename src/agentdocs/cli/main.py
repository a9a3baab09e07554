#!/usr/bin/env python3
"""
agentdocs command line.

Usage:
    agentdocs sync ai-agents/research_agent.md
    agentdocs convert --collection agents --force
    agentdocs query "research_agent.json#/meta/title"
    agentdocs section "ai-agents/research_agent.md#workflows"
    agentdocs context prd_agent --from research_agent --from testing_agent
    agentdocs lint --json
    agentdocs stream tail -n 20

Editor hooks call ``sync`` with the edited file in ``FILE_PATH``; agents
identify themselves through ``ACTIVE_AGENT``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import click

from agentdocs import __version__
from agentdocs.application import (
    CONTEXT_BUNDLES,
    AgentContextLoader,
    CorpusLinter,
    DocumentQueryService,
    DocumentSyncService,
    StreamEmitter,
)
from agentdocs.cli.config import CorpusConfig, load_config
from agentdocs.cli.console import (
    print_conversion_report,
    print_error,
    print_events,
    print_lint_report,
    print_stream_stats,
    print_success,
)
from agentdocs.cli.logging_setup import setup_logging
from agentdocs.cli.options import json_option, reports_errors
from agentdocs.domain.exceptions import ConfigurationError
from agentdocs.domain.layout import CorpusLayout
from agentdocs.domain.models import ContextLevel
from agentdocs.domain.stream_event import StreamEventType, event_to_dict
from agentdocs.infrastructure import FilesystemDocumentStore, FilesystemEventStream, RuleRegistry
from agentdocs.rules import BUILTIN_RULES
from agentdocs.schemas import SCHEMA_FILES, iter_errors

logger = logging.getLogger("agentdocs.cli")

SYNC_AGENT = "document_manager_agent"


@dataclass
class AppContext:
    """Objects shared by every command of one invocation."""

    config: CorpusConfig
    layout: CorpusLayout
    store: FilesystemDocumentStore

    def stream(self) -> FilesystemEventStream:
        return FilesystemEventStream(self.config.root / self.config.streams_dir)

    def sync_service(self, emit: bool = True) -> DocumentSyncService:
        emitter = StreamEmitter(self.stream(), SYNC_AGENT) if emit else None
        return DocumentSyncService(self.layout, self.store, emitter=emitter)

    def query_service(self) -> DocumentQueryService:
        return DocumentQueryService(self.layout, self.store, ttl=self.config.cache_ttl_seconds)

    def loader(self, agent: str) -> AgentContextLoader:
        return AgentContextLoader(
            agent,
            self.query_service(),
            self.store,
            self.layout,
            section_ttl=self.config.cache_ttl_seconds,
        )


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@click.group()
@click.option(
    "--root",
    envvar="AGENTDOCS_ROOT",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Corpus root directory (default: current directory)",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to agentdocs.json (default: <root>/agentdocs.json)",
)
@click.option("-v", "--verbose", count=True, help="Increase console logging (-v info, -vv debug)")
@click.option("--log-file", default=None, type=click.Path(), help="Path to log file")
@click.version_option(__version__, prog_name="agentdocs")
@click.pass_context
def cli(
    ctx: click.Context,
    root: Path,
    config_path: Path | None,
    verbose: int,
    log_file: str | None,
) -> None:
    """Keep markdown agent corpora and their JSON summaries in step."""
    root = root.resolve()
    try:
        config = load_config(root, config_path)
    except ConfigurationError as e:
        print_error(str(e), "Check that agentdocs.json is valid JSON with known keys.")
        ctx.exit(1)

    setup_logging(verbose, log_file or config.log_file)
    logger.debug("Corpus root: %s", root)
    ctx.obj = AppContext(
        config=config,
        layout=config.layout(),
        store=FilesystemDocumentStore(root),
    )


# =============================================================================
# SYNCHRONISATION
# =============================================================================


@cli.command()
@click.argument("files", nargs=-1, envvar="FILE_PATH")
@click.option("--no-events", is_flag=True, help="Do not publish document_sync events")
@click.pass_obj
@reports_errors
def sync(app: AppContext, files: tuple[str, ...], no_events: bool) -> None:
    """Bring the JSON mirror of each FILE up to date (one JSON result per line)."""
    if not files:
        raise click.UsageError("No files given and FILE_PATH is not set")
    service = app.sync_service(emit=not no_events)
    for path in files:
        result = service.sync_file(path)
        click.echo(json.dumps(result.to_dict()))


@cli.command()
@click.option(
    "--collection",
    "collections",
    multiple=True,
    help="Collection to convert (repeatable, default: all)",
)
@click.option("--force", is_flag=True, help="Regenerate summaries even when unchanged")
@click.option(
    "--update-index/--no-update-index",
    default=False,
    help="Repoint references in the index document to the JSON mirrors",
)
@click.option("--report/--no-report", default=True, help="Write a conversion report")
@json_option
@click.pass_obj
@reports_errors
def convert(
    app: AppContext,
    collections: tuple[str, ...],
    force: bool,
    update_index: bool,
    report: bool,
    as_json: bool,
) -> None:
    """Convert whole collections of markdown documents."""
    for name in collections:
        app.layout.get(name)

    service = app.sync_service(emit=False)
    result = service.convert_all(
        collections or None,
        force=force,
        index_file=app.config.index_file if update_index else None,
    )
    report_path = service.write_report(result, app.config.reports_dir) if report else None

    if as_json:
        _echo_json({**result.to_dict(), "report_path": report_path})
    else:
        print_conversion_report(result, report_path)
    if result.stats.errors:
        raise click.exceptions.Exit(1)


@cli.command()
@click.option("--collection", default=None, help="Only prune this collection")
@click.pass_obj
@reports_errors
def prune(app: AppContext, collection: str | None) -> None:
    """Delete JSON mirrors whose markdown source is gone."""
    removed = app.sync_service(emit=False).prune_orphans(collection)
    for path in removed:
        click.echo(path)
    print_success(f"Removed {len(removed)} orphaned JSON files")


# =============================================================================
# QUERIES AND CONTEXT
# =============================================================================


@cli.command()
@click.argument("query_path", metavar="QUERY")
@click.option("--no-fallback", is_flag=True, help="Do not fall back to the markdown source")
@click.pass_obj
@reports_errors
def query(app: AppContext, query_path: str, no_fallback: bool) -> None:
    """Print the value QUERY (``file.json#/path``) resolves to."""
    value = app.query_service().query(query_path, allow_markdown_fallback=not no_fallback)
    if value is None:
        print_error(f"No data found for '{query_path}'")
        raise click.exceptions.Exit(1)
    _echo_json(value)


@cli.command()
@click.argument("reference")
@json_option
@click.pass_obj
@reports_errors
def section(app: AppContext, reference: str, as_json: bool) -> None:
    """Print the markdown section REFERENCE (``file.md#anchor``) points at."""
    load = app.loader("cli").load_section(reference)
    if as_json:
        _echo_json(asdict(load))
    else:
        click.echo(load.content)
        logger.info("%s: %d tokens", load.heading, load.tokens)


@cli.command()
@click.argument("agent", envvar="ACTIVE_AGENT")
@click.option(
    "--level",
    type=click.Choice([level.value for level in ContextLevel]),
    default=ContextLevel.MINIMAL.value,
    show_default=True,
    help="Progressive level of the agent's own summary",
)
@click.option("--from", "sources", multiple=True, help="Source agent to load context from")
@click.option("--bundle", type=click.Choice(list(CONTEXT_BUNDLES)), help="Named set of sources")
@click.option("--limit", type=int, default=None, help="Context size limit in bytes")
@click.option("--no-fallback", is_flag=True, help="Fail instead of reading markdown")
@click.pass_obj
@reports_errors
def context(
    app: AppContext,
    agent: str,
    level: str,
    sources: tuple[str, ...],
    bundle: str | None,
    limit: int | None,
    no_fallback: bool,
) -> None:
    """
    Print context for AGENT.

    With --from or --bundle, loads critical-first context from other agents;
    otherwise prints AGENT's own summary at --level.
    """
    loader = app.loader(agent)
    if sources or bundle:
        selected = list(sources) + list(CONTEXT_BUNDLES[bundle] if bundle else ())
        result = loader.load_optimized(
            list(dict.fromkeys(selected)),
            context_limit=limit or app.config.context_limit,
            allow_markdown_fallback=not no_fallback,
        )
        _echo_json({"method": result.method, "data": result.data, "metrics": result.metrics})
        return

    summary = app.query_service().agent_summary(agent)
    if summary is None:
        print_error(f"No JSON summary for agent '{agent}'", "Run 'agentdocs convert' first.")
        raise click.exceptions.Exit(1)
    _echo_json(loader.load_progressive(summary, level))


# =============================================================================
# LINTING AND VALIDATION
# =============================================================================


@cli.command()
@click.option("--rule", "rule_names", multiple=True, help="Rule to run (repeatable, default: all)")
@json_option
@click.pass_obj
@reports_errors
def lint(app: AppContext, rule_names: tuple[str, ...], as_json: bool) -> None:
    """Check links, agent mentions, structure and JSON mirrors."""
    for rule_class in BUILTIN_RULES:
        RuleRegistry.register(rule_class.name, rule_class)
    names = rule_names or RuleRegistry.available()
    rules = [RuleRegistry.create(name) for name in names]

    linter = CorpusLinter(app.layout, app.store, rules, extra_documents=[app.config.index_file])
    report = linter.lint()
    if as_json:
        _echo_json(
            {
                "documents_checked": report.documents_checked,
                "errors": len(report.errors),
                "warnings": len(report.warnings),
                "findings": [
                    {**asdict(f), "severity": f.severity.value} for f in report.findings
                ],
            }
        )
    else:
        print_lint_report(report)
    if not report.ok:
        raise click.exceptions.Exit(1)


@cli.command()
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--kind", type=click.Choice(list(SCHEMA_FILES)), required=True)
@click.pass_obj
@reports_errors
def validate(app: AppContext, file: Path, kind: str) -> None:
    """Validate a JSON FILE (relative to --root) against a bundled schema."""
    path = app.config.root / file
    if not path.is_file():
        raise click.BadParameter(f"File '{file}' does not exist.", param_hint="FILE")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        print_error(f"{file} is not valid JSON: {e}")
        raise click.exceptions.Exit(1) from e

    errors = iter_errors(kind, data)
    if errors:
        for error in errors:
            click.echo(error)
        print_error(f"{file}: {len(errors)} schema violations ({kind})")
        raise click.exceptions.Exit(1)
    print_success(f"{file} is a valid {kind}")


# =============================================================================
# EVENT STREAMS
# =============================================================================


@cli.group()
def stream() -> None:
    """Inspect and publish inter-agent stream events."""


@stream.command()
@click.option("--prefix", default="events", show_default=True, help="Segment prefix (agent name)")
@click.option("-n", "--max-events", default=20, show_default=True, help="Events to show")
@json_option
@click.pass_obj
@reports_errors
def tail(app: AppContext, prefix: str, max_events: int, as_json: bool) -> None:
    """Show the latest events."""
    events = app.stream().read_latest(prefix, max_events)
    if as_json:
        _echo_json([event_to_dict(e) for e in events])
    else:
        print_events(events)


@stream.command()
@json_option
@click.pass_obj
def stats(app: AppContext, as_json: bool) -> None:
    """Count events by type and agent."""
    result = app.stream().stats()
    if as_json:
        _echo_json(asdict(result))
    else:
        print_stream_stats(result)


@stream.command()
@click.option("--days", type=int, default=None, help="Days of segments to keep")
@click.pass_obj
def cleanup(app: AppContext, days: int | None) -> None:
    """Delete stream segments older than the retention period."""
    removed = app.stream().cleanup(days if days is not None else app.config.stream_retention_days)
    for name in removed:
        click.echo(name)
    print_success(f"Removed {len(removed)} stream files")


@stream.command()
@click.argument("event_type", type=click.Choice([t.value for t in StreamEventType]))
@click.option("--from", "from_agent", envvar="ACTIVE_AGENT", required=True, help="Sending agent")
@click.option("--to", "to_agent", default=None, help="Receiving agent")
@click.option("--qualifier", default=None, help="Coordination, alert or metric type")
@click.option("--data", "raw_data", default="{}", help="Event payload as a JSON object")
@click.pass_obj
@reports_errors
def emit(
    app: AppContext,
    event_type: str,
    from_agent: str,
    to_agent: str | None,
    qualifier: str | None,
    raw_data: str,
) -> None:
    """Publish one EVENT_TYPE event and print its id."""
    try:
        data = json.loads(raw_data)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--data") from e
    if not isinstance(data, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--data")

    event = StreamEmitter(app.stream(), from_agent).emit(
        StreamEventType(event_type), data, to_agent=to_agent, qualifier=qualifier
    )
    click.echo(event.event_id)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
