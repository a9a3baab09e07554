"""Tests for the agentdocs command line."""

import json

import pytest
from click.testing import CliRunner

from agentdocs import __version__
from agentdocs.cli.main import cli


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("AGENTDOCS_ROOT", "ACTIVE_AGENT", "FILE_PATH"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def invoke(runner, corpus_root):
    """Run the CLI against the sample corpus."""

    def run(*args: str, env: dict[str, str] | None = None):
        return runner.invoke(cli, ["--root", str(corpus_root), *args], env=env)

    return run


@pytest.fixture
def converted(invoke):
    result = invoke("convert", "--no-report")
    assert result.exit_code == 0, result.output
    return invoke


class TestGroup:
    def test_version(self, runner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_invalid_config(self, invoke, corpus_root) -> None:
        (corpus_root / "agentdocs.json").write_text('{"bogus": 1}')

        result = invoke("lint")

        assert result.exit_code == 1
        assert "Unknown keys" in result.stderr

    def test_root_from_environment(self, runner, corpus_root) -> None:
        result = runner.invoke(
            cli, ["query", "research_agent.json"], env={"AGENTDOCS_ROOT": str(corpus_root)}
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout)["meta"]["source"] == "markdown_fallback"


class TestSync:
    """Tests for the sync command."""

    def test_sync_file(self, invoke, corpus_root) -> None:
        result = invoke("sync", "ai-agents/research_agent.md")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["status"] == "success"
        assert (corpus_root / data["json_path"]).exists()

    def test_file_from_environment(self, invoke) -> None:
        result = invoke("sync", env={"FILE_PATH": "aaa-documents/setup-guide.md"})

        assert json.loads(result.stdout)["json_path"] == (
            "machine-data/aaa-documents-json/setup-guide.json"
        )

    def test_one_line_per_file(self, invoke) -> None:
        result = invoke("sync", "notes.txt", "ai-agents/research_agent.md")

        lines = [json.loads(line) for line in result.stdout.splitlines()]
        assert [line["status"] for line in lines] == ["skipped", "success"]

    def test_no_files(self, invoke) -> None:
        assert invoke("sync").exit_code == 2

    def test_sync_publishes_event(self, invoke) -> None:
        invoke("sync", "ai-agents/research_agent.md")

        result = invoke("stream", "tail", "--json")

        events = json.loads(result.stdout)
        assert [e["event"] for e in events] == ["document_sync"]
        assert events[0]["from"] == "document_manager_agent"

    def test_no_events(self, invoke) -> None:
        invoke("sync", "--no-events", "ai-agents/research_agent.md")

        assert json.loads(invoke("stream", "tail", "--json").stdout) == []


class TestConvert:
    def test_convert_json(self, invoke, corpus_root) -> None:
        result = invoke("convert", "--json")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["stats"]["processed"] == 4
        assert data["stats"]["created"] == 4
        assert (corpus_root / data["report_path"]).exists()

    def test_convert_table(self, invoke) -> None:
        result = invoke("convert", "--no-report", "--collection", "system-docs")

        assert result.exit_code == 0
        assert "aaa-documents/setup-guide.md" in result.stdout

    def test_unknown_collection(self, invoke) -> None:
        result = invoke("convert", "--collection", "nope")

        assert result.exit_code == 1
        assert "Collection 'nope' not found" in result.stderr

    def test_update_index(self, invoke, corpus_root) -> None:
        result = invoke("convert", "--no-report", "--update-index", "--json")

        assert json.loads(result.stdout)["stats"]["index_updates"] == 2
        assert "machine-data/ai-agents-json/research_agent.json" in (
            corpus_root / "CLAUDE.md"
        ).read_text()

    def test_prune(self, converted, corpus_root) -> None:
        orphan = corpus_root / "machine-data" / "aaa-documents-json" / "gone.json"
        orphan.write_text("{}")

        result = converted("prune")

        assert result.exit_code == 0
        assert "machine-data/aaa-documents-json/gone.json" in result.stdout
        assert not orphan.exists()


class TestQueries:
    """Tests for query, section and context."""

    def test_query(self, converted) -> None:
        result = converted("query", "research_agent.json#/meta/title")

        assert json.loads(result.stdout) == "Research Agent"

    def test_query_not_found(self, converted) -> None:
        result = converted("query", "research_agent.json#/nope")

        assert result.exit_code == 1
        assert "No data found" in result.stderr

    def test_query_without_fallback(self, invoke) -> None:
        assert invoke("query", "--no-fallback", "research_agent.json").exit_code == 1

    def test_section(self, invoke) -> None:
        result = invoke("section", "ai-agents/research_agent.md#workflows")

        assert result.exit_code == 0
        assert result.stdout.startswith("## Workflows")

    def test_section_json(self, invoke) -> None:
        result = invoke("section", "--json", "ai-agents/research_agent.md#agent-coordination")

        data = json.loads(result.stdout)
        assert data["heading"] == "Agent Coordination"
        assert data["cached"] is False

    def test_section_not_found(self, invoke) -> None:
        result = invoke("section", "ai-agents/research_agent.md#nope")

        assert result.exit_code == 1
        assert "Section 'nope' not found" in result.stderr

    def test_progressive_context(self, converted) -> None:
        result = converted("context", "research_agent", "--level", "standard")

        data = json.loads(result.stdout)
        assert data["_context_metadata"]["level"] == "standard"
        assert "workflows" in data

    def test_agent_from_environment(self, converted) -> None:
        result = converted("context", env={"ACTIVE_AGENT": "project_manager_agent"})

        assert json.loads(result.stdout)["meta"]["agent"] == "project_manager_agent"

    def test_optimized_context(self, converted) -> None:
        result = converted("context", "project_manager_agent", "--from", "research_agent")

        data = json.loads(result.stdout)
        assert data["method"] == "json_optimized"
        assert "research_agent" in data["data"]["critical"]

    def test_bundle_context(self, converted) -> None:
        result = converted("context", "research_agent", "--bundle", "orchestration")

        assert json.loads(result.stdout)["data"]["metadata"]["sources"] == [
            "project_manager_agent",
            "scrum_master_agent",
            "document_manager_agent",
        ]

    def test_unknown_agent(self, converted) -> None:
        result = converted("context", "ghost_agent")

        assert result.exit_code == 1
        assert "No JSON summary" in result.stderr


class TestLint:
    def test_clean_corpus(self, converted) -> None:
        result = converted("lint", "--json")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["documents_checked"] == 6
        assert data["findings"] == []

    def test_broken_link_fails(self, converted, corpus_root) -> None:
        (corpus_root / "aaa-documents" / "extra.md").write_text("# Extra\n\n[x](missing.md)\n")

        result = converted("lint", "--rule", "broken-link", "--json")

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["errors"] == 1
        assert data["findings"][0] == {
            "rule": "broken-link",
            "severity": "error",
            "path": "aaa-documents/extra.md",
            "message": "Link target 'missing.md' does not exist",
            "line": 3,
        }

    def test_unknown_rule(self, invoke) -> None:
        result = invoke("lint", "--rule", "nope")

        assert result.exit_code == 1
        assert "Lint rule 'nope' not found" in result.stderr


class TestValidate:
    def test_valid_file(self, invoke, tmp_path) -> None:
        path = tmp_path / "handoff.json"
        path.write_text(json.dumps({"meta": {"agent": "research_agent"}, "summary": "Done"}))

        result = invoke("validate", str(path), "--kind", "handoff")

        assert result.exit_code == 0

    def test_schema_violations(self, invoke, tmp_path) -> None:
        path = tmp_path / "handoff.json"
        path.write_text(json.dumps({"meta": {"agent": "research_agent"}}))

        result = invoke("validate", str(path), "--kind", "handoff")

        assert result.exit_code == 1
        assert "(root): 'summary' is a required property" in result.stdout

    def test_not_json(self, invoke, tmp_path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{")

        assert invoke("validate", str(path), "--kind", "agent").exit_code == 1

    def test_generated_summary(self, converted, corpus_root) -> None:
        path = corpus_root / "machine-data" / "ai-agents-json" / "research_agent.json"

        assert converted("validate", str(path), "--kind", "agent").exit_code == 0

    def test_relative_to_root(self, converted) -> None:
        result = converted(
            "validate", "machine-data/ai-agents-json/research_agent.json", "--kind", "agent"
        )

        assert result.exit_code == 0

    def test_missing_file(self, invoke) -> None:
        result = invoke("validate", "nope.json", "--kind", "agent")

        assert result.exit_code == 2
        assert "does not exist" in result.stderr


class TestStream:
    """Tests for the stream subcommands."""

    def _emit(self, invoke, *extra: str):
        return invoke(
            "stream",
            "emit",
            "alert",
            "--from",
            "research_agent",
            "--to",
            "project_manager_agent",
            "--qualifier",
            "blocker",
            *extra,
        )

    def test_emit_and_tail(self, invoke) -> None:
        emitted = self._emit(invoke, "--data", '{"message": "API down"}')

        result = invoke("stream", "tail", "--prefix", "project_manager_agent", "--json")

        events = json.loads(result.stdout)
        assert events[0]["event_id"] == emitted.stdout.strip()
        assert events[0]["alert_type"] == "blocker"
        assert events[0]["data"] == {"message": "API down"}

    def test_tail_table(self, invoke) -> None:
        self._emit(invoke)

        result = invoke("stream", "tail")

        assert result.exit_code == 0
        assert "research_agent" in result.stdout

    def test_stats(self, invoke) -> None:
        self._emit(invoke)
        self._emit(invoke)

        data = json.loads(invoke("stream", "stats", "--json").stdout)

        assert data["total_events"] == 2
        assert data["by_type"] == {"alert": 2}

    @pytest.mark.parametrize("raw", ["{broken", "[1, 2]"])
    def test_bad_data(self, invoke, raw: str) -> None:
        result = self._emit(invoke, "--data", raw)

        assert result.exit_code == 2
        assert "--data" in result.stderr

    def test_recipient_outside_streams(self, invoke, corpus_root) -> None:
        result = invoke(
            "stream", "emit", "alert", "--from", "research_agent", "--to", "../../../escaped"
        )

        assert result.exit_code == 1
        assert "Invalid agent name" in result.stderr
        assert not list(corpus_root.parent.glob("escaped-*.jsonl"))
        assert not list(corpus_root.rglob("escaped-*.jsonl"))

    def test_tail_bad_prefix(self, invoke) -> None:
        result = invoke("stream", "tail", "--prefix", "../events")

        assert result.exit_code == 1
        assert "Invalid agent name" in result.stderr

    def test_sender_required(self, invoke) -> None:
        assert invoke("stream", "emit", "alert").exit_code == 2

    def test_sender_from_environment(self, invoke) -> None:
        result = invoke("stream", "emit", "progress_update", env={"ACTIVE_AGENT": "qa_agent"})

        assert result.exit_code == 0

    def test_cleanup_keeps_recent(self, invoke) -> None:
        self._emit(invoke)

        result = invoke("stream", "cleanup", "--days", "30")

        assert result.exit_code == 0
        assert "Removed 0 stream files" in result.stdout
