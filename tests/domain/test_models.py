"""Tests for domain models."""

import dataclasses

import pytest

from agentdocs.domain.models import (
    Collection,
    ConversionOutcome,
    ConversionRecord,
    ConversionReport,
    ConversionStats,
    LintFinding,
    LintReport,
    LintSeverity,
    MultiSectionLoad,
    SectionLoad,
    SyncResult,
    SyncStatus,
)


class TestSyncResult:
    def test_converted_to_dict(self) -> None:
        result = SyncResult(
            SyncStatus.CONVERTED,
            "ai-agents/qa_agent.md",
            json_file="machine-data/ai-agents-json/qa_agent.json",
            checksum="abc",
            file_size=42,
            duration_ms=3.14159,
            created=True,
        )

        assert result.to_dict() == {
            "status": "success",
            "source_file": "ai-agents/qa_agent.md",
            "duration": "3.1ms",
            "json_path": "machine-data/ai-agents-json/qa_agent.json",
            "checksum": "abc",
            "file_size": 42,
            "created": True,
        }

    def test_skipped_omits_unset_fields(self) -> None:
        data = SyncResult(SyncStatus.SKIPPED, "notes.txt", reason="not a markdown file").to_dict()

        assert data == {
            "status": "skipped",
            "source_file": "notes.txt",
            "duration": "0.0ms",
            "reason": "not a markdown file",
        }

    def test_is_immutable(self) -> None:
        result = SyncResult(SyncStatus.REMOVED, "a.md")

        with pytest.raises(dataclasses.FrozenInstanceError):
            result.status = SyncStatus.SKIPPED  # type: ignore[misc]


class TestConversionStats:
    """Tests for aggregating conversion records."""

    def _records(self) -> tuple[ConversionRecord, ...]:
        return (
            ConversionRecord("a.md", "a.json", ConversionOutcome.CREATED, 100, 20, 80.0),
            ConversionRecord("b.md", "b.json", ConversionOutcome.UPDATED, 100, 50, 50.0),
            ConversionRecord("c.md", "c.json", ConversionOutcome.SKIPPED),
            ConversionRecord("d.md", "d.json", ConversionOutcome.ERROR, error="boom"),
        )

    def test_counts_and_average(self) -> None:
        stats = ConversionStats.from_records(self._records())

        assert stats == ConversionStats(
            processed=4, created=1, updated=1, skipped=1, errors=1, average_reduction=65.0
        )

    def test_average_ignores_skipped_and_errors(self) -> None:
        records = self._records()[2:]

        assert ConversionStats.from_records(records).average_reduction == 0.0

    def test_report_to_dict(self) -> None:
        report = ConversionReport(
            timestamp="2026-01-02T03:04:05+00:00",
            collections=("agents",),
            records=self._records(),
            index_updates=3,
        )

        data = report.to_dict()

        assert data["collections"] == ["agents"]
        assert data["stats"]["average_token_reduction"] == 65.0
        assert data["stats"]["index_updates"] == 3
        assert data["files"][0] == {
            "source": "a.md",
            "json": "a.json",
            "outcome": "created",
            "full_md_tokens": 100,
            "estimated_tokens": 20,
            "token_reduction": 80.0,
        }
        assert data["files"][3]["error"] == "boom"


class TestLoads:
    def test_total_tokens(self) -> None:
        load = MultiSectionLoad(
            sections={
                "a.md#x": SectionLoad("a.md#x", "X", "## X", 2),
                "a.md#y": SectionLoad("a.md#y", "Y", "## Y\n\nbody", 5),
            },
            errors={"a.md#z": "Section 'z' not found"},
        )

        assert load.total_tokens == 7

    def test_collection_defaults_to_general(self) -> None:
        collection = Collection("notes", "notes", "out/notes")

        assert collection.kind.value == "general"


class TestLintReport:
    def test_ok_with_only_warnings(self) -> None:
        report = LintReport(
            findings=(LintFinding("stale-json", LintSeverity.WARNING, "a.md", "stale"),),
            documents_checked=1,
        )

        assert report.ok
        assert len(report.warnings) == 1
        assert report.errors == ()

    def test_error_fails(self) -> None:
        error = LintFinding("broken-link", LintSeverity.ERROR, "a.md", "missing", line=3)
        report = LintReport(findings=(error,), documents_checked=1)

        assert not report.ok
        assert report.errors == (error,)
