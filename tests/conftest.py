"""Shared pytest fixtures for agentdocs tests."""

from datetime import UTC, datetime
from pathlib import Path

import pytest

from agentdocs.application.sync_service import DocumentSyncService
from agentdocs.domain.layout import CorpusLayout
from agentdocs.infrastructure.persistence.filesystem import FilesystemDocumentStore
from agentdocs.infrastructure.persistence.memory import InMemoryDocumentStore

RESEARCH_AGENT_MD = """\
# Research Agent - Market Intelligence Specialist

## Overview

The Research Agent gathers market data and competitive intelligence.
It hands validated findings to the **Project Manager Agent** for planning.

Second paragraph is not part of the summary.

## Core Responsibilities

### Market Analysis

Sizing markets and tracking trends.

### Competitive Intelligence

Profiling competitors and their positioning.

## Workflows

### Market Research Workflow

1. Define the research question
2. Collect sources

### Validation Workflow

Cross-check findings with a second source.

## Agent Coordination

### Inputs From

- **Project Manager Agent**: research priorities and deadlines

### Outputs To

- **Project Manager Agent**: market sizing report

## Context Optimization Priorities

### From Project Manager Agent

**Critical Data**
- `summary`
- `core_responsibilities/summary`

**Optional Data**
- `workflows.available`

## Reference Documentation

- **Research Methods**: `aaa-documents/setup-guide.md`

## Streaming Events

- `progress_update`
- `alert`

## Success Metrics

- Findings validated within one sprint
"""

PROJECT_MANAGER_MD = """\
# Project Manager Agent - Delivery Orchestrator

## Overview

Coordinates agents across the delivery lifecycle.

## Core Responsibilities

- **Sprint Planning**: turns research into sprint goals
- **Risk Tracking**: keeps the risk register current

## Workflows

### Sprint Planning Workflow

Plan the next sprint using research findings.

## Agent Coordination

### Inputs From

- **Research Agent**: market sizing report

### Outputs To

- **Research Agent**: research priorities

## Context Optimization Priorities

#### From Research Agent

**Critical Data**
- `summary`
- `capabilities`
- `coordination.outputs`

**Optional Data**
- `workflows/available`
- `reference_documentation`

## Clear Boundaries

Does not write code.
"""

AGENTS_README_MD = """\
# Agents

Index of agent documents.
"""

SETUP_GUIDE_MD = """\
# Setup Guide

## Overview

This guide explains how to prepare a workstation. Follow each step in order. \
Ask the **Research Agent** when a tool is missing. Nothing else is required.

## Key Features

- Reproducible development environment
- Automated dependency installation

## Installation

### Prerequisites

Python and git.

### Steps

Run the installer, then deploy to production.
"""

PRD_MD = """\
# Product Requirements

Requirements for the first release.

## Goals

See the [setup guide](../../aaa-documents/setup-guide.md#installation) before starting.

## API

The public API is versioned.
"""

INDEX_MD = """\
# Project Index

Agents live in "ai-agents/research_agent.md" and "ai-agents/project_manager_agent.md".
Read [the PRD](project-documents/planning/prd.md) first.
"""

CORPUS_FILES = {
    "ai-agents/research_agent.md": RESEARCH_AGENT_MD,
    "ai-agents/project_manager_agent.md": PROJECT_MANAGER_MD,
    "ai-agents/README.md": AGENTS_README_MD,
    "aaa-documents/setup-guide.md": SETUP_GUIDE_MD,
    "project-documents/planning/prd.md": PRD_MD,
    "CLAUDE.md": INDEX_MD,
}

FIXED_NOW = datetime(2025, 1, 15, 10, 30, tzinfo=UTC)


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def corpus_files() -> dict[str, str]:
    """Markdown sources of the sample corpus, keyed by root-relative path."""
    return dict(CORPUS_FILES)


@pytest.fixture
def corpus_root(tmp_path: Path, corpus_files: dict[str, str]) -> Path:
    """Sample corpus written to a temporary directory."""
    for rel, text in corpus_files.items():
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return tmp_path


@pytest.fixture
def layout(corpus_root: Path) -> CorpusLayout:
    return CorpusLayout(corpus_root)


@pytest.fixture
def fs_store(corpus_root: Path) -> FilesystemDocumentStore:
    return FilesystemDocumentStore(corpus_root)


@pytest.fixture
def memory_layout() -> CorpusLayout:
    return CorpusLayout("/corpus")


@pytest.fixture
def memory_store(corpus_files: dict[str, str]) -> InMemoryDocumentStore:
    """In-memory store holding the sample corpus (no JSON mirrors yet)."""
    return InMemoryDocumentStore(corpus_files)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def converted_store(
    memory_layout: CorpusLayout, memory_store: InMemoryDocumentStore
) -> InMemoryDocumentStore:
    """In-memory sample corpus with every JSON mirror generated."""
    service = DocumentSyncService(memory_layout, memory_store, clock=lambda: FIXED_NOW)
    report = service.convert_all()
    assert report.stats.errors == 0
    return memory_store
