"""Shared fixtures for architecture tests."""

import os

import pytest
from pytestarch import (
    EvaluableArchitecture,
    LayeredArchitecture,
    get_evaluable_architecture,
)


@pytest.fixture(scope="session")
def evaluable() -> EvaluableArchitecture:
    """Build evaluable architecture from src/agentdocs."""
    src_dir = os.path.abspath(
        os.path.join(os.path.dirname(__file__), "..", "..", "src")
    )
    project_path = os.path.join(src_dir, "agentdocs")
    return get_evaluable_architecture(src_dir, project_path)


@pytest.fixture(scope="session")
def layers() -> LayeredArchitecture:
    """Define the hexagonal layers plus the command line adapter.

    PyTestArch resolves module names relative to the source root,
    so modules appear as 'src.agentdocs.domain', etc.
    """
    return (
        LayeredArchitecture()
        .layer("domain")
        .containing_modules(["src.agentdocs.domain"])
        .layer("application")
        .containing_modules(["src.agentdocs.application"])
        .layer("infrastructure")
        .containing_modules(["src.agentdocs.infrastructure"])
        .layer("cli")
        .containing_modules(["src.agentdocs.cli"])
    )
