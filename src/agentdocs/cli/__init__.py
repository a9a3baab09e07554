"""
Command line interface for agentdocs.

Entry point: ``agentdocs`` (see ``agentdocs.cli.main``).
"""

from agentdocs.cli.config import CONFIG_FILE, CorpusConfig, load_config
from agentdocs.cli.logging_setup import setup_logging

__all__ = ["CONFIG_FILE", "CorpusConfig", "load_config", "setup_logging"]
