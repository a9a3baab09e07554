"""Configuration loading for the agentdocs CLI."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from agentdocs.domain.exceptions import ConfigurationError
from agentdocs.domain.layout import DEFAULT_COLLECTIONS, CorpusLayout
from agentdocs.domain.models import Collection, DocumentKind

CONFIG_FILE = "agentdocs.json"


@dataclass(frozen=True)
class CorpusConfig:
    """Settings for one corpus; file values are overridden by CLI options."""

    root: Path
    collections: tuple[Collection, ...] = DEFAULT_COLLECTIONS
    reports_dir: str = "machine-data/conversion-reports"
    streams_dir: str = "machine-data/project-documents-json"
    index_file: str = "CLAUDE.md"
    cache_ttl_seconds: float = 300.0
    context_limit: int = 50_000
    stream_retention_days: int = 30
    log_file: str | None = None

    def layout(self) -> CorpusLayout:
        return CorpusLayout(self.root, self.collections)


# key -> accepted types
_SETTINGS: dict[str, tuple[type, ...]] = {
    "reports_dir": (str,),
    "streams_dir": (str,),
    "index_file": (str,),
    "cache_ttl_seconds": (int, float),
    "context_limit": (int,),
    "stream_retention_days": (int,),
    "log_file": (str,),
}


def _require_field(data: dict[str, Any], field: str, name: str) -> str:
    """Extract a required string field from a collection entry.

    Raises:
        ConfigurationError: If field is missing or empty
    """
    value = data.get(field)
    if not value or not isinstance(value, str):
        raise ConfigurationError(
            f"{CONFIG_FILE}: collection '{name}' missing required field '{field}'"
        )
    return value.strip("/")


def _parse_collections(raw: Any) -> tuple[Collection, ...]:
    if not isinstance(raw, dict) or not raw:
        raise ConfigurationError(f"{CONFIG_FILE}: 'collections' must be a non-empty object")

    collections = []
    for name, entry in raw.items():
        if not isinstance(entry, dict):
            raise ConfigurationError(
                f"{CONFIG_FILE}: invalid collection '{name}': expected object"
            )
        kind = entry.get("kind", DocumentKind.GENERAL.value)
        try:
            document_kind = DocumentKind(kind)
        except ValueError as e:
            valid = ", ".join(k.value for k in DocumentKind)
            raise ConfigurationError(
                f"{CONFIG_FILE}: collection '{name}' has unknown kind '{kind}' (expected {valid})"
            ) from e
        collections.append(
            Collection(
                name=name,
                source_dir=_require_field(entry, "source", name),
                output_dir=_require_field(entry, "output", name),
                kind=document_kind,
            )
        )
    return tuple(collections)


def load_config(root: Path, config_path: Path | None = None) -> CorpusConfig:
    """
    Load corpus settings.

    Args:
        root: Corpus root directory
        config_path: Explicit config file (defaults to ``<root>/agentdocs.json``,
            which may be absent)

    Returns:
        CorpusConfig with defaults for every key the file does not set

    Raises:
        ConfigurationError: If the file is missing (when given explicitly),
            not valid JSON, or has unknown keys or wrongly typed values
    """
    path = config_path or root / CONFIG_FILE
    if not path.exists():
        if config_path is not None:
            raise ConfigurationError(f"Config file not found: {path}")
        return CorpusConfig(root=root)

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected dict in {path}, got {type(data).__name__}")

    unknown = sorted(set(data) - set(_SETTINGS) - {"collections"})
    if unknown:
        raise ConfigurationError(f"Unknown keys in {path}: {', '.join(unknown)}")

    settings: dict[str, Any] = {}
    for key, types in _SETTINGS.items():
        if key not in data:
            continue
        value = data[key]
        if isinstance(value, bool) or not isinstance(value, types):
            expected = " or ".join(t.__name__ for t in types)
            raise ConfigurationError(f"{path}: '{key}' must be {expected}")
        settings[key] = value

    if "collections" in data:
        settings["collections"] = _parse_collections(data["collections"])

    return CorpusConfig(root=root, **settings)
