"""Document summaries for general (non-agent) documentation."""

import hashlib
import json
from pathlib import PurePosixPath
from typing import Any

from agentdocs.domain.markdown import (
    determine_document_type,
    determine_usage_context,
    estimate_tokens,
    extract_key_points,
    extract_sections,
    extract_summary,
    first_heading,
)

DOCUMENT_SCHEMA_VERSION = "1.0.0"
TOKENS_PER_SECTION = 50


def content_hash(text: str) -> str:
    """md5 of the markdown source, stored as ``meta.file_hash``."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def build_document_json(
    text: str,
    *,
    source_file: str,
    file_hash: str,
    timestamp: str,
) -> dict[str, Any]:
    """
    Build the JSON summary of a general markdown document.

    Args:
        text: Markdown source
        source_file: Root-relative path of the markdown file
        file_hash: ``content_hash(text)``
        timestamp: ISO timestamp recorded in ``meta``

    Returns:
        Summary dict (see ``document.schema.json``)
    """
    path = PurePosixPath(source_file)
    sections, section_details = extract_sections(text, source_file)
    summary = extract_summary(text)
    key_points = extract_key_points(text)
    heading = first_heading(text)

    summary_tokens = estimate_tokens(summary) + estimate_tokens(json.dumps(key_points))
    return {
        "meta": {
            "document": path.stem,
            "title": heading.title if heading else path.stem,
            "timestamp": timestamp,
            "version": DOCUMENT_SCHEMA_VERSION,
            "source_file": source_file,
            "document_type": determine_document_type(path.name, text),
            "file_hash": file_hash,
            "estimated_tokens": summary_tokens + TOKENS_PER_SECTION * len(sections),
            "full_md_tokens": estimate_tokens(text),
        },
        "summary": summary,
        "sections": sections,
        "key_points": key_points,
        "usage_context": determine_usage_context(text),
        "section_details": section_details,
    }


def token_reduction(summary: dict[str, Any]) -> float:
    """Percentage of tokens saved by loading the summary instead of the markdown."""
    meta = summary.get("meta", {})
    full = meta.get("full_md_tokens") or 0
    if full <= 0:
        return 0.0
    estimated = meta.get("estimated_tokens") or 0
    return round((full - estimated) / full * 100, 1)
