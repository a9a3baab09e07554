"""Path extraction over parsed JSON documents."""

from typing import Any, Final


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


def split_query(query_path: str) -> tuple[str, str]:
    """``"file.json#/a/0"`` -> ``("file.json", "/a/0")``; no fragment -> ``""``."""
    file_part, _, pointer = query_path.partition("#")
    return file_part, pointer


def _step(value: Any, part: str) -> Any:
    if isinstance(value, dict):
        return value.get(part, MISSING)
    if isinstance(value, list):
        try:
            index = int(part)
        except ValueError:
            return MISSING
        return value[index] if 0 <= index < len(value) else MISSING
    return MISSING


def extract_pointer(data: Any, pointer: str) -> Any:
    """
    Follow a slash path (``/workflows/available/0``) into ``data``.

    Returns:
        The value found, the whole document for ``""`` or ``"/"``, or None
        when any part is missing
    """
    parts = [p for p in pointer.split("/") if p]
    value = data
    for part in parts:
        value = _step(value, part)
        if value is MISSING:
            return None
    return value


def extract_dotted(data: Any, path: str) -> Any:
    """Follow a dotted path (``workflows.available``); ``MISSING`` when absent."""
    value = data
    for part in path.split("."):
        value = _step(value, part)
        if value is MISSING:
            return MISSING
    return value


def field_value(data: Any, field: str) -> Any:
    """Resolve a context-priority field, written either as a slash or dotted path."""
    pointer = field if "/" in field else field.replace(".", "/")
    return extract_pointer(data, pointer)
