"""
In-memory implementation of the document store.

Useful for testing and for converting documents that never touch disk.
"""

import json
from pathlib import PurePosixPath
from typing import Any

from agentdocs.domain.interfaces import DocumentStoreInterface


class InMemoryDocumentStore(DocumentStoreInterface):
    """
    Simple dict-backed store for testing.

    Files may be seeded as raw bytes; they are decoded like files on disk.
    """

    def __init__(self, files: dict[str, str | bytes] | None = None) -> None:
        self._files: dict[str, str | bytes] = dict(files or {})

    def read_text(self, path: str) -> str | None:
        content = self._files.get(path)
        if isinstance(content, bytes):
            return content.decode("utf-8", errors="replace")
        return content

    def write_text(self, path: str, text: str) -> None:
        self._files[path] = text

    def read_json(self, path: str) -> Any:
        text = self.read_text(path)
        return None if text is None else json.loads(text)

    def write_json(self, path: str, data: Any) -> None:
        self._files[path] = json.dumps(data, indent=2, ensure_ascii=False)

    def exists(self, path: str) -> bool:
        prefix = path.rstrip("/") + "/"
        return path in self._files or any(p.startswith(prefix) for p in self._files)

    def remove(self, path: str, prune_until: str | None = None) -> bool:
        # Directories only exist through their files, so pruning is implicit
        return self._files.pop(path, None) is not None

    def list_files(self, directory: str, suffix: str) -> list[str]:
        base = PurePosixPath(directory)
        return sorted(
            p
            for p in self._files
            if p.endswith(suffix) and PurePosixPath(p).is_relative_to(base)
        )
