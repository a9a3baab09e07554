"""
Filesystem implementation of the document store.

Reads markdown from, and writes JSON mirrors into, a corpus directory.
"""

import json
import logging
from pathlib import Path
from typing import Any

from agentdocs.domain.interfaces import DocumentStoreInterface

logger = logging.getLogger(__name__)


class FilesystemDocumentStore(DocumentStoreInterface):
    """
    Document store rooted at a corpus directory.

    JSON files are written to a temporary sibling and renamed into place so
    readers never observe a half-written summary.
    """

    def __init__(self, root: Path | str):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, path: str) -> Path:
        return self._root / path

    def read_text(self, path: str) -> str | None:
        file_path = self._path(path)
        if not file_path.is_file():
            return None
        # Undecodable bytes become U+FFFD
        return file_path.read_text(encoding="utf-8", errors="replace")

    def write_text(self, path: str, text: str) -> None:
        file_path = self._path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(text, encoding="utf-8")

    def read_json(self, path: str) -> Any:
        text = self.read_text(path)
        if text is None:
            return None
        return json.loads(text)

    def write_json(self, path: str, data: Any) -> None:
        file_path = self._path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = file_path.with_suffix(file_path.suffix + ".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        temp_path.replace(file_path)

    def exists(self, path: str) -> bool:
        return self._path(path).exists()

    def remove(self, path: str, prune_until: str | None = None) -> bool:
        file_path = self._path(path)
        if not file_path.is_file():
            return False
        file_path.unlink()
        if prune_until is not None:
            self._prune_empty_dirs(file_path.parent, self._path(prune_until))
        return True

    def _prune_empty_dirs(self, directory: Path, stop: Path) -> None:
        """Remove emptied directories bottom-up, never ``stop`` or above it."""
        stop = stop.resolve()
        current = directory.resolve()
        while current != stop and current.is_relative_to(stop):
            if any(current.iterdir()):
                return
            current.rmdir()
            logger.debug("Removed empty directory %s", current)
            current = current.parent

    def list_files(self, directory: str, suffix: str) -> list[str]:
        base = self._path(directory)
        if not base.is_dir():
            return []
        return sorted(
            p.relative_to(self._root).as_posix()
            for p in base.rglob(f"*{suffix}")
            if p.is_file()
        )
