"""
Corpus layout: where markdown lives and where its JSON mirrors go.

All paths handed out by the layout are root-relative POSIX strings so that
stores, references and reports agree on a single spelling of every file.
"""

from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from agentdocs.domain.models import Collection, DocumentKind

DEFAULT_COLLECTIONS: tuple[Collection, ...] = (
    Collection("agents", "ai-agents", "machine-data/ai-agents-json", DocumentKind.AGENT),
    Collection("system-docs", "aaa-documents", "machine-data/aaa-documents-json"),
    Collection(
        "project-docs", "project-documents", "machine-data/project-documents-json"
    ),
)

EXCLUDED_DIRS = frozenset({"node_modules", ".git", "machine-data"})


def normalize_agent_id(name: str) -> str:
    """``"Research Agent"`` / ``"research-agent"`` -> ``"research_agent"``."""
    return "_".join(name.strip().lower().replace("-", " ").split())


def _is_under(path: str, directory: str) -> bool:
    return path == directory or path.startswith(directory.rstrip("/") + "/")


class CorpusLayout:
    """Maps markdown sources to JSON mirrors for a set of collections."""

    def __init__(
        self,
        root: Path | str,
        collections: Iterable[Collection] = DEFAULT_COLLECTIONS,
    ) -> None:
        self.root = Path(root)
        self.collections: dict[str, Collection] = {c.name: c for c in collections}

    def relative(self, path: Path | str) -> str:
        """Return ``path`` as a POSIX path relative to the corpus root.

        Absolute paths outside the root are returned unchanged (normalised).
        """
        text = str(path).replace("\\", "/")
        posix = PurePosixPath(text)
        root = PurePosixPath(self.root.as_posix())
        if posix.is_absolute():
            if posix.is_relative_to(root):
                return posix.relative_to(root).as_posix()
            return posix.as_posix()
        rel = posix.as_posix()
        return "" if rel == "." else rel

    def absolute(self, rel_path: str) -> Path:
        return self.root / rel_path

    def get(self, name: str) -> Collection:
        """
        Args:
            name: Collection identifier

        Raises:
            KeyError: If no collection has that name
        """
        if name not in self.collections:
            available = ", ".join(self.collections) or "(none)"
            raise KeyError(f"Collection '{name}' not found. Available: {available}")
        return self.collections[name]

    def agent_collection(self) -> Collection | None:
        for collection in self.collections.values():
            if collection.kind is DocumentKind.AGENT:
                return collection
        return None

    def collection_for(self, path: Path | str) -> Collection | None:
        """Collection whose source directory contains ``path``."""
        rel = self.relative(path)
        for collection in self.collections.values():
            if _is_under(rel, collection.source_dir):
                return collection
        return None

    def collection_for_output(self, path: Path | str) -> Collection | None:
        """Collection whose output directory contains ``path``."""
        rel = self.relative(path)
        for collection in self.collections.values():
            if _is_under(rel, collection.output_dir):
                return collection
        return None

    def is_convertible(self, path: Path | str) -> bool:
        rel = PurePosixPath(self.relative(path))
        if rel.suffix != ".md" or rel.name.upper().startswith("README"):
            return False
        return not any(part in EXCLUDED_DIRS for part in rel.parts)

    def json_path_for(self, md_path: Path | str) -> str:
        """Root-relative JSON mirror of a markdown document.

        Raises:
            ValueError: If the path is outside every collection
        """
        rel = self.relative(md_path)
        collection = self.collection_for(rel)
        if collection is None:
            raise ValueError(f"{rel} is outside conversion directories")
        inner = PurePosixPath(rel).relative_to(collection.source_dir)
        return (PurePosixPath(collection.output_dir) / inner).with_suffix(".json").as_posix()

    def md_path_for(self, json_path: Path | str) -> str:
        """Root-relative markdown source of a JSON mirror.

        Raises:
            ValueError: If the path is outside every output directory
        """
        rel = self.relative(json_path)
        collection = self.collection_for_output(rel)
        if collection is None:
            raise ValueError(f"{rel} is outside JSON output directories")
        inner = PurePosixPath(rel).relative_to(collection.output_dir)
        return (PurePosixPath(collection.source_dir) / inner).with_suffix(".md").as_posix()

    def resolve_json_reference(self, file_ref: str) -> str:
        """Turn the file part of a query into a root-relative JSON path.

        Bare file names resolve inside the agents collection; markdown paths
        resolve to their mirrors.
        """
        ref = self.relative(file_ref.strip())
        if "/" not in ref:
            agents = self.agent_collection()
            if agents is None:
                return ref
            name = ref if ref.endswith(".json") else f"{PurePosixPath(ref).stem}.json"
            return f"{agents.output_dir}/{name}"
        if ref.endswith(".md") and self.collection_for(ref) is not None:
            return self.json_path_for(ref)
        return ref

    def agent_id_for(self, md_path: Path | str) -> str:
        return normalize_agent_id(PurePosixPath(self.relative(md_path)).stem)
