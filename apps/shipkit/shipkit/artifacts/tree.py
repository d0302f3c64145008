"""Artifact tree snapshots.

An artifact tree is a directory of build outputs. Modules never walk it
directly: they take a glob-filtered snapshot of relative file paths and,
where contents matter, read every file into an immutable ArtifactEntry.
"""

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable

from shipkit.core.errors import ListingError

logger = logging.getLogger(__name__)

# Glob patterns used by the modules
FLATTEN_PATTERN = "*/*/*"
TOP_LEVEL_PATTERN = "*"
RECURSIVE_PATTERN = "**/*"


@dataclass(frozen=True)
class ArtifactEntry:
    """A file in an artifact tree: relative path segments plus contents."""

    path: PurePosixPath
    content: bytes

    @classmethod
    def from_parts(cls, *parts: str, content: bytes = b"") -> "ArtifactEntry":
        return cls(path=PurePosixPath(*parts), content=content)

    @property
    def depth(self) -> int:
        return len(self.path.parts)


def list_files(root: Path, pattern: str = RECURSIVE_PATTERN) -> list[str]:
    """Return sorted relative posix paths of files under root matching pattern.

    Directories are never returned, even when the pattern matches them.

    Raises:
        ListingError: If root is not a directory or cannot be read.
    """
    root = Path(root)
    if not root.is_dir():
        raise ListingError(f"Artifact directory does not exist: {root}")

    try:
        matches = [p for p in root.glob(pattern) if p.is_file()]
    except OSError as exc:
        raise ListingError(f"Failed to list {pattern} under {root}: {exc}") from exc

    paths = sorted(p.relative_to(root).as_posix() for p in matches)
    logger.debug("Listed %d files under %s (pattern=%s)", len(paths), root, pattern)
    return paths


def read_tree(root: Path, pattern: str = RECURSIVE_PATTERN) -> list[ArtifactEntry]:
    """Snapshot every matching file under root into ArtifactEntry values."""
    root = Path(root)
    entries: list[ArtifactEntry] = []
    for relative in list_files(root, pattern):
        try:
            content = (root / relative).read_bytes()
        except OSError as exc:
            raise ListingError(f"Failed to read artifact {relative}: {exc}") from exc
        entries.append(ArtifactEntry(path=PurePosixPath(relative), content=content))
    return entries


def write_tree(root: Path, entries: Iterable[ArtifactEntry]) -> Path:
    """Write entries under root, creating parent directories as needed."""
    root = Path(root)
    root.mkdir(parents=True, exist_ok=True)
    for entry in entries:
        target = root.joinpath(*entry.path.parts)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(entry.content)
    return root
