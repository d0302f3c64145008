"""Flatten <os>/<arch>/<filename> build trees into composite filenames.

Release pages and download buckets want a flat list of assets, while Go
cross-compilation naturally produces one directory per platform:

    darwin/arm64/tapes           ->  tapes-darwin-arm64
    darwin/arm64/tapes.sha256    ->  tapes-darwin-arm64.sha256

Only entries exactly three segments deep are renamed. In the default
lenient mode everything else is skipped, and when two entries map to the
same flat name the later one wins. strict=True turns both situations into
a FlattenError instead.
"""

import logging
from pathlib import Path, PurePosixPath
from typing import Iterable

from shipkit.artifacts.tree import FLATTEN_PATTERN, RECURSIVE_PATTERN, ArtifactEntry, read_tree, write_tree
from shipkit.core.errors import FlattenError

logger = logging.getLogger(__name__)

CHECKSUM_SUFFIX = ".sha256"
FLATTEN_DEPTH = 3


def flattened_name(os_name: str, arch: str, filename: str) -> str:
    """Return the flat name for a file built for os/arch.

    The .sha256 suffix stays at the end so checksum sidecars keep matching
    their binaries; no other suffix gets special treatment.
    """
    if filename.endswith(CHECKSUM_SUFFIX):
        base = filename[: -len(CHECKSUM_SUFFIX)]
        return f"{base}-{os_name}-{arch}{CHECKSUM_SUFFIX}"
    return f"{filename}-{os_name}-{arch}"


def flatten(entries: Iterable[ArtifactEntry], strict: bool = False) -> list[ArtifactEntry]:
    """Rename depth-3 entries to their flat names.

    The input is not modified. Output order follows the first appearance
    of each flat name.

    Raises:
        FlattenError: In strict mode, on a non depth-3 entry or a collision.
    """
    flat: dict[str, ArtifactEntry] = {}

    for entry in entries:
        if entry.depth != FLATTEN_DEPTH:
            if strict:
                raise FlattenError(
                    f"Expected <os>/<arch>/<filename>, got {entry.path} (depth {entry.depth})"
                )
            logger.debug("Skipping %s: depth %d", entry.path, entry.depth)
            continue

        os_name, arch, filename = entry.path.parts
        name = flattened_name(os_name, arch, filename)

        if name in flat:
            if strict:
                raise FlattenError(
                    f"{entry.path} collides with {flat[name].path} as '{name}'"
                )
            logger.warning("Flat name '%s' from %s overwrites an earlier entry", name, entry.path)

        flat[name] = ArtifactEntry(path=PurePosixPath(name), content=entry.content)

    return list(flat.values())


def flatten_directory(source: Path, destination: Path, strict: bool = False) -> Path:
    """Flatten the build tree at source into destination and return it.

    Lenient mode reads only <os>/<arch>/<filename> matches; strict mode
    reads the whole tree so misplaced files are reported.
    """
    pattern = RECURSIVE_PATTERN if strict else FLATTEN_PATTERN
    entries = flatten(read_tree(Path(source), pattern), strict=strict)
    write_tree(Path(destination), entries)
    logger.info("Flattened %d artifacts from %s into %s", len(entries), source, destination)
    return Path(destination)
