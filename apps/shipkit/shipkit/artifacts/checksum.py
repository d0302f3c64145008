"""SHA-256 checksums for build artifacts.

write_checksums() places a `<file>.sha256` sidecar next to every artifact in
the same format sha256sum prints (`<hex>  <relative path>`), so downstream
users can verify downloads with `sha256sum -c`.

sha256_base64() produces the base64 digest object storage expects in the
x-amz-checksum-sha256 header.
"""

import base64
import hashlib
import logging
from pathlib import Path
from typing import Optional

from shipkit.artifacts.flatten import CHECKSUM_SUFFIX
from shipkit.artifacts.tree import RECURSIVE_PATTERN, list_files
from shipkit.upload.metadata import FileMetadata, FilePathMetadata

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


def _digest(path: Path) -> "hashlib._Hash":
    digest = hashlib.sha256()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest


def sha256_hex(path: Path) -> str:
    return _digest(Path(path)).hexdigest()


def sha256_base64(path: Path) -> str:
    return base64.b64encode(_digest(Path(path)).digest()).decode("ascii")


def write_checksums(root: Path) -> list[Path]:
    """Write a .sha256 sidecar for every non-checksum file under root.

    Existing sidecars are overwritten, so re-running converges.
    Returns the sidecar paths in sorted order.
    """
    root = Path(root)
    written: list[Path] = []
    for relative in list_files(root, RECURSIVE_PATTERN):
        if relative.endswith(CHECKSUM_SUFFIX):
            continue
        source = root / relative
        sidecar = source.with_name(source.name + CHECKSUM_SUFFIX)
        sidecar.write_text(f"{sha256_hex(source)}  {relative}\n", encoding="utf-8")
        written.append(sidecar)

    logger.info("Wrote %d checksum files under %s", len(written), root)
    return written


def metadata_for_tree(
    root: Path,
    content_type: Optional[str] = None,
) -> list[FilePathMetadata]:
    """Build per-file upload metadata with computed checksums for every file."""
    root = Path(root)
    return [
        FilePathMetadata(
            path=relative,
            meta=FileMetadata(
                content_type=content_type,
                checksum_sha256=sha256_base64(root / relative),
            ),
        )
        for relative in list_files(root, RECURSIVE_PATTERN)
    ]
