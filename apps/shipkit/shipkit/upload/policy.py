"""Bulk vs. per-file copy decisions for artifact uploads.

With no per-file metadata the whole tree goes up in a single sync, which is
the common and fast path. As soon as *any* metadata is supplied every file
is copied individually: files with an index entry get their headers,
files without one are copied plain. Switching the whole batch trades
throughput for per-file headers; it never changes what ends up stored.

Execution is fail-fast: decisions run in order, one external invocation
each, and the first failure aborts the rest of the batch.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from shipkit.core.errors import TransferError
from shipkit.upload.metadata import FileMetadata, MetadataIndex, path_key
from shipkit.upload.transport import CopyTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BulkCopy:
    """Synchronise the entire tree in one invocation."""


@dataclass(frozen=True)
class TargetedCopy:
    """Copy a single file, optionally with upload headers."""

    path: str
    metadata: Optional[FileMetadata] = None

    @property
    def headers(self) -> dict[str, str]:
        if self.metadata is None:
            return {}
        return self.metadata.headers()


CopyDecision = Union[BulkCopy, TargetedCopy]


def decide(files: Iterable[str], index: MetadataIndex) -> list[CopyDecision]:
    """Return the copy decisions for a set of files.

    Empty index: exactly one BulkCopy. Otherwise one TargetedCopy per file,
    ordered by PathKey.
    """
    if not index:
        return [BulkCopy()]

    keys = sorted({path_key(f) for f in files})
    return [TargetedCopy(path=key, metadata=index.get(key)) for key in keys]


def execute(
    decisions: Iterable[CopyDecision],
    transport: CopyTransport,
    source: Path,
    destination: str,
) -> int:
    """Run one external invocation per decision, stopping at the first failure.

    Returns the number of invocations that succeeded.

    Raises:
        TransferError: When any invocation exits non-zero. Files copied
            before the failure stay at the destination.
    """
    completed = 0
    for decision in decisions:
        if isinstance(decision, BulkCopy):
            step = transport.sync(source, destination)
        else:
            step = transport.copy(
                source,
                decision.path,
                f"{destination}/{decision.path}",
                decision.metadata,
            )

        if not step.is_success:
            logger.error(
                "Transfer aborted after %d successful invocation(s): %s",
                completed, step.name,
            )
            raise TransferError(step)
        completed += 1

    return completed
