"""Per-file upload metadata and the path-keyed index built from it.

Callers describe headers for individual files as FilePathMetadata entries.
Paths are normalised to a PathKey (one leading "./" and then one leading
"/" stripped) so "./bin/app", "/bin/app" and "bin/app" all address the
same artifact. When the same key appears twice, the later entry wins.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

CONTENT_TYPE_HEADER = "Content-Type"
CHECKSUM_SHA256_HEADER = "x-amz-checksum-sha256"


@dataclass(frozen=True)
class FileMetadata:
    """Optional upload headers for a single file.

    Both fields are independently optional; an unset (or empty) field means
    the corresponding header is not sent.
    """

    content_type: Optional[str] = None
    # Base64-encoded SHA-256 of the file contents
    checksum_sha256: Optional[str] = None

    def with_content_type(self, content_type: str) -> "FileMetadata":
        return replace(self, content_type=content_type)

    def with_checksum_sha256(self, checksum: str) -> "FileMetadata":
        return replace(self, checksum_sha256=checksum)

    def headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.content_type:
            headers[CONTENT_TYPE_HEADER] = self.content_type
        if self.checksum_sha256:
            headers[CHECKSUM_SHA256_HEADER] = self.checksum_sha256
        return headers


@dataclass(frozen=True)
class FilePathMetadata:
    """A relative artifact path (e.g. "bin/my-binary") paired with its metadata."""

    path: str
    meta: FileMetadata = field(default_factory=FileMetadata)

    @classmethod
    def from_dict(cls, data: dict) -> "FilePathMetadata":
        return cls(
            path=data["path"],
            meta=FileMetadata(
                content_type=data.get("content_type"),
                checksum_sha256=data.get("checksum_sha256"),
            ),
        )


MetadataIndex = dict[str, FileMetadata]


def path_key(path: str) -> str:
    """Normalise a relative path to its lookup key."""
    return path.removeprefix("./").removeprefix("/")


def build_metadata_index(entries: Iterable[FilePathMetadata]) -> MetadataIndex:
    """Build a PathKey -> FileMetadata lookup, last write wins.

    Paths are not checked against any artifact tree; unmatched keys are
    simply never looked up.
    """
    index: MetadataIndex = {}
    for entry in entries:
        index[path_key(entry.path)] = entry.meta
    return index
