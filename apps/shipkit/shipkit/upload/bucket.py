"""Upload build artifacts to an S3-compatible bucket.

Four entry points share one upload routine:

    upload_tree: any prefix, directory structure becomes the key suffix
    upload_latest: <version>/ and then latest/
    upload_nightly: nightly/
    upload_file: a single standalone file (e.g. an install script)

Each upload lists the artifact tree, builds the metadata index, asks the
policy for copy decisions and executes them through a CopyTransport
(AwsCliTransport unless one is injected).
"""

import logging
import posixpath
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from shipkit.artifacts.tree import RECURSIVE_PATTERN, list_files
from shipkit.core.errors import ListingError, ShipkitError
from shipkit.core.logging import bind_module
from shipkit.core.secrets import Secret
from shipkit.upload.metadata import FileMetadata, FilePathMetadata, build_metadata_index
from shipkit.upload.policy import decide, execute
from shipkit.upload.transport import AwsCliTransport, CopyTransport

logger = logging.getLogger(__name__)

NIGHTLY_PREFIX = "nightly"
LATEST_PREFIX = "latest"


@dataclass(frozen=True)
class BucketConfig:
    """Bucket location and credentials, all resolved lazily."""

    endpoint: Secret
    bucket: Secret
    access_key_id: Secret
    secret_access_key: Secret


class BucketUploader:
    """Bucket upload capabilities for build artifacts."""

    def __init__(self, config: BucketConfig, transport: Optional[CopyTransport] = None):
        self.config = config
        self.transport = transport or AwsCliTransport(
            endpoint=config.endpoint,
            access_key_id=config.access_key_id,
            secret_access_key=config.secret_access_key,
        )

    def destination(self, prefix: str) -> str:
        """Return the s3:// URL for a key prefix ("" for the bucket root)."""
        joined = "/".join(part for part in (self.config.bucket.plaintext(), prefix) if part)
        return f"s3://{posixpath.normpath(joined)}"

    def _upload(
        self,
        artifacts: Path,
        prefix: str,
        metadata: Sequence[FilePathMetadata],
    ) -> None:
        destination = self.destination(prefix)
        index = build_metadata_index(metadata)

        # Listing also validates the tree before any container starts.
        files = list_files(artifacts, RECURSIVE_PATTERN)
        decisions = decide(files, index)

        with bind_module("bucketupload", destination=destination):
            logger.info(
                "Uploading %s to %s (%d invocation(s))",
                artifacts, destination, len(decisions),
            )
            execute(decisions, self.transport, Path(artifacts), destination)

    def upload_tree(
        self,
        artifacts: Path,
        prefix: str = "",
        metadata: Sequence[FilePathMetadata] = (),
    ) -> None:
        """Upload a directory under an explicit prefix.

        Unlike upload_latest or upload_nightly, which use fixed prefix
        conventions, the caller chooses the prefix: useful for one-off
        releases, OCI registry layouts, or nested key structures.
        """
        try:
            self._upload(artifacts, prefix, metadata)
        except ShipkitError as exc:
            raise exc.with_context("could not upload tree") from exc

    def upload_latest(
        self,
        artifacts: Path,
        version: str,
        metadata: Sequence[FilePathMetadata] = (),
    ) -> None:
        """Upload under the version prefix and then under "latest".

        If the versioned upload fails, "latest" is left untouched.
        """
        try:
            self._upload(artifacts, version, metadata)
        except ShipkitError as exc:
            raise exc.with_context("could not upload versioned release artifacts") from exc

        try:
            self._upload(artifacts, LATEST_PREFIX, metadata)
        except ShipkitError as exc:
            raise exc.with_context("could not upload latest release artifacts") from exc

    def upload_nightly(
        self,
        artifacts: Path,
        metadata: Sequence[FilePathMetadata] = (),
    ) -> None:
        try:
            self._upload(artifacts, NIGHTLY_PREFIX, metadata)
        except ShipkitError as exc:
            raise exc.with_context("could not upload nightly artifacts") from exc

    def upload_file(
        self,
        file: Path,
        prefix: str = "",
        metadata: Optional[FileMetadata] = None,
    ) -> None:
        """Upload a single file under an optional prefix.

        The file is staged alone in a temporary directory; metadata, when
        given, is keyed by the file's own name.
        """
        file = Path(file)
        if not file.is_file():
            raise ListingError(f"could not upload file: {file} is not a file")
        entries = [FilePathMetadata(path=file.name, meta=metadata)] if metadata is not None else []

        with tempfile.TemporaryDirectory(prefix="shipkit-file-") as staging:
            shutil.copy2(file, Path(staging) / file.name)
            try:
                self._upload(Path(staging), prefix, entries)
            except ShipkitError as exc:
                raise exc.with_context("could not upload file") from exc
