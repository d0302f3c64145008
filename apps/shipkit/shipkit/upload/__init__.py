"""Object storage uploads.

Public API:
    build_metadata_index(entries) -> dict[str, FileMetadata]
    decide(files, index) -> list[CopyDecision]
    BucketUploader(config).upload_tree / upload_latest / upload_nightly / upload_file
"""

from shipkit.upload.bucket import BucketConfig, BucketUploader
from shipkit.upload.metadata import FileMetadata, FilePathMetadata, build_metadata_index, path_key
from shipkit.upload.policy import BulkCopy, TargetedCopy, decide, execute
from shipkit.upload.transport import AwsCliTransport, CopyTransport

__all__ = [
    "BucketConfig",
    "BucketUploader",
    "FileMetadata",
    "FilePathMetadata",
    "build_metadata_index",
    "path_key",
    "BulkCopy",
    "TargetedCopy",
    "decide",
    "execute",
    "AwsCliTransport",
    "CopyTransport",
]
