"""Artifact tree snapshots, flattening and checksums.

Public API:
    flatten(entries) -> list[ArtifactEntry]
    flatten_directory(source, destination) -> Path
    write_checksums(root) -> list[Path]
"""

from shipkit.artifacts.checksum import metadata_for_tree, sha256_base64, write_checksums
from shipkit.artifacts.flatten import flatten, flatten_directory, flattened_name
from shipkit.artifacts.tree import ArtifactEntry, list_files, read_tree, write_tree

__all__ = [
    "metadata_for_tree",
    "sha256_base64",
    "write_checksums",
    "flatten",
    "flatten_directory",
    "flattened_name",
    "ArtifactEntry",
    "list_files",
    "read_tree",
    "write_tree",
]
