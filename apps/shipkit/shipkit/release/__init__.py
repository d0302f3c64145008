"""GitHub release uploads."""

from shipkit.release.api import GitHubApiReleaseTransport
from shipkit.release.ghrelease import GhCliReleaseTransport, GitHubRelease, ReleaseConfig

__all__ = ["GitHubApiReleaseTransport", "GhCliReleaseTransport", "GitHubRelease", "ReleaseConfig"]
