"""GitHub release management.

Uploads a directory of build artifacts to an existing release. Assets can
optionally be flattened from an <os>/<arch>/<filename> layout first, so
"darwin/arm64/tapes" and "darwin/arm64/tapes.sha256" are published as
"tapes-darwin-arm64" and "tapes-darwin-arm64.sha256".

All settings live in an immutable ReleaseConfig that is validated when it
is built, so an upload can never start with a missing tag.
"""

import logging
import shlex
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence

from shipkit.artifacts.flatten import flatten_directory
from shipkit.artifacts.tree import TOP_LEVEL_PATTERN, list_files
from shipkit.core.config import get_settings
from shipkit.core.errors import ConfigurationError, ShipkitError, TransferError
from shipkit.core.logging import bind_module
from shipkit.core.secrets import Secret
from shipkit.sandbox.container import ContainerRunner
from shipkit.sandbox.types import ContainerSpec, Mount, StepResult

logger = logging.getLogger(__name__)

DIST_MOUNT = "/dist"


@dataclass(frozen=True)
class ReleaseConfig:
    """Everything an upload needs, fixed at construction time."""

    token: Secret
    # owner/repo, e.g. "papercomputeco/tapes"
    repo: str
    assets: Path
    # Release tag to upload to, e.g. "nightly" or "v1.0.0"
    tag: str
    flatten: bool = False

    def __post_init__(self) -> None:
        if not self.tag or not self.tag.strip():
            raise ConfigurationError("no release tag set")
        owner, _, name = self.repo.partition("/")
        if not owner or not name or "/" in name:
            raise ConfigurationError(
                f"repository must be in owner/repo format, got {self.repo!r}"
            )


class ReleaseTransport(Protocol):
    """Uploads files to a release, replacing same-named assets."""

    def upload(self, config: ReleaseConfig, dist: Path, files: Sequence[str]) -> StepResult:
        ...


class GhCliReleaseTransport:
    """Uploads with `gh release upload --clobber` inside an alpine container."""

    def __init__(self, runner: Optional[ContainerRunner] = None, image: Optional[str] = None):
        self.runner = runner or ContainerRunner()
        self.image = image or get_settings().alpine_image

    def command(self, config: ReleaseConfig, files: Sequence[str]) -> list[str]:
        upload_args = [
            "gh", "release", "upload", config.tag,
            "--repo", config.repo,
            "--clobber",
        ]
        upload_args += [f"{DIST_MOUNT}/{name}" for name in files]
        script = f"apk add --no-cache github-cli >/dev/null && {shlex.join(upload_args)}"
        return ["sh", "-c", script]

    def upload(self, config: ReleaseConfig, dist: Path, files: Sequence[str]) -> StepResult:
        spec = ContainerSpec(
            image=self.image,
            mounts=(Mount(source=Path(dist), target=DIST_MOUNT, read_only=True),),
            secret_env=(("GH_TOKEN", config.token),),
        )
        return self.runner.run("gh-release-upload", spec, self.command(config, files))


class GitHubRelease:
    """Publishes release assets for one repository and tag."""

    def __init__(self, config: ReleaseConfig, transport: Optional[ReleaseTransport] = None):
        self.config = config
        self.transport = transport or GhCliReleaseTransport()

    def upload(self) -> list[str]:
        """Upload every top-level asset (after optional flattening).

        Returns the uploaded asset names.

        Raises:
            ListingError: If the assets directory cannot be listed.
            TransferError: If the upload invocation fails.
        """
        with bind_module("ghrelease", tag=self.config.tag), tempfile.TemporaryDirectory(
            prefix="shipkit-dist-"
        ) as staging:
            dist = Path(self.config.assets)
            if self.config.flatten:
                dist = flatten_directory(dist, Path(staging))

            try:
                files = list_files(dist, TOP_LEVEL_PATTERN)
            except ShipkitError as exc:
                raise exc.with_context("failed to list dist files") from exc

            if not files:
                logger.warning("No assets found in %s; nothing to upload", dist)
                return []

            logger.info(
                "Uploading %d asset(s) to %s@%s", len(files), self.config.repo, self.config.tag
            )
            step = self.transport.upload(self.config, dist, files)
            if not step.is_success:
                raise TransferError(step).with_context("failed to upload release assets")

        return files
