"""Copy transports for object storage.

The upload policy only decides *what* to copy. A CopyTransport performs
the actual transfer, so the concrete tool can change per deployment
without touching the decision logic. AwsCliTransport drives the AWS CLI
against any S3-compatible endpoint from inside the amazon/aws-cli image.
"""

from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from shipkit.core.config import get_settings
from shipkit.core.secrets import Secret
from shipkit.sandbox.container import ContainerRunner
from shipkit.sandbox.types import ContainerSpec, Mount, StepResult
from shipkit.upload.metadata import FileMetadata

ARTIFACTS_MOUNT = "/artifacts"


@runtime_checkable
class CopyTransport(Protocol):
    """Protocol for transfer implementations.

    Both methods block until the external tool exits and report the
    outcome as a StepResult; they do not raise on a non-zero exit.
    """

    def sync(self, source_dir: Path, destination: str) -> StepResult:
        """Synchronise the whole of source_dir to destination."""
        ...

    def copy(
        self,
        source_dir: Path,
        relative_path: str,
        destination_key: str,
        metadata: Optional[FileMetadata],
    ) -> StepResult:
        """Copy one file to destination_key, applying metadata headers if given."""
        ...


class AwsCliTransport:
    """S3-compatible transfers via `aws s3 sync` / `aws s3 cp`."""

    def __init__(
        self,
        endpoint: Secret,
        access_key_id: Secret,
        secret_access_key: Secret,
        runner: Optional[ContainerRunner] = None,
        image: Optional[str] = None,
    ):
        self.endpoint = endpoint
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.runner = runner or ContainerRunner()
        self.image = image or get_settings().aws_cli_image

    def _spec(self, source_dir: Path) -> ContainerSpec:
        return ContainerSpec(
            image=self.image,
            mounts=(Mount(source=Path(source_dir), target=ARTIFACTS_MOUNT, read_only=True),),
            env=(("AWS_DEFAULT_REGION", "auto"),),
            secret_env=(
                ("AWS_ACCESS_KEY_ID", self.access_key_id),
                ("AWS_SECRET_ACCESS_KEY", self.secret_access_key),
            ),
            workdir=ARTIFACTS_MOUNT,
        )

    def sync_command(self, destination: str) -> list[str]:
        return [
            "s3", "sync", ".",
            destination,
            "--endpoint-url", self.endpoint.plaintext(),
        ]

    def copy_command(
        self,
        relative_path: str,
        destination_key: str,
        metadata: Optional[FileMetadata],
    ) -> list[str]:
        cmd = [
            "s3", "cp",
            relative_path,
            destination_key,
            "--endpoint-url", self.endpoint.plaintext(),
        ]
        if metadata is not None:
            if metadata.content_type:
                cmd += ["--content-type", metadata.content_type]
            if metadata.checksum_sha256:
                cmd += [
                    "--checksum-algorithm", "SHA256",
                    "--checksum-sha256", metadata.checksum_sha256,
                ]
        return cmd

    def sync(self, source_dir: Path, destination: str) -> StepResult:
        # The aws-cli image's entrypoint is `aws`, so commands start at the subcommand.
        return self.runner.run("s3-sync", self._spec(source_dir), self.sync_command(destination))

    def copy(
        self,
        source_dir: Path,
        relative_path: str,
        destination_key: str,
        metadata: Optional[FileMetadata],
    ) -> StepResult:
        return self.runner.run(
            f"s3-cp {relative_path}",
            self._spec(source_dir),
            self.copy_command(relative_path, destination_key, metadata),
        )
