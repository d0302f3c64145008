from pathlib import Path

import pytest

from conftest import RecordingRunner
from shipkit.core.errors import CredentialResolutionError
from shipkit.core.secrets import Secret
from shipkit.upload.metadata import FileMetadata
from shipkit.upload.transport import ARTIFACTS_MOUNT, AwsCliTransport, CopyTransport


@pytest.fixture
def transport(recording_runner: RecordingRunner) -> AwsCliTransport:
    return AwsCliTransport(
        endpoint=Secret.from_value("https://r2.example.com"),
        access_key_id=Secret.from_value("AKIA"),
        secret_access_key=Secret.from_value("shh"),
        runner=recording_runner,
        image="amazon/aws-cli:test",
    )


class TestAwsCliTransport:
    def test_satisfies_protocol(self, transport):
        assert isinstance(transport, CopyTransport)

    def test_sync_command(self, transport, recording_runner, tmp_path: Path):
        step = transport.sync(tmp_path, "s3://bucket/v1.2.3")

        assert step.is_success
        [(name, spec, command)] = recording_runner.calls
        assert name == "s3-sync"
        assert command == [
            "s3", "sync", ".", "s3://bucket/v1.2.3",
            "--endpoint-url", "https://r2.example.com",
        ]
        assert spec.image == "amazon/aws-cli:test"
        assert spec.workdir == ARTIFACTS_MOUNT
        assert ("AWS_DEFAULT_REGION", "auto") in spec.env
        assert [key for key, _ in spec.secret_env] == ["AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"]

    def test_copy_without_metadata(self, transport):
        cmd = transport.copy_command("bin/app", "s3://bucket/bin/app", None)
        assert cmd == [
            "s3", "cp", "bin/app", "s3://bucket/bin/app",
            "--endpoint-url", "https://r2.example.com",
        ]

    def test_copy_with_all_headers(self, transport):
        meta = FileMetadata(content_type="application/gzip", checksum_sha256="c2hh")
        cmd = transport.copy_command("a.tgz", "s3://bucket/a.tgz", meta)
        assert cmd[-6:] == [
            "--content-type", "application/gzip",
            "--checksum-algorithm", "SHA256",
            "--checksum-sha256", "c2hh",
        ]

    def test_copy_with_checksum_only(self, transport):
        cmd = transport.copy_command("a", "s3://bucket/a", FileMetadata(checksum_sha256="c2hh"))
        assert "--content-type" not in cmd
        assert "--checksum-sha256" in cmd

    def test_missing_endpoint_raises(self, recording_runner, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("NO_SUCH_ENDPOINT", raising=False)
        transport = AwsCliTransport(
            endpoint=Secret.from_env("NO_SUCH_ENDPOINT"),
            access_key_id=Secret.from_value("a"),
            secret_access_key=Secret.from_value("b"),
            runner=recording_runner,
        )
        with pytest.raises(CredentialResolutionError):
            transport.sync(tmp_path, "s3://bucket")
        assert recording_runner.calls == []
