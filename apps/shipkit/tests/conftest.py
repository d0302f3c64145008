"""Shared test fixtures for the shipkit test suite.

No container runtime or network is touched: the ContainerRunner is
replaced with a recorder and transports with in-memory fakes.
"""

from pathlib import Path
from typing import Optional

import pytest

from shipkit.core.secrets import Secret
from shipkit.sandbox.types import ContainerSpec, StepResult
from shipkit.upload.metadata import FileMetadata


def make_step(name: str = "step", exit_code: int = 0, stdout: str = "", stderr: str = "") -> StepResult:
    return StepResult(
        name=name,
        command=[name],
        exit_code=exit_code,
        duration_seconds=0.01,
        stdout=stdout,
        stderr=stderr,
    )


class RecordingRunner:
    """Stands in for ContainerRunner; records every run() call."""

    def __init__(self, results: Optional[list[StepResult]] = None):
        self.calls: list[tuple[str, ContainerSpec, list[str]]] = []
        self._results = list(results or [])

    def run(self, name, spec, command, timeout=None) -> StepResult:
        self.calls.append((name, spec, list(command)))
        if self._results:
            return self._results.pop(0)
        return make_step(name)


class FakeTransport:
    """In-memory CopyTransport; fails the Nth invocation when asked."""

    def __init__(self, fail_on: Optional[int] = None):
        self.invocations: list[tuple] = []
        self.fail_on = fail_on

    def _result(self, name: str) -> StepResult:
        index = len(self.invocations)
        if self.fail_on is not None and index == self.fail_on:
            return make_step(name, exit_code=1, stderr="upload failed: access denied")
        return make_step(name)

    def sync(self, source_dir: Path, destination: str) -> StepResult:
        result = self._result("sync")
        self.invocations.append(("sync", str(destination)))
        return result

    def copy(
        self,
        source_dir: Path,
        relative_path: str,
        destination_key: str,
        metadata: Optional[FileMetadata],
    ) -> StepResult:
        result = self._result(f"cp {relative_path}")
        self.invocations.append(("copy", relative_path, destination_key, metadata))
        return result


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def build_tree(tmp_path: Path) -> Path:
    """A cross-compiled build tree laid out as <os>/<arch>/<filename>."""
    root = tmp_path / "build"
    files = {
        "darwin/arm64/tapes": b"darwin-arm64-binary",
        "darwin/arm64/tapes.sha256": b"abc  darwin/arm64/tapes\n",
        "linux/amd64/tapes": b"linux-amd64-binary",
        "README.md": b"# top level, skipped",
        "linux/amd64/debug/symbols": b"too deep, skipped",
    }
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return root


@pytest.fixture
def secret() -> Secret:
    return Secret.from_value("s3cr3t", name="test")
