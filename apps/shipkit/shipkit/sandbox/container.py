"""Run commands inside pre-built container images.

Every wrapped CLI (aws, gh, golangci-lint) is invoked through
ContainerRunner.run(): the artifact directory is bind-mounted, env and
secret env are injected, and the command runs to completion as a single
blocking subprocess of the container runtime binary.

Security:
  - Secret values are passed to the runtime through the environment of
    the spawned process (`-e NAME` without a value), never as argv, so
    they do not appear in process listings or logs.
  - Commands are logged only after redact_command() masks anything that
    looks like a credential flag value.
"""

import logging
import os
import shlex
import subprocess
import time
from typing import Optional, Sequence

from shipkit.core.config import get_settings
from shipkit.sandbox.types import ContainerSpec, StepResult

logger = logging.getLogger(__name__)

# Flags whose following argument must never be logged verbatim
_SENSITIVE_FLAGS = {"--token", "--password", "--secret", "--endpoint-url"}


def redact_command(command: Sequence[str]) -> str:
    """Return a shell-quoted command line safe to write into logs."""
    parts: list[str] = []
    redact_next = False
    for arg in command:
        if redact_next:
            parts.append("***")
            redact_next = False
            continue
        if arg in _SENSITIVE_FLAGS:
            redact_next = True
        parts.append(arg)
    return shlex.join(parts)


class ContainerRunner:
    """Executes commands in containers via a docker-compatible CLI.

    No timeout is imposed unless the caller passes one; long-running
    transfers are bounded by the external tool or the surrounding
    orchestrator.
    """

    def __init__(self, runtime: Optional[str] = None):
        self.runtime = runtime or get_settings().container_runtime

    def build_argv(self, spec: ContainerSpec, command: Sequence[str]) -> list[str]:
        """Translate a container spec and command into the runtime's argv."""
        argv = [self.runtime, "run", "--rm"]
        for mount in spec.mounts:
            argv += ["-v", mount.to_arg()]
        for key, value in spec.env:
            argv += ["-e", f"{key}={value}"]
        for key, _secret in spec.secret_env:
            argv += ["-e", key]
        if spec.workdir:
            argv += ["-w", spec.workdir]
        argv.append(spec.image)
        argv.extend(command)
        return argv

    def run(
        self,
        name: str,
        spec: ContainerSpec,
        command: Sequence[str],
        timeout: Optional[int] = None,
    ) -> StepResult:
        """Execute a command in a fresh container and capture the result.

        Raises no exceptions for non-zero exits; callers decide which error
        kind a failure maps to. Secret resolution failures propagate as
        CredentialResolutionError before anything is spawned.
        """
        env = dict(os.environ)
        for key, secret in spec.secret_env:
            env[key] = secret.plaintext()

        argv = self.build_argv(spec, command)
        logger.info("Running step '%s': %s", name, redact_command(list(command)))
        logger.debug("Container argv for '%s': %s", name, redact_command(argv))
        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=timeout,
                env=env,
            )
            step_result = StepResult(
                name=name,
                command=list(command),
                exit_code=result.returncode,
                duration_seconds=time.monotonic() - start,
                stdout=result.stdout,
                stderr=result.stderr,
            )

        except subprocess.TimeoutExpired:
            step_result = StepResult(
                name=name,
                command=list(command),
                exit_code=-1,
                duration_seconds=time.monotonic() - start,
                stderr=f"Timed out after {timeout} seconds",
            )

        except OSError as exc:
            # Runtime binary missing or not executable
            step_result = StepResult(
                name=name,
                command=list(command),
                exit_code=-2,
                duration_seconds=time.monotonic() - start,
                stderr=str(exc),
            )

        status = "OK" if step_result.is_success else "FAILED"
        logger.info(
            "Step '%s' %s (exit=%d, %.1fs)",
            name, status, step_result.exit_code, step_result.duration_seconds,
        )
        if not step_result.is_success and step_result.stderr:
            logger.warning(
                "Step '%s' stderr (tail):\n%s",
                name,
                _truncate_output(step_result.stderr),
            )

        return step_result


def _truncate_output(text: str, max_lines: int = 60, max_chars: int = 4000) -> str:
    """Return a concise tail of command output for logs."""
    if not text:
        return ""
    lines = text.splitlines()
    joined = "\n".join(lines[-max_lines:])
    if len(joined) > max_chars:
        joined = joined[-max_chars:]
    return joined
