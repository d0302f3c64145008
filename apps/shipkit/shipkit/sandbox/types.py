"""Types for containerized command execution.

ContainerSpec describes the environment a command runs in.
StepResult captures what happened when it ran.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from shipkit.core.secrets import Secret


@dataclass(frozen=True)
class Mount:
    """A host path or named volume mounted into the container.

    When `source` is a Path it is bind-mounted; a plain string is treated
    as a named volume (used for persistent build caches).
    """

    source: Path | str
    target: str
    read_only: bool = False

    def to_arg(self) -> str:
        source = str(Path(self.source).resolve()) if isinstance(self.source, Path) else self.source
        arg = f"{source}:{self.target}"
        if self.read_only:
            arg += ":ro"
        return arg


@dataclass(frozen=True)
class ContainerSpec:
    """Image plus the mounts, env and working directory for one invocation.

    Secret env values are never placed on the command line. The runtime
    receives only the variable name and reads the value from the
    environment of the spawned process.
    """

    image: str
    mounts: tuple[Mount, ...] = ()
    env: tuple[tuple[str, str], ...] = ()
    secret_env: tuple[tuple[str, Secret], ...] = ()
    workdir: Optional[str] = None


@dataclass
class StepResult:
    """Result of a single external invocation.

    Captures exit code, timing, and output for error reporting.
    A step is successful if exit_code == 0.
    """

    name: str
    command: list[str]
    exit_code: int
    duration_seconds: float
    stdout: str = ""
    stderr: str = ""

    @property
    def is_success(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> dict:
        """Summary for failure logs; output is reduced to its last stderr line."""
        stderr_lines = self.stderr.strip().splitlines()
        return {
            "step": self.name,
            "exit_code": self.exit_code,
            "duration_seconds": round(self.duration_seconds, 3),
            "stderr_tail": stderr_lines[-1] if stderr_lines else "",
        }
