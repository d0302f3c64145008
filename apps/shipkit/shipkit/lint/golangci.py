"""golangci-lint for Go source trees.

Runs golangci-lint in its official image (or a caller-supplied image with
golangci-lint on PATH) with persistent Go module, build and lint caches.

When the caller does not provide a config file, an opinionated default
(DEFAULT_CONFIG, rendered to YAML) is mounted instead.

lint() applies auto-fixes to a copy of the source and returns the copy.
check() reports violations without changing anything; any violation
raises LintFailedError.
"""

import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from shipkit.core.config import get_settings
from shipkit.core.errors import ConfigurationError, LintFailedError
from shipkit.core.logging import bind_module
from shipkit.sandbox.container import ContainerRunner
from shipkit.sandbox.types import ContainerSpec, Mount

logger = logging.getLogger(__name__)

SOURCE_MOUNT = "/src"
CONFIG_PATH = "/etc/golangci/.golangci.yml"

CACHE_VOLUMES = (
    ("go-mod", "/go/pkg/mod"),
    ("go-build", "/root/.cache/go-build"),
    ("golangci-lint", "/root/.cache/golangci-lint"),
)

DEFAULT_CONFIG: dict = {
    "version": "2",
    "run": {"timeout": "5m", "tests": True},
    "linters": {
        "default": "standard",
        "enable": [
            "bodyclose",
            "errorlint",
            "gocritic",
            "misspell",
            "nolintlint",
            "revive",
            "unconvert",
            "unparam",
            "whitespace",
        ],
        "settings": {
            "errcheck": {"check-type-assertions": True},
            "misspell": {"locale": "US"},
        },
    },
    "formatters": {"enable": ["gofmt", "goimports"]},
    "issues": {"max-issues-per-linter": 0, "max-same-issues": 0},
}


def render_default_config() -> str:
    return yaml.safe_dump(DEFAULT_CONFIG, sort_keys=False)


def parse_env_vars(env_vars: tuple[str, ...]) -> tuple[tuple[str, str], ...]:
    """Split KEY=VALUE entries.

    Raises:
        ConfigurationError: If an entry has no "=" or an empty key.
    """
    parsed: list[tuple[str, str]] = []
    for env in env_vars:
        key, sep, value = env.partition("=")
        if not sep or not key:
            raise ConfigurationError(f"invalid env var {env!r}: must be in KEY=VALUE format")
        parsed.append((key, value))
    return tuple(parsed)


@dataclass(frozen=True)
class LintConfig:
    """Source tree and lint environment."""

    source: Path
    # Replaces the built-in default config when set
    config_file: Optional[Path] = None
    # e.g. ("GOEXPERIMENT=rangefunc",)
    env_vars: tuple[str, ...] = ()
    # Image with golangci-lint on PATH plus any extra system libraries
    base_image: Optional[str] = None

    def __post_init__(self) -> None:
        parse_env_vars(self.env_vars)
        if not Path(self.source).is_dir():
            raise ConfigurationError(f"Go source directory not found: {self.source}")
        if self.config_file is not None and not Path(self.config_file).is_file():
            raise ConfigurationError(f"golangci-lint config not found: {self.config_file}")


class Golangcilint:
    """golangci-lint runner for a single source tree."""

    def __init__(self, config: LintConfig, runner: Optional[ContainerRunner] = None):
        self.config = config
        self.runner = runner or ContainerRunner()
        self.image = config.base_image or get_settings().golangci_lint_image

    def build_args(self, *extra: str) -> list[str]:
        """Return the golangci-lint command, extra flags before the package pattern."""
        return ["golangci-lint", "run", "--config", CONFIG_PATH, *extra, "./..."]

    def _spec(self, source: Path, config_path: Path, read_only: bool) -> ContainerSpec:
        mounts = [Mount(source=Path(source), target=SOURCE_MOUNT, read_only=read_only)]
        mounts += [Mount(source=volume, target=target) for volume, target in CACHE_VOLUMES]
        mounts.append(Mount(source=Path(config_path), target=CONFIG_PATH, read_only=True))
        return ContainerSpec(
            image=self.image,
            mounts=tuple(mounts),
            env=parse_env_vars(self.config.env_vars),
            workdir=SOURCE_MOUNT,
        )

    def _config_path(self, scratch: Path) -> Path:
        if self.config.config_file is not None:
            return Path(self.config.config_file)
        path = scratch / ".golangci.yml"
        path.write_text(render_default_config(), encoding="utf-8")
        return path

    def lint(self, output_dir: Optional[Path] = None) -> Path:
        """Run with --fix against a copy of the source and return the copy.

        The input source tree is never modified.
        """
        if output_dir is None:
            output_dir = Path(tempfile.mkdtemp(prefix="shipkit-lint-"))
        output_dir = Path(output_dir)
        shutil.copytree(self.config.source, output_dir, dirs_exist_ok=True)

        with bind_module("golangcilint", step="lint"), tempfile.TemporaryDirectory(
            prefix="shipkit-lintcfg-"
        ) as scratch:
            spec = self._spec(output_dir, self._config_path(Path(scratch)), read_only=False)
            step = self.runner.run("golangci-lint --fix", spec, self.build_args("--fix"))

        if not step.is_success:
            raise LintFailedError(step)
        logger.info("Auto-fixed source written to %s", output_dir)
        return output_dir

    def check(self) -> str:
        """Run without fixes and return the linter output."""
        with bind_module("golangcilint", step="check"), tempfile.TemporaryDirectory(
            prefix="shipkit-lintcfg-"
        ) as scratch:
            spec = self._spec(self.config.source, self._config_path(Path(scratch)), read_only=True)
            step = self.runner.run("golangci-lint", spec, self.build_args())

        if not step.is_success:
            raise LintFailedError(step)
        return step.stdout
