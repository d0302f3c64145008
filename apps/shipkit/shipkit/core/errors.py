"""Error hierarchy for shipkit modules.

Every failure surfaces immediately to the caller with a message naming the
step that failed. Nothing is retried and no partial progress is recorded:
a multi-file batch stops at the first failed transfer.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from shipkit.sandbox.types import StepResult


class ShipkitError(Exception):
    """Base class for all errors raised by shipkit modules."""

    def with_context(self, context: str) -> "ShipkitError":
        """Return an error of the same kind with the failing step prepended."""
        return type(self)(f"{context}: {self}")


class ListingError(ShipkitError):
    """Raised when the source paths of an artifact tree cannot be enumerated."""


class CredentialResolutionError(ShipkitError):
    """Raised when a required secret value cannot be read."""


class ConfigurationError(ShipkitError):
    """Raised when a module is constructed with an invalid or missing value."""


class FlattenError(ShipkitError):
    """Raised by strict flattening on an unexpected depth or a name collision."""


class CommandFailedError(ShipkitError):
    """Raised when an external invocation exits non-zero.

    Carries the step result for detailed error reporting.
    """

    def __init__(self, step_result: "StepResult", message: str = ""):
        self.step_result = step_result
        if not message:
            message = f"Step '{step_result.name}' failed with exit code {step_result.exit_code}"
            # Last stderr line is usually the tool's own error summary
            tail = step_result.stderr.strip().splitlines()[-1:]
            if tail:
                message += f": {tail[0]}"
        super().__init__(message)

    def with_context(self, context: str) -> "CommandFailedError":
        return type(self)(self.step_result, f"{context}: {self}")


class TransferError(CommandFailedError):
    """Raised when a copy, sync, or upload invocation fails."""


class LintFailedError(CommandFailedError):
    """Raised when golangci-lint reports violations or cannot run."""


def describe(exc: BaseException, step: Optional[str] = None) -> str:
    """Return a one-line description of an error for log output."""
    prefix = f"{step}: " if step else ""
    return f"{prefix}{type(exc).__name__}: {exc}"
