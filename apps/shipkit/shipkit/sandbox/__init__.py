"""Sandbox module for containerized command execution."""

from shipkit.sandbox.container import ContainerRunner, redact_command
from shipkit.sandbox.types import ContainerSpec, Mount, StepResult

__all__ = ["ContainerRunner", "redact_command", "ContainerSpec", "Mount", "StepResult"]
