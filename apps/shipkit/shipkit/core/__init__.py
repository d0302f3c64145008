"""Ambient stack: settings, logging, secrets and the error hierarchy."""

from shipkit.core.config import Settings, get_settings
from shipkit.core.errors import (
    CommandFailedError,
    ConfigurationError,
    CredentialResolutionError,
    FlattenError,
    LintFailedError,
    ListingError,
    ShipkitError,
    TransferError,
)
from shipkit.core.secrets import Secret

__all__ = [
    "Settings",
    "get_settings",
    "CommandFailedError",
    "ConfigurationError",
    "CredentialResolutionError",
    "FlattenError",
    "LintFailedError",
    "ListingError",
    "ShipkitError",
    "TransferError",
    "Secret",
]
