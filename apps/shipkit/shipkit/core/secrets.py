"""Lazily resolved secret values.

A Secret records where a credential comes from (environment variable,
file, or literal value) and only reads it when `plaintext()` is called.
The resolved value is held in a pydantic SecretStr so it never shows up in
reprs or log lines.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pydantic import SecretStr

from shipkit.core.errors import CredentialResolutionError


@dataclass(frozen=True)
class Secret:
    """Reference to a credential that is resolved on demand."""

    name: str
    env_var: Optional[str] = None
    path: Optional[Path] = None
    value: Optional[SecretStr] = None

    @classmethod
    def from_env(cls, env_var: str, name: Optional[str] = None) -> "Secret":
        return cls(name=name or env_var, env_var=env_var)

    @classmethod
    def from_file(cls, path: str | Path, name: Optional[str] = None) -> "Secret":
        path = Path(path)
        return cls(name=name or path.name, path=path)

    @classmethod
    def from_value(cls, value: str, name: str = "literal") -> "Secret":
        return cls(name=name, value=SecretStr(value))

    def plaintext(self) -> str:
        """Return the secret value.

        Raises:
            CredentialResolutionError: If the source is missing or empty.
        """
        raw = self._read()
        if not raw:
            raise CredentialResolutionError(f"Secret '{self.name}' resolved to an empty value")
        return raw

    def _read(self) -> str:
        if self.value is not None:
            return self.value.get_secret_value()

        if self.env_var is not None:
            raw = os.environ.get(self.env_var)
            if raw is None:
                raise CredentialResolutionError(
                    f"Secret '{self.name}' is not set (env var {self.env_var})"
                )
            return raw

        if self.path is not None:
            try:
                # Trailing newlines from `echo > file` are never part of a token
                return self.path.read_text(encoding="utf-8").rstrip("\r\n")
            except OSError as exc:
                raise CredentialResolutionError(
                    f"Secret '{self.name}' could not be read from {self.path}: {exc}"
                ) from exc

        raise CredentialResolutionError(f"Secret '{self.name}' has no source")

    def __repr__(self) -> str:
        return f"Secret(name={self.name!r})"
