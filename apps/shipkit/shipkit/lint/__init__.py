"""Go linting via golangci-lint."""

from shipkit.lint.golangci import Golangcilint, LintConfig

__all__ = ["Golangcilint", "LintConfig"]
