"""CI/CD pipeline modules: flatten, checksum and publish build artifacts."""

__version__ = "0.1.0"
