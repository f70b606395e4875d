"""Custom exceptions for dist-deps-prune."""

from __future__ import annotations


class DistDepsPruneError(Exception):
    """Base exception for all dist-deps-prune errors."""


class DistNotFoundError(DistDepsPruneError):
    """Raised when a scan root does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Dist directory not found: {path}")


class ParseFailureError(DistDepsPruneError):
    """Raised when a file cannot be parsed (fatal only in strict mode)."""

    def __init__(self, file: str, error: str):
        self.file = file
        self.error = error
        super().__init__(f"Failed to parse {file}: {error}")


class ManifestError(DistDepsPruneError):
    """Raised when package.json has a malformed dependency group."""


class ConfigError(DistDepsPruneError):
    """Raised when the config file fails validation."""


class FileError(DistDepsPruneError):
    """Raised on any file system or process I/O failure."""


class RestoreError(DistDepsPruneError):
    """Raised when the release backup cannot be restored."""


class DevDependencyInDistError(DistDepsPruneError):
    """Raised when dist imports packages declared only in devDependencies."""

    def __init__(self, packages: list[str]):
        self.packages = packages
        super().__init__(
            f"dist imports packages from devDependencies: {', '.join(packages)}\n"
            "Remove them from devDependencies and keep them only in dependencies "
            "or peerDependencies, then retry."
        )
