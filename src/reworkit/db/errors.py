# reworkit/db/errors.py
"""Errors raised by the build result store."""


class ResultStoreError(Exception):
    """Base exception for build result storage errors."""


class ConstraintViolation(ResultStoreError):
    """Raised when a write would break a NOT NULL or UNIQUE (name, arch) constraint."""


class ResultNotFound(ResultStoreError):
    """Raised when no build result exists for the requested package/architecture."""

    def __init__(self, name: str, arch: str | None = None):
        self.name = name
        self.arch = arch
        if arch is None:
            message = f"No build results for package {name}"
        else:
            message = f"No build result for {name} ({arch})"
        super().__init__(message)
