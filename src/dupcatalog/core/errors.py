"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Exceptions raised while walking, fingerprinting and cataloging.

Only permission errors on file open are recovered (the file is skipped);
everything here aborts the walk and carries the offending path.
"""

from typing import Optional


class DupCatalogError(RuntimeError):
    """Base class for all dupcatalog failures."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path

    def __str__(self):
        message = super().__str__()
        if self.path and self.path not in message:
            return f"{self.path}: {message}"
        return message


class RootValidationError(DupCatalogError):
    """Root directory is missing or is not a directory."""


class WalkError(DupCatalogError):
    """I/O failure while listing a directory or opening a file."""


class FingerprintError(DupCatalogError):
    """Read failure while computing a fingerprint."""


class TruncatedFileError(FingerprintError):
    """File ended before a non-final sample window could be read."""


class CatalogError(DupCatalogError):
    """The catalog store rejected a read or write."""
