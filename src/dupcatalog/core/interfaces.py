"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the cataloging system.
These protocols enforce structural typing using Python's `typing.Protocol` so that
the hash primitive, the filter and the catalog store can be swapped independently.

Key Components:
---------------
- HashAlgorithm: Standardized interface for streaming 64-bit hash functions (e.g., xxHash64).
- Fingerprinter: Interface for computing a content fingerprint of an open file.
- PathFilter: Interface for exclusion/inclusion decisions over path strings.
- TreeWalker: Interface for breadth-first discovery of files worth fingerprinting.
- CatalogRecorder: Interface for the persistent store of fingerprints.
"""

from datetime import datetime
from typing import Protocol, BinaryIO, Iterator, Optional
from dupcatalog.core.models import WalkItem


# ===== Interfaces =====

class StreamingHash(Protocol):
    def update(self, data: bytes) -> None: ...
    def intdigest(self) -> int: ...


class HashAlgorithm(Protocol):
    """
    Interface for 64-bit hash algorithms.

    Allows plugging in a different hash function without touching
    the fingerprinting strategies.
    """

    @staticmethod
    def new() -> StreamingHash:
        """Returns a fresh streaming hash state."""
        ...

    @staticmethod
    def hash(data: bytes) -> int:
        """Computes the 64-bit hash of the provided byte data."""
        ...


class Fingerprinter(Protocol):
    """Interface for computing the fingerprint of an open file."""

    def fingerprint(self, handle: BinaryIO, size: int, path: Optional[str] = None) -> int:
        """
        Args:
            handle: Open, readable binary file handle.
            size: Declared size of the file in bytes.
            path: Path used in error messages.

        Returns:
            Unsigned 64-bit fingerprint.
        """
        ...


class PathFilter(Protocol):
    """Interface for path filtering. Exclusion always wins over inclusion."""

    def should_exclude(self, path: str) -> bool: ...
    def should_include(self, path: str) -> bool: ...


class TreeWalker(Protocol):
    """
    Interface for walking a directory tree.

    Methods:
        walk: Yields regular files that passed the filters.
    """
    def walk(self) -> Iterator[WalkItem]:
        ...


class CatalogRecorder(Protocol):
    """
    Interface for the persistent catalog.

    ensure_root is get-or-create and must return the same id for the same path.
    record_entry is append-only.
    """
    def ensure_root(self, path: str) -> int:
        ...

    def record_entry(self, root_id: int, fingerprint: int, path: str, mtime: datetime) -> int:
        ...
