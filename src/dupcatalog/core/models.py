"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for directory traversal and fingerprint cataloging.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Dict, Optional, Callable
import os
import re
import stat

from dupcatalog.utils.convert_utils import ConvertUtils


# =============================
# Constants
# =============================

DEFAULT_THRESHOLD = 512 * 1024   # files at or above this size are sampled
SAMPLE_SIZE = 1024               # bytes per sampled window
MIN_SAMPLED_THRESHOLD = 3 * SAMPLE_SIZE


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class Root:
    """A directory under scan and its identifier in the catalog."""
    id: int
    path: str


@dataclass(frozen=True)
class CatalogEntry:
    """
    One recorded fingerprint.
    Entries are append-only: the same path or fingerprint may appear many times.
    """
    root_id: int
    fingerprint: int
    path: str
    mtime: datetime

    @property
    def fingerprint_hex(self) -> str:
        return ConvertUtils.fingerprint_to_hex(self.fingerprint)

    def __repr__(self):
        return f"<CatalogEntry root={self.root_id}, hash={self.fingerprint_hex}, path={self.path}>"


@dataclass(frozen=True)
class WalkItem:
    """
    A filesystem entry together with the directory it was found in.
    Metadata comes from lstat, so symbolic links are never followed.
    """
    name: str
    parent: str
    mode: int
    size: int
    mtime: float

    @classmethod
    def from_stat(cls, name: str, parent: str, st: os.stat_result) -> 'WalkItem':
        return cls(
            name=name,
            parent=parent,
            mode=st.st_mode,
            size=st.st_size,
            mtime=st.st_mtime,
        )

    @property
    def path(self) -> str:
        return os.path.join(self.parent, self.name)

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.mode)

    @property
    def is_regular(self) -> bool:
        return stat.S_ISREG(self.mode)

    @property
    def modified(self) -> datetime:
        return datetime.fromtimestamp(self.mtime, tz=timezone.utc)

    def __repr__(self):
        return f"<WalkItem path={self.path}, size={self.size}>"


@dataclass
class ScanStats:
    """
    Statistics collected while walking and cataloging a tree.
    """
    dirs_expanded: int = 0
    files_cataloged: int = 0
    bytes_fingerprinted: int = 0
    excluded: int = 0
    not_regular: int = 0
    not_included: int = 0
    permission_denied: int = 0
    total_time: float = 0.0
    _listeners: List[Callable[[str, Dict], None]] = field(default_factory=list, repr=False)

    def add_listener(self, listener: Callable[[str, Dict], None]):
        """Adds a listener to receive updates when a counter changes."""
        self._listeners.append(listener)

    def increment(self, counter: str, amount: int = 1) -> None:
        if counter.startswith("_") or not hasattr(self, counter):
            raise AttributeError(f"Unknown counter: {counter}")
        setattr(self, counter, getattr(self, counter) + amount)

        for listener in self._listeners:
            listener(counter, {"value": getattr(self, counter)})

    def print_summary(self) -> str:
        lines = [
            "Catalog Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s\n",
            f"Directories expanded: {self.dirs_expanded}",
            f"Files cataloged: {self.files_cataloged} "
            f"({ConvertUtils.bytes_to_human(self.bytes_fingerprinted)})",
            f"Excluded paths: {self.excluded}",
            f"Skipped (not a regular file): {self.not_regular}",
            f"Skipped (not included): {self.not_included}",
            f"Permission denied: {self.permission_denied}",
        ]
        return "\n".join(lines)


"""
DTO for scan parameters with built-in validation.
Interface-agnostic, used by the CLI and by library callers.
"""

@dataclass
class ScanParams:
    """Parameters for a cataloging run with validation."""
    root_dir: str
    catalog_path: str
    exclude_patterns: List[str] = field(default_factory=list)
    include_patterns: List[str] = field(default_factory=list)
    threshold_bytes: int = DEFAULT_THRESHOLD
    verbose: bool = False

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        if not self.catalog_path:
            raise ValueError("Catalog path cannot be empty")

        if self.threshold_bytes < MIN_SAMPLED_THRESHOLD:
            raise ValueError(
                f"Sampling threshold must be at least {MIN_SAMPLED_THRESHOLD} bytes"
            )

        for pattern in list(self.exclude_patterns) + list(self.include_patterns):
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid regular expression '{pattern}': {e}") from e

        self.root_dir = os.path.abspath(os.path.expanduser(self.root_dir))
        self.catalog_path = os.path.expanduser(self.catalog_path)

    @staticmethod
    def from_human_readable(
            root_dir: str,
            catalog_path: str,
            threshold_str: str = "512K",
            exclude_patterns: Optional[List[str]] = None,
            include_patterns: Optional[List[str]] = None,
            verbose: bool = False,
    ) -> 'ScanParams':
        """
        Factory method to create params from human-readable inputs.
        Useful for CLI argument parsing.
        """
        return ScanParams(
            root_dir=root_dir,
            catalog_path=catalog_path,
            exclude_patterns=exclude_patterns or [],
            include_patterns=include_patterns or [],
            threshold_bytes=ConvertUtils.human_to_bytes(threshold_str),
            verbose=verbose,
        )
