"""
dupcatalog: persistent catalog of content fingerprints for duplicate detection.

Core features:
- Size-adaptive xxHash64 fingerprints: full content below the threshold, three 1 KiB samples above it
- Iterative breadth-first walk with regex exclusion (prunes subtrees) and inclusion filters
- SQLite catalog of (root, fingerprint, path, mtime) records
- CLI interface, including single-file fingerprint mode
"""

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("dupcatalog")
except Exception:
    import tomllib
    from pathlib import Path

    with open(Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public API
from dupcatalog.commands import CatalogCommand, FingerprintCommand
from dupcatalog.core import (
    CatalogEntry, FingerprinterImpl, PathFilterImpl, ScanParams, ScanStats, TreeWalkerImpl)
from dupcatalog.services import SQLiteCatalog
from dupcatalog.utils.convert_utils import ConvertUtils

__all__ = [
    "CatalogCommand",
    "FingerprintCommand",
    "CatalogEntry",
    "FingerprinterImpl",
    "PathFilterImpl",
    "ScanParams",
    "ScanStats",
    "TreeWalkerImpl",
    "SQLiteCatalog",
    "ConvertUtils",
    "__version__",
]
