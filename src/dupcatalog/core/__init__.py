"""
Core cataloging engine: walker, filters, fingerprinter and cataloger.

This package contains the performance-critical foundation of dupcatalog:
- TreeWalkerImpl: iterative breadth-first traversal with exclusion pruning
- PathFilterImpl + RegexSet: exclusion/inclusion regex policy (exclusion wins)
- FingerprinterImpl + XXHashAlgorithmImpl: size-adaptive xxHash64 fingerprints
- CatalogerImpl: open → fingerprint → record for every qualifying file
- Models: WalkItem, CatalogEntry, ScanParams, ScanStats

All components are pure Python and know nothing about the CLI.
"""

from .errors import (
    DupCatalogError, RootValidationError, WalkError, FingerprintError,
    TruncatedFileError, CatalogError)
from .filters import PathFilterImpl, RegexSet
from .hasher import FingerprinterImpl, XXHashAlgorithmImpl
from .walker import TreeWalkerImpl
from .cataloger import CatalogerImpl
from .models import (
    CatalogEntry, Root, WalkItem, ScanParams, ScanStats,
    DEFAULT_THRESHOLD, SAMPLE_SIZE, MIN_SAMPLED_THRESHOLD)

__all__ = [
    "DupCatalogError",
    "RootValidationError",
    "WalkError",
    "FingerprintError",
    "TruncatedFileError",
    "CatalogError",
    "PathFilterImpl",
    "RegexSet",
    "FingerprinterImpl",
    "XXHashAlgorithmImpl",
    "TreeWalkerImpl",
    "CatalogerImpl",
    "CatalogEntry",
    "Root",
    "WalkItem",
    "ScanParams",
    "ScanStats",
    "DEFAULT_THRESHOLD",
    "SAMPLE_SIZE",
    "MIN_SAMPLED_THRESHOLD",
]
