"""
Unified command orchestrator for cataloging.
This is the SINGLE source of truth for business logic, used by the CLI and by library callers.
"""
import logging
import os
from typing import Callable, Optional, Tuple

from dupcatalog.core.cataloger import CatalogerImpl
from dupcatalog.core.errors import RootValidationError
from dupcatalog.core.filters import PathFilterImpl
from dupcatalog.core.hasher import FingerprinterImpl
from dupcatalog.core.models import DEFAULT_THRESHOLD, MIN_SAMPLED_THRESHOLD, ScanParams, ScanStats
from dupcatalog.core.walker import TreeWalkerImpl
from dupcatalog.services.catalog_service import SQLiteCatalog

logger = logging.getLogger(__name__)


class CatalogCommand:
    """
    Orchestrates a cataloging run:
    1. Validate the root directory (before the catalog is touched)
    2. Open the catalog and get-or-create the root id
    3. Walk the tree, fingerprint qualifying files and record them

    Usage:
        params = ScanParams(root_dir="~/photos", catalog_path="~/.dupcatalog-catalog")
        root_id, stats = CatalogCommand().execute(params, progress_callback=printer)
    """

    def execute(
            self,
            params: ScanParams,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ) -> Tuple[int, ScanStats]:
        """
        Execute a cataloging run with given parameters.

        Args:
            params: Validated scan parameters
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None

        Returns:
            Tuple of (root_id, statistics)

        Raises:
            RootValidationError: If the root is missing or not a directory
            WalkError: If a directory cannot be read or a file cannot be opened
            FingerprintError: If a file cannot be read
            CatalogError: If the catalog cannot be opened or written
        """
        self.validate_root(params.root_dir)

        path_filter = PathFilterImpl.from_patterns(params.exclude_patterns, params.include_patterns)
        fingerprinter = FingerprinterImpl(threshold=params.threshold_bytes)
        stats = ScanStats()

        with SQLiteCatalog(params.catalog_path) as catalog:
            root_id = catalog.ensure_root(params.root_dir)
            logger.info(f"Cataloging {params.root_dir}")

            walker = TreeWalkerImpl(params.root_dir, path_filter=path_filter, stats=stats)
            cataloger = CatalogerImpl(fingerprinter, catalog)
            cataloger.catalog(walker, root_id, stats=stats, progress_callback=progress_callback)

        return root_id, stats

    @staticmethod
    def validate_root(root_dir: str) -> None:
        if not os.path.exists(root_dir):
            raise RootValidationError("Directory does not exist", path=root_dir)
        if not os.path.isdir(root_dir):
            raise RootValidationError("Root is not a directory", path=root_dir)


class FingerprintCommand:
    """Fingerprints a single file without touching any catalog."""

    def __init__(self, threshold: int = DEFAULT_THRESHOLD):
        if threshold < MIN_SAMPLED_THRESHOLD:
            raise ValueError(f"Sampling threshold must be at least {MIN_SAMPLED_THRESHOLD} bytes")
        self._fingerprinter = FingerprinterImpl(threshold=threshold)

    def execute(self, path: str) -> int:
        return self._fingerprinter.fingerprint_path(path)
