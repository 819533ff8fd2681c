"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

cataloger.py
Feeds the files found by a TreeWalker through a Fingerprinter into a CatalogRecorder.

Error policy:
    - PermissionError on open: file skipped, walk continues
    - any other open error:    WalkError, walk aborted
    - read/truncation errors:  FingerprintError, walk aborted
Entries recorded before an abort stay in the catalog.
"""
import logging
import time
from typing import Callable, Optional

from dupcatalog.core.errors import WalkError
from dupcatalog.core.interfaces import CatalogRecorder, Fingerprinter, TreeWalker
from dupcatalog.core.models import ScanStats, WalkItem

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 1000


# =============================
# Main Cataloger Class
# =============================
class CatalogerImpl:
    """
    Runs the walk and records one catalog entry per qualifying file.
    Each file is opened, fingerprinted and recorded before the walker moves on.
    """
    def __init__(self, fingerprinter: Fingerprinter, recorder: CatalogRecorder):
        self.fingerprinter = fingerprinter
        self.recorder = recorder

    def catalog(
        self,
        walker: TreeWalker,
        root_id: int,
        stats: Optional[ScanStats] = None,
        progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ) -> ScanStats:
        """
        Args:
            walker: Source of qualifying files
            root_id: Catalog identifier of the walked root
            stats: Counters to update; a new object is created if omitted
            progress_callback: (stage, current, total) reported every PROGRESS_INTERVAL files
        Returns:
            ScanStats
        """
        stats = stats if stats is not None else ScanStats()
        start_time = time.time()
        progress_counter = 0

        try:
            for item in walker.walk():
                if not self.catalog_file(item, root_id, stats):
                    continue

                progress_counter += 1
                if progress_callback and progress_counter >= PROGRESS_INTERVAL:
                    progress_callback('cataloging', stats.files_cataloged, None)
                    progress_counter = 0

            if progress_callback and progress_counter > 0:
                progress_callback('cataloging', stats.files_cataloged, None)
        finally:
            stats.total_time = time.time() - start_time

        return stats

    def catalog_file(self, item: WalkItem, root_id: int, stats: ScanStats) -> bool:
        """
        Fingerprints and records one file.
        Returns False if the file was skipped because of a permission error.
        """
        path = item.path
        try:
            handle = open(path, 'rb')
        except PermissionError:
            logger.warning(f"Permission denied: {path}")
            stats.increment("permission_denied")
            return False
        except OSError as e:
            raise WalkError(f"Cannot open file: {e}", path=path) from e

        with handle:
            fingerprint = self.fingerprinter.fingerprint(handle, item.size, path)

        self.recorder.record_entry(root_id, fingerprint, path, item.modified)
        stats.increment("files_cataloged")
        stats.increment("bytes_fingerprinted", item.size)

        logger.info(f"Cataloged {path}: {fingerprint:x}")
        return True
