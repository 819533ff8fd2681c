"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/walker.py
Iterative breadth-first directory traversal.
Features:
- Explicit queue of WalkItem, no recursion (no stack-depth limit on deep trees)
- Exclusion is applied when a directory is expanded, pruning whole subtrees
- Inclusion is applied to files only
- Symbolic links, devices, sockets and FIFOs are never yielded
"""

import logging
import os
from collections import deque
from typing import Deque, Iterator, List, Optional

from dupcatalog.core.errors import WalkError
from dupcatalog.core.interfaces import PathFilter, TreeWalker
from dupcatalog.core.filters import PathFilterImpl
from dupcatalog.core.models import ScanStats, WalkItem

logger = logging.getLogger(__name__)


class TreeWalkerImpl(TreeWalker):
    """
    Walks a root directory breadth-first and yields regular files that pass the filters.

    The walk is a lazy generator: the caller finishes with one item before the
    next entry is dequeued. Sibling order follows the filesystem listing and is
    not guaranteed.

    Attributes:
        root_dir: Absolute path of the directory to walk
        path_filter: Exclusion/inclusion policy
        stats: Counters updated during the walk
    """

    def __init__(
        self,
        root_dir: str,
        path_filter: Optional[PathFilter] = None,
        stats: Optional[ScanStats] = None,
    ):
        self.root_dir = os.path.abspath(root_dir)
        self.path_filter = path_filter or PathFilterImpl()
        self.stats = stats if stats is not None else ScanStats()

    def walk(self) -> Iterator[WalkItem]:
        """
        Yields qualifying files.

        Raises:
            WalkError: If the root or any directory cannot be stat-ed, opened or listed
        """
        queue: Deque[WalkItem] = deque([self._root_item()])

        while queue:
            item = queue.popleft()

            if item.is_dir:
                queue.extend(self._expand(item))
                continue

            if not item.is_regular:
                logger.debug(f"Skipping non-regular file: {item.path}")
                self.stats.increment("not_regular")
                continue

            if not self.path_filter.should_include(item.path):
                logger.debug(f"Skipping {item.path} (not included)")
                self.stats.increment("not_included")
                continue

            yield item

    def _root_item(self) -> WalkItem:
        try:
            st = os.stat(self.root_dir)
        except OSError as e:
            raise WalkError(f"Cannot stat root: {e}", path=self.root_dir) from e
        return WalkItem.from_stat(
            os.path.basename(self.root_dir),
            os.path.dirname(self.root_dir),
            st,
        )

    def _expand(self, item: WalkItem) -> List[WalkItem]:
        """Lists a directory and returns its non-excluded children."""
        directory = item.path
        children = []
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    path = os.path.join(directory, entry.name)
                    if self.path_filter.should_exclude(path):
                        logger.info(f"Skipping {path}")
                        self.stats.increment("excluded")
                        continue
                    try:
                        st = entry.stat(follow_symlinks=False)
                    except FileNotFoundError:
                        logger.debug(f"Vanished before stat: {path}")
                        continue
                    children.append(WalkItem.from_stat(entry.name, directory, st))
        except OSError as e:
            raise WalkError(f"Cannot read directory: {e}", path=directory) from e

        self.stats.increment("dirs_expanded")
        return children
