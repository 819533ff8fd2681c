"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/filters.py
Regular-expression path filters.

Patterns are searched (not anchored) against the full path string.
Exclusion is checked first and always wins. An empty inclusion set lets every
non-excluded path through. Inclusion only applies to files; directories are
expanded unless excluded so deeper files can still be reached.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Pattern, Tuple

from dupcatalog.core.interfaces import PathFilter


@dataclass(frozen=True)
class RegexSet:
    """An ordered, immutable set of compiled patterns."""
    patterns: Tuple[Pattern, ...] = ()

    @classmethod
    def compile(cls, patterns: Iterable[str]) -> 'RegexSet':
        """Compile patterns; raises ValueError on the first invalid one."""
        compiled = []
        for pattern in patterns:
            try:
                compiled.append(re.compile(pattern))
            except re.error as e:
                raise ValueError(f"Invalid regular expression '{pattern}': {e}") from e
        return cls(tuple(compiled))

    def matches(self, path: str) -> bool:
        """True if any pattern matches somewhere in path."""
        return any(p.search(path) for p in self.patterns)

    def sources(self) -> List[str]:
        return [p.pattern for p in self.patterns]

    def __len__(self):
        return len(self.patterns)

    def __bool__(self):
        return bool(self.patterns)

    def __str__(self):
        return ", ".join(self.sources())


@dataclass(frozen=True)
class PathFilterImpl(PathFilter):
    excludes: RegexSet = field(default_factory=RegexSet)
    includes: RegexSet = field(default_factory=RegexSet)

    @classmethod
    def from_patterns(cls, excludes: Iterable[str] = (), includes: Iterable[str] = ()) -> 'PathFilterImpl':
        return cls(RegexSet.compile(excludes), RegexSet.compile(includes))

    def should_exclude(self, path: str) -> bool:
        return self.excludes.matches(path)

    def should_include(self, path: str) -> bool:
        if not self.includes:
            return True
        return self.includes.matches(path)

    def is_wanted(self, path: str) -> bool:
        """Full decision for a file: not excluded and included."""
        if self.should_exclude(path):
            return False
        return self.should_include(path)
