"""Cache of parsed OWNERS files.

Parsing an OWNERS file means reading a blob and resolving identities, so the
result is kept per (project, branch, OWNERS path) until the branch is updated.
Values are whatever the loader returns; a ``None`` (no OWNERS file) is cached
as well.

The cache is shared between concurrent resolutions. ``invalidate`` bumps a
generation counter per (project, branch) so that a value loaded before an
invalidation is never stored after it.
"""

import logging
import threading
import time
from collections import defaultdict
from collections.abc import Callable
from typing import Any, NamedTuple, Protocol, TypeVar

from cachetools import TTLCache

from path_owners.refs import full_ref_name

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheKey(NamedTuple):
    project: str
    branch: str
    path: str


class PathOwnersEntriesCache(Protocol):
    """Keyed get-or-load store with invalidation by branch."""

    def get(self, project: str, branch: str, path: str, loader: Callable[[], T]) -> T:
        """Return the cached value, calling ``loader`` on a miss only.

        Args:
            project: project name
            branch: short or full branch name
            path: OWNERS file path within the branch
            loader: computes the value on a cache miss; exceptions propagate
                and nothing is cached
        """
        ...

    def invalidate(self, project: str, branch: str) -> None:
        """Drop every cached value of a project branch."""
        ...


class NoOpEntriesCache:
    """Cache that never stores anything."""

    def get(self, project: str, branch: str, path: str, loader: Callable[[], T]) -> T:  # noqa: ARG002
        return loader()

    def invalidate(self, project: str, branch: str) -> None:
        pass


class TTLEntriesCache:
    """In-memory cache with time based expiration.

    Args:
        max_size: maximum number of cached OWNERS files (LRU eviction)
        ttl: seconds a value stays valid after it was loaded
        timer: clock used for expiration
    """

    def __init__(
        self,
        max_size: int = 10000,
        ttl: int = 60,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cache: TTLCache[CacheKey, Any] = TTLCache(
            maxsize=max_size, ttl=ttl, timer=timer
        )
        self._index: dict[tuple[str, str], set[CacheKey]] = defaultdict(set)
        self._generations: dict[tuple[str, str], int] = defaultdict(int)
        self._lock = threading.Lock()

    def get(self, project: str, branch: str, path: str, loader: Callable[[], T]) -> T:
        key = CacheKey(project, full_ref_name(branch), path)
        index_key = (key.project, key.branch)
        with self._lock:
            try:
                return self._cache[key]
            except KeyError:
                generation = self._generations[index_key]

        value = loader()

        with self._lock:
            if self._generations[index_key] == generation:
                self._cache[key] = value
                self._index[index_key].add(key)
            else:
                logger.debug(f"Not caching {key}, invalidated while loading")
        return value

    def invalidate(self, project: str, branch: str) -> None:
        index_key = (project, full_ref_name(branch))
        with self._lock:
            self._generations[index_key] += 1
            keys = self._index.pop(index_key, set())
            for key in keys:
                self._cache.pop(key, None)
        logger.debug(
            f"Invalidated {len(keys)} cached OWNERS files of {project}@{index_key[1]}",
            extra={"project": project, "branch": index_key[1]},
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


def create_entries_cache(max_size: int, ttl: int) -> PathOwnersEntriesCache:
    if max_size <= 0:
        return NoOpEntriesCache()
    return TTLEntriesCache(max_size=max_size, ttl=ttl)
