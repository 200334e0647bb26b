# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Per-path cache of EXIF extraction results

The cache is owned by the caller and passed to the extractor. It keeps every
decode outcome, including "no metadata", for as long as the cache object
lives. Entries are never evicted: the image set is assumed to be static for
the lifetime of the cache.

Copyright 2025 DNAi inc.
"""

import threading
from typing import Any, Callable, Dict, Hashable, Iterator, Tuple

_MISSING = object()


class ExifCache:
    """
    Thread-safe mapping from image path to extraction result.

    Values are stored as given; callers store immutable results.
    """

    def __init__(self):
        self._entries: Dict[Hashable, Any] = {}
        self._lock = threading.Lock()
        self._path_locks: Dict[Hashable, threading.Lock] = {}

    def __contains__(self, path: Hashable) -> bool:
        with self._lock:
            return path in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[Hashable]:
        with self._lock:
            return iter(list(self._entries))

    def get(self, path: Hashable, default: Any = None) -> Any:
        """Return the cached result for a path, or default if not cached."""
        with self._lock:
            return self._entries.get(path, default)

    def lookup(self, path: Hashable) -> Tuple[bool, Any]:
        """
        Look up a path, distinguishing a cached None from a miss.

        Returns:
            (hit, value)
        """
        with self._lock:
            value = self._entries.get(path, _MISSING)
        if value is _MISSING:
            return False, None
        return True, value

    def store(self, path: Hashable, result: Any) -> None:
        """Store a result for a path, replacing any previous one."""
        with self._lock:
            self._entries[path] = result

    def get_or_compute(self, path: Hashable, compute: Callable[[], Tuple[Any, bool]]) -> Tuple[Any, bool]:
        """
        Return the cached result, computing and storing it on a miss.

        Concurrent callers for the same path wait on a per-path lock, so each
        path is computed at most once. Different paths compute in parallel.
        A path lock is dropped once no caller holds it, so paths whose result
        is not cacheable do not accumulate locks.

        Args:
            path: Cache key
            compute: Callable returning (result, cacheable)

        Returns:
            (result, hit) where hit is True if the result came from the cache
        """
        hit, value = self.lookup(path)
        if hit:
            return value, True

        path_lock = self._lock_for(path)
        try:
            with path_lock:
                hit, value = self.lookup(path)
                if hit:
                    return value, True
                result, cacheable = compute()
                if cacheable:
                    self.store(path, result)
                return result, False
        finally:
            self._release_lock(path, path_lock)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._path_locks.clear()

    def _lock_for(self, path: Hashable) -> threading.Lock:
        with self._lock:
            return self._path_locks.setdefault(path, threading.Lock())

    def _release_lock(self, path: Hashable, path_lock: threading.Lock) -> None:
        # Waiters already holding a reference re-check the cache once they acquire it
        with self._lock:
            if self._path_locks.get(path) is path_lock and not path_lock.locked():
                del self._path_locks[path]
