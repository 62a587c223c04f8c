"""DiffCache: caller-owned LRU cache of computed diff entries.

Each ``DiffCache`` instance holds its own ``LRUCache``; there is no module or
class level state, so independent comparisons running in parallel never see
each other's entries unless they share an instance on purpose.

Example::

    from jsondelta import DiffEngine
    from jsondelta.cache import DiffCache

    cache = DiffCache(max_size=64)
    engine = DiffEngine(cache=cache)
    engine.compare(left_text, right_text)   # computed
    engine.compare(left_text, right_text)   # served from cache
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Callable

from cachetools import LRUCache

from .models import CompareSettings


def cache_key(left: Any, right: Any, settings: CompareSettings) -> str:
    """SHA-256 of the JSON form of the comparison inputs.

    Document keys keep their insertion order, which fixes the entry order.
    Only the settings are serialized with sorted keys.
    """
    documents = json.dumps([left, right], ensure_ascii=False, separators=(",", ":"))
    options = json.dumps(settings.to_dict(), sort_keys=True, separators=(",", ":"))
    payload = f"{documents}\n{options}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class DiffCache:
    """LRU cache of diff entry tuples keyed by inputs and settings.

    Args:
        max_size: Maximum number of comparisons to keep. The least recently
            used one is evicted silently when exceeded.
    """

    def __init__(self, max_size: int = 128) -> None:
        self._cache: LRUCache[str, tuple] = LRUCache(maxsize=max_size)
        self.hits = 0
        self.misses = 0

    @property
    def max_size(self) -> int:
        return int(self._cache.maxsize)

    @property
    def curr_size(self) -> int:
        return int(self._cache.currsize)

    def get_or_compute(
        self,
        left: Any,
        right: Any,
        settings: CompareSettings,
        compute: Callable[[Any, Any, CompareSettings], tuple],
    ) -> tuple:
        """Return cached entries for the inputs, computing and storing them on a miss."""
        key = cache_key(left, right, settings)
        entries = self._cache.get(key)
        if entries is not None:
            self.hits += 1
            return entries

        self.misses += 1
        entries = tuple(compute(left, right, settings))
        self._cache[key] = entries
        return entries

    def clear(self) -> None:
        self._cache.clear()
        self.hits = 0
        self.misses = 0
