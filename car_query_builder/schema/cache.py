"""
Tagged cache for enriched catalog data.

The backing dataset is static, so entries never expire on their own. They are
dropped only when their tag is invalidated.
"""

import logging
import threading
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class EnrichmentCache:
    """Keyed store with manual, tag-based invalidation."""

    def __init__(self):
        self._entries: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, tag: str) -> Optional[Any]:
        with self._lock:
            return self._entries.get(tag)

    def set(self, tag: str, value: Any) -> None:
        with self._lock:
            self._entries[tag] = value

    def get_or_load(self, tag: str, loader: Callable[[], Any]) -> Any:
        """
        Return the entry for `tag`, calling `loader` only on a miss.

        The loader runs outside the lock; concurrent misses may both load,
        the last one wins.
        """
        cached = self.get(tag)
        if cached is not None:
            return cached

        logger.debug("Cache miss for tag '%s'", tag)
        value = loader()
        self.set(tag, value)
        return value

    def invalidate(self, tag: str) -> bool:
        """Drop the entry for `tag`. Returns True if something was cached."""
        with self._lock:
            removed = self._entries.pop(tag, None) is not None
        if removed:
            logger.info("Invalidated cache tag '%s'", tag)
        return removed

    def __contains__(self, tag: str) -> bool:
        with self._lock:
            return tag in self._entries
