from __future__ import annotations

import copy
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Dict, Tuple

from order_workflow.core.ports.outbound.cache import CacheStore


@dataclass
class InMemoryCacheStore(CacheStore):
    """Process-local TTL cache. Values are deep-copied in and out."""

    clock: Callable[[], float] = time.monotonic
    _entries: Dict[str, Tuple[Any, float]] = field(default_factory=dict)

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.clock() >= expires_at:
            del self._entries[key]
            return None
        return copy.deepcopy(value)

    async def set(self, key: str, value: Any, ttl: timedelta) -> None:
        self._entries[key] = (copy.deepcopy(value), self.clock() + ttl.total_seconds())

    async def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self.clock() < entry[1]
