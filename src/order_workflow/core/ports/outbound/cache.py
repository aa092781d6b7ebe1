from __future__ import annotations

from datetime import timedelta
from typing import Any, Protocol


def order_key(order_id: str) -> str:
    return f"orders:{order_id}"


def user_orders_key(user_id: int) -> str:
    return f"orders:user:{user_id}"


class CacheStore(Protocol):
    """
    Key/value cache holding JSON-compatible payloads.
    Best-effort: implementations log their own failures instead of raising,
    and report a miss as None.
    """

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl: timedelta) -> None: ...

    async def remove(self, key: str) -> None: ...
