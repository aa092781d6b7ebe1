from __future__ import annotations

from typing import Protocol, Sequence

from order_workflow.core.domain.model.order import Order


class OrderStore(Protocol):
    async def insert(self, order: Order) -> str:
        """Persist a new order document and return the id assigned to it."""
        ...

    async def update(self, order: Order) -> None: ...

    async def find_by_id(self, order_id: str) -> Order | None: ...

    async def find_by_user_id(self, user_id: int) -> Sequence[Order]: ...

    async def find_all(self) -> Sequence[Order]: ...
