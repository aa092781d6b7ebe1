from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Dict, Sequence

from order_workflow.core.domain.model.errors import StoreError
from order_workflow.core.domain.model.order import Order
from order_workflow.core.ports.outbound.orders import OrderStore


def new_document_id() -> str:
    # 24 hex chars, same shape as a Mongo ObjectId
    return secrets.token_hex(12)


@dataclass
class InMemoryOrderStore(OrderStore):
    _store: Dict[str, Order] = field(default_factory=dict)
    fail: bool = False

    async def insert(self, order: Order) -> str:
        if self.fail:
            raise StoreError("order store is down")
        order_id = new_document_id()
        self._store[order_id] = order.with_id(order_id)
        return order_id

    async def update(self, order: Order) -> None:
        if self.fail:
            raise StoreError("order store is down")
        if order.id is None or order.id not in self._store:
            raise StoreError(f"order {order.id} does not exist")
        self._store[order.id] = order

    async def find_by_id(self, order_id: str) -> Order | None:
        return self._store.get(order_id)

    async def find_by_user_id(self, user_id: int) -> Sequence[Order]:
        return tuple(o for o in self._store.values() if o.user_id == user_id)

    async def find_all(self) -> Sequence[Order]:
        return tuple(self._store.values())
