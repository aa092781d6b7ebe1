from __future__ import annotations

from typing import Protocol

from order_workflow.core.domain.model.order import Product


class InventoryStore(Protocol):
    """
    Relational product store. Point reads and point writes only: there is no
    conditional update, so a read followed by a write is not atomic.
    Failures are raised as StoreError.
    """

    async def get(self, product_id: int) -> Product | None: ...

    async def update(self, product: Product) -> None: ...
