from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable

from order_workflow.core.domain.model.errors import StoreError
from order_workflow.core.domain.model.order import Product
from order_workflow.core.ports.outbound.inventory import InventoryStore


@dataclass
class InMemoryInventoryStore(InventoryStore):
    _products: Dict[int, Product] = field(default_factory=dict)

    @classmethod
    def with_products(cls, products: Iterable[Product]) -> "InMemoryInventoryStore":
        return cls({p.id: p for p in products})

    async def get(self, product_id: int) -> Product | None:
        return self._products.get(product_id)

    async def update(self, product: Product) -> None:
        if product.id not in self._products:
            raise StoreError(f"product {product.id} does not exist")
        self._products[product.id] = product

    def stock_of(self, product_id: int) -> int:
        return self._products[product_id].stock
