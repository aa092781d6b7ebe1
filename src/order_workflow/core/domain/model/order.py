from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Tuple

CENTS = Decimal("0.01")


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(s.value for s in cls)


def money(amount: Decimal | int | str) -> Decimal:
    return Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    total = money(0)
    for v in values:
        total = total + v
    return total


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    price: Decimal
    stock: int

    def with_stock(self, stock: int) -> "Product":
        return replace(self, stock=stock)


@dataclass(frozen=True)
class OrderItem:
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    @staticmethod
    def snapshot(product: Product, quantity: int) -> "OrderItem":
        """Freeze the product's current name and price into an order line."""
        return OrderItem(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price=product.price,
            subtotal=product.price * quantity,
        )


@dataclass(frozen=True)
class Order:
    user_id: int
    items: Tuple[OrderItem, ...]
    total: Decimal
    status: OrderStatus
    created_at: datetime
    updated_at: datetime
    id: str | None = None

    @staticmethod
    def new(user_id: int, items: Tuple[OrderItem, ...]) -> "Order":
        now = now_utc()
        return Order(
            user_id=user_id,
            items=items,
            total=sum_money(it.subtotal for it in items),
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    def with_id(self, order_id: str) -> "Order":
        return replace(self, id=order_id)

    def with_status(self, status: OrderStatus) -> "Order":
        return replace(self, status=status, updated_at=now_utc())


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
