from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol, Sequence

from returns.result import Result

from order_workflow.core.domain.model.errors import AppError
from order_workflow.core.domain.model.order import OrderStatus


@dataclass(frozen=True)
class OrderLineRequest:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class CreateOrderCommand:
    user_id: int
    items: Sequence[OrderLineRequest]


@dataclass(frozen=True)
class OrderItemDto:
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


@dataclass(frozen=True)
class OrderDto:
    id: str
    user_id: int
    items: tuple[OrderItemDto, ...]
    total: Decimal
    status: OrderStatus
    created_at: datetime
    updated_at: datetime


class CreateOrderUseCase(Protocol):
    async def create_order(
        self, command: CreateOrderCommand
    ) -> Result[OrderDto, AppError]: ...
