from __future__ import annotations

import logging
from typing import Any, Sequence

from pydantic import TypeAdapter
from pydantic import ValidationError as PayloadError

from order_workflow.core.domain.model.order import Order
from order_workflow.core.ports.inbound.create_order import OrderDto, OrderItemDto

logger = logging.getLogger(__name__)

_ORDER = TypeAdapter(OrderDto)
_ORDER_LIST = TypeAdapter(list[OrderDto])


def to_dto(order: Order) -> OrderDto:
    if order.id is None:
        raise ValueError("order has not been persisted yet")
    return OrderDto(
        id=order.id,
        user_id=order.user_id,
        items=tuple(
            OrderItemDto(
                product_id=it.product_id,
                product_name=it.product_name,
                quantity=it.quantity,
                unit_price=it.unit_price,
                subtotal=it.subtotal,
            )
            for it in order.items
        ),
        total=order.total,
        status=order.status,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


# ---- cache payloads (JSON-compatible) --------------------------------------


def dump_order(dto: OrderDto) -> dict[str, Any]:
    return _ORDER.dump_python(dto, mode="json")


def dump_orders(dtos: Sequence[OrderDto]) -> list[dict[str, Any]]:
    return _ORDER_LIST.dump_python(list(dtos), mode="json")


def load_order(payload: Any) -> OrderDto | None:
    if payload is None:
        return None
    try:
        return _ORDER.validate_python(payload)
    except PayloadError:
        logger.warning("Discarding malformed cached order payload")
        return None


def load_orders(payload: Any) -> tuple[OrderDto, ...] | None:
    if payload is None:
        return None
    try:
        return tuple(_ORDER_LIST.validate_python(payload))
    except PayloadError:
        logger.warning("Discarding malformed cached order list payload")
        return None
