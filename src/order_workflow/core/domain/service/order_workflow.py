from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Sequence, Tuple

from returns.result import Failure, Result, Success

from order_workflow.core.domain.model.errors import (
    AppError,
    BusinessRuleError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from order_workflow.core.domain.model.order import Order, OrderItem, OrderStatus, Product
from order_workflow.core.domain.service.background import BackgroundTasks
from order_workflow.core.domain.service.compensation import Reservation, StockCompensator
from order_workflow.core.domain.service.mapping import (
    dump_order,
    dump_orders,
    load_order,
    load_orders,
    to_dto,
)
from order_workflow.core.domain.service.side_effects import OrderSideEffects
from order_workflow.core.ports.inbound.create_order import (
    CreateOrderCommand,
    CreateOrderUseCase,
    OrderDto,
    OrderLineRequest,
)
from order_workflow.core.ports.inbound.find_orders import FindOrdersUseCase
from order_workflow.core.ports.inbound.update_status import (
    UpdateStatusCommand,
    UpdateStatusUseCase,
)
from order_workflow.core.ports.outbound.cache import (
    CacheStore,
    order_key,
    user_orders_key,
)
from order_workflow.core.ports.outbound.inventory import InventoryStore
from order_workflow.core.ports.outbound.notifications import NotificationQueue
from order_workflow.core.ports.outbound.orders import OrderStore

logger = logging.getLogger(__name__)

EMPTY_ORDER = "order must contain at least one item"


@dataclass(frozen=True)
class OrderWorkflowDeps:
    inventory: InventoryStore
    orders: OrderStore
    cache: CacheStore
    notifications: NotificationQueue
    background: BackgroundTasks
    cache_ttl: timedelta = timedelta(minutes=5)
    admin_email: str = ""


@dataclass(frozen=True)
class OrderWorkflow(CreateOrderUseCase, UpdateStatusUseCase, FindOrdersUseCase):
    """
    Places orders across two stores: stock lives in the inventory store,
    orders in the document store. There is no transaction spanning them.

    Known gaps:
    - stock is validated against one read and decremented against a second,
      fresh read with a plain point write, so concurrent orders can oversell;
    - compensation after a failed write is detached and best-effort;
    - any status may move to any other status.
    """

    deps: OrderWorkflowDeps

    @property
    def _compensator(self) -> StockCompensator:
        return StockCompensator(self.deps.inventory, self.deps.background)

    @property
    def _side_effects(self) -> OrderSideEffects:
        return OrderSideEffects(
            cache=self.deps.cache,
            notifications=self.deps.notifications,
            background=self.deps.background,
            cache_ttl=self.deps.cache_ttl,
            admin_email=self.deps.admin_email,
        )

    # ---- create ------------------------------------------------------------

    async def create_order(
        self, command: CreateOrderCommand
    ) -> Result[OrderDto, AppError]:
        logger.info(
            "Creating order for user %s with %d item(s)",
            command.user_id,
            len(command.items),
        )
        if not command.items:
            return Failure(ValidationError(EMPTY_ORDER))

        validated = await self._validate_lines(command.items)
        if isinstance(validated, Failure):
            return validated

        reserved = await self._reserve_stock(command.items)
        if isinstance(reserved, Failure):
            return reserved

        order = Order.new(command.user_id, validated.unwrap())
        return await self._persist(order, reserved.unwrap())

    async def _validate_lines(
        self, lines: Sequence[OrderLineRequest]
    ) -> Result[Tuple[OrderItem, ...], AppError]:
        # Single pass before any write. Stock read here is not re-checked later;
        # repeated lines for one product are checked against what is left.
        items: list[OrderItem] = []
        requested: dict[int, int] = {}
        for line in lines:
            if line.quantity <= 0:
                return Failure(
                    ValidationError(
                        f"quantity must be greater than 0 for product {line.product_id}"
                    )
                )
            try:
                product = await self.deps.inventory.get(line.product_id)
            except Exception:
                logger.error("Failed to load product %s", line.product_id, exc_info=True)
                return Failure(InternalError("failed to load products"))

            if product is None:
                logger.warning("Product not found: %s", line.product_id)
                return Failure(NotFoundError(f"product {line.product_id} not found"))

            checked = _check_stock(product, line, requested.get(product.id, 0))
            if isinstance(checked, Failure):
                return checked
            requested[product.id] = requested.get(product.id, 0) + line.quantity
            items.append(checked.unwrap())
        return Success(tuple(items))

    async def _reserve_stock(
        self, lines: Sequence[OrderLineRequest]
    ) -> Result[Tuple[Reservation, ...], AppError]:
        reserved: list[Reservation] = []
        for line in lines:
            try:
                product = await self.deps.inventory.get(line.product_id)
                if product is not None:
                    await self.deps.inventory.update(
                        product.with_stock(product.stock - line.quantity)
                    )
            except Exception:
                logger.error(
                    "Failed to reserve stock for product %s", line.product_id, exc_info=True
                )
                product = None

            if product is None:
                self._compensator.schedule(reserved, reason="reservation failure")
                return Failure(InternalError("failed to reserve stock"))

            reserved.append(Reservation(line.product_id, line.quantity))
            logger.debug(
                "Stock reserved for product %s, new stock: %d",
                product.id,
                product.stock - line.quantity,
            )
        return Success(tuple(reserved))

    async def _persist(
        self, order: Order, reserved: Sequence[Reservation]
    ) -> Result[OrderDto, AppError]:
        try:
            order_id = await self.deps.orders.insert(order)
        except Exception:
            logger.error(
                "Failed to persist order, attempting stock compensation", exc_info=True
            )
            self._compensator.schedule(reserved, reason="order persistence failure")
            return Failure(InternalError("failed to create order"))

        saved = order.with_id(order_id)
        logger.info(
            "Order %s created for user %s, total %s", order_id, saved.user_id, saved.total
        )
        dto = to_dto(saved)
        self._side_effects.order_created(saved, dto)
        return Success(dto)

    # ---- status ------------------------------------------------------------

    async def update_status(
        self, command: UpdateStatusCommand
    ) -> Result[OrderDto, AppError]:
        logger.info(
            "Updating order %s status to %s", command.order_id, command.new_status
        )
        parsed = _parse_status(command.new_status)
        if isinstance(parsed, Failure):
            return parsed

        found = await self._load_order(command.order_id)
        if isinstance(found, Failure):
            return found

        current = found.unwrap()
        # No transition table: every target status is accepted from every state.
        updated = current.with_status(parsed.unwrap())
        try:
            await self.deps.orders.update(updated)
        except Exception:
            logger.error(
                "Failed to update status of order %s", command.order_id, exc_info=True
            )
            return Failure(InternalError("failed to update order status"))

        logger.info(
            "Order %s status updated from %s to %s",
            command.order_id,
            current.status.value,
            updated.status.value,
        )
        self._side_effects.status_changed(updated, previous=current.status)
        return Success(to_dto(updated))

    # ---- reads (cache-aside) -------------------------------------------------

    async def find_by_id(self, order_id: str) -> Result[OrderDto, AppError]:
        logger.info("Finding order %s", order_id)
        key = order_key(order_id)

        cached = load_order(await self._cache_get(key))
        if cached is not None:
            logger.info("Returning order %s from cache", order_id)
            return Success(cached)

        found = (await self._load_order(order_id)).map(to_dto)
        if isinstance(found, Success):
            await self._cache_put(key, dump_order(found.unwrap()))
        return found

    async def find_by_user_id(
        self, user_id: int
    ) -> Result[Sequence[OrderDto], AppError]:
        logger.info("Finding orders for user %s", user_id)
        key = user_orders_key(user_id)

        cached = load_orders(await self._cache_get(key))
        if cached is not None:
            logger.info("Returning orders for user %s from cache", user_id)
            return Success(cached)

        try:
            orders = await self.deps.orders.find_by_user_id(user_id)
        except Exception:
            logger.error("Failed to load orders for user %s", user_id, exc_info=True)
            return Failure(InternalError("failed to load orders"))

        dtos = tuple(to_dto(o) for o in orders)
        await self._cache_put(key, dump_orders(dtos))
        return Success(dtos)

    async def find_all(self) -> Result[Sequence[OrderDto], AppError]:
        logger.info("Finding all orders")
        try:
            orders = await self.deps.orders.find_all()
        except Exception:
            logger.error("Failed to load orders", exc_info=True)
            return Failure(InternalError("failed to load orders"))
        return Success(tuple(to_dto(o) for o in orders))

    # ---- helpers -----------------------------------------------------------

    async def _load_order(self, order_id: str) -> Result[Order, AppError]:
        try:
            order = await self.deps.orders.find_by_id(order_id)
        except Exception:
            logger.error("Failed to load order %s", order_id, exc_info=True)
            return Failure(InternalError("failed to load orders"))
        if order is None:
            logger.warning("Order not found: %s", order_id)
            return Failure(NotFoundError(f"order {order_id} not found"))
        return Success(order)

    async def _cache_get(self, key: str):
        try:
            return await self.deps.cache.get(key)
        except Exception:
            logger.warning("Cache read failed for %s", key, exc_info=True)
            return None

    async def _cache_put(self, key: str, payload) -> None:
        try:
            await self.deps.cache.set(key, payload, self.deps.cache_ttl)
        except Exception:
            logger.warning("Cache write failed for %s", key, exc_info=True)


# ---- pure helpers ----------------------------------------------------------


def _check_stock(
    product: Product, line: OrderLineRequest, already_requested: int = 0
) -> Result[OrderItem, AppError]:
    available = product.stock - already_requested
    if available < line.quantity:
        return Failure(
            BusinessRuleError(
                f"insufficient stock for product {product.name}"
                f" (id {product.id}): available {available},"
                f" requested {line.quantity}",
                product_id=product.id,
                available=available,
                requested=line.quantity,
            )
        )
    return Success(OrderItem.snapshot(product, line.quantity))


def _parse_status(raw: str) -> Result[OrderStatus, AppError]:
    allowed = OrderStatus.values()
    if raw not in allowed:
        return Failure(
            ValidationError(
                f"invalid status {raw!r}; allowed values: {', '.join(allowed)}",
                allowed=allowed,
            )
        )
    return Success(OrderStatus(raw))
