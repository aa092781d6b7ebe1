from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from order_workflow.core.domain.model.notification import NotificationMessage
from order_workflow.core.domain.model.order import Order, OrderStatus
from order_workflow.core.domain.service.background import BackgroundTasks
from order_workflow.core.domain.service.mapping import dump_order
from order_workflow.core.domain.service.notifications import (
    order_created_message,
    status_changed_message,
)
from order_workflow.core.ports.inbound.create_order import OrderDto
from order_workflow.core.ports.outbound.cache import (
    CacheStore,
    order_key,
    user_orders_key,
)
from order_workflow.core.ports.outbound.notifications import NotificationQueue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderSideEffects:
    """
    Cache maintenance and notification dispatch after a successful write.

    Every effect is submitted as its own detached task; failures are logged
    at WARNING and never reach the caller.
    """

    cache: CacheStore
    notifications: NotificationQueue
    background: BackgroundTasks
    cache_ttl: timedelta
    admin_email: str = ""

    def order_created(self, order: Order, dto: OrderDto) -> None:
        self.background.submit(
            self._invalidate(user_orders_key(order.user_id)), name="cache-invalidate"
        )
        self.background.submit(self._write_through(dto), name="cache-write")
        self._notify(lambda to: order_created_message(order, to), "order creation")

    def status_changed(self, order: Order, previous: OrderStatus) -> None:
        self.background.submit(
            self._invalidate(order_key(order.id), user_orders_key(order.user_id)),
            name="cache-invalidate",
        )
        self._notify(
            lambda to: status_changed_message(order, previous, to), "status change"
        )

    # ---- detached bodies ---------------------------------------------------

    async def _invalidate(self, *keys: str) -> None:
        try:
            for key in keys:
                await self.cache.remove(key)
            logger.debug("Cache invalidated: %s", ", ".join(keys))
        except Exception:
            logger.warning("Failed to invalidate cache keys %s", keys, exc_info=True)

    async def _write_through(self, dto: OrderDto) -> None:
        key = order_key(dto.id)
        try:
            await self.cache.set(key, dump_order(dto), self.cache_ttl)
            logger.debug("Cached new order under %s", key)
        except Exception:
            logger.warning("Failed to cache new order %s", dto.id, exc_info=True)

    def _notify(self, build, what: str) -> None:
        if not self.admin_email:
            logger.debug("No admin e-mail configured; skipping %s notification", what)
            return
        self.background.submit(
            self._enqueue(build(self.admin_email), what), name="notification"
        )

    async def _enqueue(self, message: NotificationMessage, what: str) -> None:
        try:
            await self.notifications.enqueue(message)
            logger.debug("Notification queued for %s: %s", what, message.subject)
        except Exception:
            logger.warning(
                "Failed to queue notification for %s; dropping it", what, exc_info=True
            )
