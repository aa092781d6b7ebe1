from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from decimal import Decimal

from fastapi import FastAPI

from order_workflow.adapters.inbound.web import create_app
from order_workflow.adapters.outbound.in_memory_cache import InMemoryCacheStore
from order_workflow.adapters.outbound.in_memory_inventory import InMemoryInventoryStore
from order_workflow.adapters.outbound.in_memory_orders import InMemoryOrderStore
from order_workflow.adapters.outbound.logging_email import LoggingEmailSender
from order_workflow.adapters.outbound.queue_notifications import (
    AsyncioNotificationQueue,
    NotificationWorker,
)
from order_workflow.adapters.outbound.redis_cache import RedisCacheStore
from order_workflow.config import Settings, get_settings
from order_workflow.core.domain.model.order import Product
from order_workflow.core.domain.service.background import BackgroundTasks
from order_workflow.core.domain.service.order_workflow import (
    OrderWorkflow,
    OrderWorkflowDeps,
)
from order_workflow.core.ports.outbound.cache import CacheStore
from order_workflow.logging_config import configure_logging

logger = logging.getLogger(__name__)

DEMO_PRODUCTS = (
    Product(id=1, name="Laptop", price=Decimal("999.99"), stock=10),
    Product(id=2, name="Mouse", price=Decimal("19.90"), stock=50),
    Product(id=3, name="Keyboard", price=Decimal("49.00"), stock=5),
)


@dataclass(frozen=True)
class Container:
    workflow: OrderWorkflow
    inventory: InMemoryInventoryStore
    orders: InMemoryOrderStore
    cache: CacheStore
    queue: AsyncioNotificationQueue
    worker: NotificationWorker
    background: BackgroundTasks


def build_cache(settings: Settings) -> CacheStore:
    if settings.cache_backend == "redis":
        logger.info("Using Redis cache at %s", settings.redis_url)
        return RedisCacheStore.from_url(settings.redis_url)
    return InMemoryCacheStore()


def build_container(settings: Settings | None = None) -> Container:
    settings = settings or get_settings()

    inventory = InMemoryInventoryStore.with_products(DEMO_PRODUCTS)
    orders = InMemoryOrderStore()
    cache = build_cache(settings)
    queue = AsyncioNotificationQueue()
    background = BackgroundTasks()

    workflow = OrderWorkflow(
        OrderWorkflowDeps(
            inventory=inventory,
            orders=orders,
            cache=cache,
            notifications=queue,
            background=background,
            cache_ttl=settings.cache_ttl,
            admin_email=settings.admin_email,
        )
    )
    return Container(
        workflow=workflow,
        inventory=inventory,
        orders=orders,
        cache=cache,
        queue=queue,
        worker=NotificationWorker(queue, LoggingEmailSender()),
        background=background,
    )


def build_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    container = build_container(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        container.worker.start()
        yield
        timeout = settings.shutdown_timeout_seconds
        await container.background.await_all(timeout=timeout)
        await container.worker.stop(timeout=timeout)
        if isinstance(container.cache, RedisCacheStore):
            await container.cache.close()

    app = create_app(
        container.workflow, container.workflow, container.workflow, lifespan=lifespan
    )
    app.state.container = container
    return app


def create_asgi_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    return build_app(settings)
