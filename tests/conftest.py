"""
Shared fixtures for the order workflow tests.

The workflow is wired to in-memory collaborators. Detached work
(compensation, cache maintenance, notifications) is tracked by the
``background`` fixture; tests call ``await background.await_all()`` before
asserting on it.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import Any, Callable

import pytest

from order_workflow.adapters.outbound.in_memory_cache import InMemoryCacheStore
from order_workflow.adapters.outbound.in_memory_inventory import InMemoryInventoryStore
from order_workflow.adapters.outbound.in_memory_orders import InMemoryOrderStore
from order_workflow.adapters.outbound.queue_notifications import AsyncioNotificationQueue
from order_workflow.core.domain.model.order import Product
from order_workflow.core.domain.service.background import BackgroundTasks
from order_workflow.core.domain.service.order_workflow import (
    OrderWorkflow,
    OrderWorkflowDeps,
)
from tests.fakes import ADMIN


@pytest.fixture
def widget() -> Product:
    return Product(id=1, name="Widget", price=Decimal("10.00"), stock=5)


@pytest.fixture
def gadget() -> Product:
    return Product(id=2, name="Gadget", price=Decimal("2.50"), stock=10)


@pytest.fixture
def inventory(widget: Product, gadget: Product) -> InMemoryInventoryStore:
    return InMemoryInventoryStore.with_products([widget, gadget])


@pytest.fixture
def orders() -> InMemoryOrderStore:
    return InMemoryOrderStore()


@pytest.fixture
def cache() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def queue() -> AsyncioNotificationQueue:
    return AsyncioNotificationQueue()


@pytest.fixture
def background() -> BackgroundTasks:
    return BackgroundTasks()


@pytest.fixture
def make_workflow(
    inventory: InMemoryInventoryStore,
    orders: InMemoryOrderStore,
    cache: InMemoryCacheStore,
    queue: AsyncioNotificationQueue,
    background: BackgroundTasks,
) -> Callable[..., OrderWorkflow]:
    """Build a workflow, replacing any collaborator passed as a keyword."""

    def _make(**overrides: Any) -> OrderWorkflow:
        deps: dict[str, Any] = {
            "inventory": inventory,
            "orders": orders,
            "cache": cache,
            "notifications": queue,
            "background": background,
            "cache_ttl": timedelta(minutes=5),
            "admin_email": ADMIN,
        }
        deps.update(overrides)
        return OrderWorkflow(OrderWorkflowDeps(**deps))

    return _make


@pytest.fixture
def workflow(make_workflow: Callable[..., OrderWorkflow]) -> OrderWorkflow:
    return make_workflow()
