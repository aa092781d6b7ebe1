from __future__ import annotations

from datetime import timedelta

import pytest
from returns.result import Success

from order_workflow.core.domain.model.errors import (
    InternalError,
    NotFoundError,
    ValidationError,
)
from order_workflow.core.domain.model.order import OrderStatus
from order_workflow.core.ports.inbound.update_status import UpdateStatusCommand
from order_workflow.core.ports.outbound.cache import order_key, user_orders_key
from tests.fakes import USER_ID, order_of


async def _place(workflow, background) -> str:
    result = await workflow.create_order(order_of((1, 1)))
    await background.await_all()
    return result.unwrap().id


async def _set_status(workflow, order_id: str, status: str):
    return await workflow.update_status(UpdateStatusCommand(order_id, status))


@pytest.mark.asyncio
async def test_unknown_status_lists_allowed_values(workflow, background):
    order_id = await _place(workflow, background)

    err = (await _set_status(workflow, order_id, "LOST")).failure()

    assert isinstance(err, ValidationError)
    assert err.allowed == ("PENDING", "PROCESSING", "SHIPPED", "DELIVERED", "CANCELLED")
    assert "PENDING, PROCESSING, SHIPPED, DELIVERED, CANCELLED" in err.message


@pytest.mark.asyncio
async def test_status_is_case_sensitive(workflow, background):
    order_id = await _place(workflow, background)

    err = (await _set_status(workflow, order_id, "shipped")).failure()

    assert isinstance(err, ValidationError)


@pytest.mark.asyncio
async def test_invalid_status_checked_before_lookup(workflow):
    err = (await _set_status(workflow, "missing", "LOST")).failure()

    assert isinstance(err, ValidationError)


@pytest.mark.asyncio
async def test_unknown_order(workflow):
    err = (await _set_status(workflow, "0" * 24, "SHIPPED")).failure()

    assert isinstance(err, NotFoundError)


@pytest.mark.asyncio
async def test_cancelled_order_can_be_shipped(workflow, orders, background):
    order_id = await _place(workflow, background)
    await _set_status(workflow, order_id, "CANCELLED")

    result = await _set_status(workflow, order_id, "SHIPPED")

    assert isinstance(result, Success)
    assert result.unwrap().status is OrderStatus.SHIPPED
    assert (await orders.find_by_id(order_id)).status is OrderStatus.SHIPPED


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "source,target",
    [
        ("CANCELLED", "PENDING"),
        ("DELIVERED", "PROCESSING"),
        ("SHIPPED", "PENDING"),
        ("PENDING", "PENDING"),
    ],
)
async def test_any_transition_is_accepted(workflow, background, source, target):
    order_id = await _place(workflow, background)
    await _set_status(workflow, order_id, source)

    result = await _set_status(workflow, order_id, target)

    assert result.unwrap().status.value == target


@pytest.mark.asyncio
async def test_update_refreshes_updated_at_only(workflow, orders, background):
    order_id = await _place(workflow, background)
    before = await orders.find_by_id(order_id)

    dto = (await _set_status(workflow, order_id, "PROCESSING")).unwrap()

    assert dto.created_at == before.created_at
    assert dto.updated_at >= before.updated_at
    assert dto.total == before.total
    assert [it.product_id for it in dto.items] == [it.product_id for it in before.items]


@pytest.mark.asyncio
async def test_update_invalidates_caches_and_notifies(workflow, cache, queue, background):
    order_id = await _place(workflow, background)
    queue.drain_nowait()
    await cache.set(user_orders_key(USER_ID), [], timedelta(minutes=5))
    assert order_key(order_id) in cache

    await _set_status(workflow, order_id, "SHIPPED")
    await background.await_all()

    assert order_key(order_id) not in cache
    assert user_orders_key(USER_ID) not in cache
    [message] = queue.drain_nowait()
    assert message.subject == f"Order #{order_id} - status change"
    assert "PENDING" in message.body
    assert "SHIPPED" in message.body


@pytest.mark.asyncio
async def test_store_failure_becomes_internal_error(workflow, orders, background):
    order_id = await _place(workflow, background)
    orders.fail = True

    err = (await _set_status(workflow, order_id, "SHIPPED")).failure()

    assert isinstance(err, InternalError)
    assert err.message == "failed to update order status"
