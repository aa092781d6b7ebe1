"""
Tests for stock compensation after a failed write.

Compensation is detached: the caller gets InternalError straight away and
the stock comes back only once the background task has run.
"""

from __future__ import annotations

import logging

import pytest
from returns.result import Failure

from order_workflow.core.domain.model.errors import InternalError
from order_workflow.core.domain.service.background import BackgroundTasks
from order_workflow.core.domain.service.compensation import Reservation, StockCompensator
from tests.fakes import FlakyInventoryStore, order_of


@pytest.fixture
def flaky(widget, gadget) -> FlakyInventoryStore:
    return FlakyInventoryStore.with_products([widget, gadget])


@pytest.mark.asyncio
async def test_failed_insert_restores_stock_eventually(workflow, inventory, orders, background):
    orders.fail = True

    result = await workflow.create_order(order_of((1, 2), (2, 4)))

    assert isinstance(result, Failure)
    err = result.failure()
    assert isinstance(err, InternalError)
    assert err.message == "failed to create order"

    # Not yet restored: the caller does not wait for compensation.
    assert inventory.stock_of(1) == 3
    assert inventory.stock_of(2) == 6

    await background.await_all()

    assert inventory.stock_of(1) == 5
    assert inventory.stock_of(2) == 10
    assert orders.fail and await orders.find_all() == ()


@pytest.mark.asyncio
async def test_failed_insert_has_no_side_effects(workflow, orders, queue, background):
    orders.fail = True

    await workflow.create_order(order_of((1, 1)))
    await background.await_all()

    assert queue.drain_nowait() == []


@pytest.mark.asyncio
async def test_reservation_failure_rolls_back_earlier_lines(
    make_workflow, flaky, orders, background
):
    flaky.fail_for = {2}
    workflow = make_workflow(inventory=flaky)

    result = await workflow.create_order(order_of((1, 2), (2, 1)))

    err = result.failure()
    assert isinstance(err, InternalError)
    assert err.message == "failed to reserve stock"
    assert flaky.stock_of(1) == 3

    await background.await_all()

    assert flaky.stock_of(1) == 5
    assert flaky.stock_of(2) == 10
    assert await orders.find_all() == ()


@pytest.mark.asyncio
async def test_reservation_failure_on_first_line_schedules_nothing(
    make_workflow, flaky, background
):
    flaky.fail_for = {1}
    workflow = make_workflow(inventory=flaky)

    result = await workflow.create_order(order_of((1, 2), (2, 1)))

    assert isinstance(result.failure(), InternalError)
    assert background.pending_count == 0
    assert flaky.stock_of(1) == 5
    assert flaky.stock_of(2) == 10


@pytest.mark.asyncio
async def test_failed_restore_is_critical_and_not_retried(
    make_workflow, flaky, orders, background, caplog
):
    # Reservation writes succeed, every later write fails.
    flaky.fail_after = 2
    orders.fail = True
    workflow = make_workflow(inventory=flaky)

    with caplog.at_level(logging.CRITICAL):
        result = await workflow.create_order(order_of((1, 2), (2, 4)))
        await background.await_all()

    assert isinstance(result.failure(), InternalError)
    assert flaky.stock_of(1) == 3
    assert flaky.stock_of(2) == 6
    critical = [r for r in caplog.records if r.levelno == logging.CRITICAL]
    assert len(critical) == 2
    assert "failed to restore 2 unit(s) of product 1" in critical[0].getMessage()


@pytest.mark.asyncio
async def test_restore_continues_past_a_failed_line(flaky):
    flaky.fail_for = {1}
    compensator = StockCompensator(flaky, BackgroundTasks())

    restored = await compensator.restore(
        [Reservation(1, 2), Reservation(2, 3)], reason="test"
    )

    assert restored == 1
    assert flaky.stock_of(1) == 5
    assert flaky.stock_of(2) == 13


@pytest.mark.asyncio
async def test_restore_of_vanished_product_is_critical(inventory, caplog):
    compensator = StockCompensator(inventory, BackgroundTasks())

    with caplog.at_level(logging.CRITICAL):
        restored = await compensator.restore([Reservation(404, 1)], reason="test")

    assert restored == 0
    assert "product no longer exists" in caplog.text


@pytest.mark.asyncio
async def test_schedule_with_nothing_reserved_is_a_no_op(inventory):
    background = BackgroundTasks()
    StockCompensator(inventory, background).schedule([], reason="test")

    assert background.pending_count == 0
