from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from order_workflow.core.domain.service.background import BackgroundTasks
from order_workflow.core.ports.outbound.inventory import InventoryStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reservation:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class StockCompensator:
    """
    Gives reserved stock back after a later step of order creation failed.

    Restoration runs as a detached task: the caller gets its error right away
    and is never told whether the stock came back. A failed restore is logged
    as critical and not retried, so stock can stay under-counted.
    """

    inventory: InventoryStore
    background: BackgroundTasks

    def schedule(self, reservations: Sequence[Reservation], reason: str) -> None:
        if not reservations:
            return
        self.background.submit(
            self.restore(tuple(reservations), reason), name="stock-compensation"
        )

    async def restore(self, reservations: Sequence[Reservation], reason: str) -> int:
        """Add each reserved quantity back. Returns how many lines were restored."""
        restored = 0
        for r in reservations:
            try:
                product = await self.inventory.get(r.product_id)
                if product is None:
                    logger.critical(
                        "CRITICAL: cannot restore %d unit(s) of product %s after %s: "
                        "product no longer exists",
                        r.quantity,
                        r.product_id,
                        reason,
                    )
                    continue
                await self.inventory.update(product.with_stock(product.stock + r.quantity))
            except Exception:
                logger.critical(
                    "CRITICAL: failed to restore %d unit(s) of product %s after %s",
                    r.quantity,
                    r.product_id,
                    reason,
                    exc_info=True,
                )
                continue

            restored += 1
            logger.info(
                "Stock restored for product %s (+%d) after %s",
                r.product_id,
                r.quantity,
                reason,
            )
        return restored
