from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from order_workflow.core.domain.model.errors import AppError
from order_workflow.core.ports.inbound.create_order import OrderDto


@dataclass(frozen=True)
class UpdateStatusCommand:
    order_id: str
    new_status: str  # one of OrderStatus values, checked by the use case


class UpdateStatusUseCase(Protocol):
    async def update_status(
        self, command: UpdateStatusCommand
    ) -> Result[OrderDto, AppError]: ...
