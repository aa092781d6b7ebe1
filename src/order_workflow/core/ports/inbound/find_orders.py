from __future__ import annotations

from typing import Protocol, Sequence

from returns.result import Result

from order_workflow.core.domain.model.errors import AppError
from order_workflow.core.ports.inbound.create_order import OrderDto


class FindOrdersUseCase(Protocol):
    async def find_by_id(self, order_id: str) -> Result[OrderDto, AppError]: ...

    async def find_by_user_id(
        self, user_id: int
    ) -> Result[Sequence[OrderDto], AppError]: ...

    async def find_all(self) -> Result[Sequence[OrderDto], AppError]: ...
