from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from returns.result import Success

from order_workflow.core.domain.model.errors import (
    AppError,
    BusinessRuleError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from order_workflow.core.domain.model.order import money
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

# ---- HTTP DTOs (adapter layer) ---------------------------------------------


class OrderLineIn(BaseModel):
    # quantity is range-checked by the use case
    product_id: int = Field(examples=[1])
    quantity: int = Field(examples=[3])


class CreateOrderRequest(BaseModel):
    items: list[OrderLineIn]


class UpdateStatusRequest(BaseModel):
    status: str = Field(examples=["SHIPPED"])


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: str
    subtotal: str


class OrderOut(BaseModel):
    id: str
    user_id: int
    items: list[OrderItemOut]
    total: str
    status: str
    created_at: str
    updated_at: str


class ErrorResponse(BaseModel):
    type: str
    message: str
    details: list[dict[str, Any]] | None = None


# ---- Mapping helpers -------------------------------------------------------


def _to_out(dto: OrderDto) -> dict:
    return OrderOut(
        id=dto.id,
        user_id=dto.user_id,
        items=[
            OrderItemOut(
                product_id=it.product_id,
                product_name=it.product_name,
                quantity=it.quantity,
                unit_price=str(money(it.unit_price)),
                subtotal=str(money(it.subtotal)),
            )
            for it in dto.items
        ],
        total=str(money(dto.total)),
        status=dto.status.value,
        created_at=dto.created_at.isoformat(),
        updated_at=dto.updated_at.isoformat(),
    ).model_dump()


def _map_error_to_http(err: AppError) -> tuple[int, ErrorResponse]:
    if isinstance(err, ValidationError):
        details = [{"allowed": list(err.allowed)}] if err.allowed else None
        return 400, ErrorResponse(
            type=type(err).__name__, message=str(err), details=details
        )

    if isinstance(err, BusinessRuleError):
        return 400, ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, NotFoundError):
        return 404, ErrorResponse(type=type(err).__name__, message=str(err))

    if isinstance(err, InternalError):
        return 500, ErrorResponse(type=type(err).__name__, message=str(err))

    return 500, ErrorResponse(type=type(err).__name__, message=str(err))


def _error_response(err: AppError) -> JSONResponse:
    status, body = _map_error_to_http(err)
    return JSONResponse(status_code=status, content=body.model_dump())


# ---- App factory -----------------------------------------------------------


def create_app(
    create_order_uc: CreateOrderUseCase,
    update_status_uc: UpdateStatusUseCase,
    find_orders_uc: FindOrdersUseCase,
    lifespan: Any = None,
) -> FastAPI:
    app = FastAPI(title="order_workflow", lifespan=lifespan)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _: Request, exc: RequestValidationError
    ) -> JSONResponse:
        body = ErrorResponse(
            type="RequestValidationError",
            message="invalid request",
            details=[{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()],
        )
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        body = ErrorResponse(type=type(exc).__name__, message="internal server error")
        return JSONResponse(status_code=500, content=body.model_dump())

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/orders", status_code=201)
    async def create_order(
        req: CreateOrderRequest, user_id: int = Header(alias="X-User-Id")
    ) -> Any:
        cmd = CreateOrderCommand(
            user_id=user_id,
            items=tuple(
                OrderLineRequest(product_id=ln.product_id, quantity=ln.quantity)
                for ln in req.items
            ),
        )
        result = await create_order_uc.create_order(cmd)
        if isinstance(result, Success):
            dto = result.unwrap()
            return JSONResponse(
                status_code=201,
                content=_to_out(dto),
                headers={"Location": f"/orders/{dto.id}"},
            )
        return _error_response(result.failure())

    @app.get("/orders")
    async def list_orders() -> Any:
        result = await find_orders_uc.find_all()
        if isinstance(result, Success):
            return [_to_out(d) for d in result.unwrap()]
        return _error_response(result.failure())

    @app.get("/orders/me")
    async def my_orders(user_id: int = Header(alias="X-User-Id")) -> Any:
        result = await find_orders_uc.find_by_user_id(user_id)
        if isinstance(result, Success):
            return [_to_out(d) for d in result.unwrap()]
        return _error_response(result.failure())

    @app.get("/orders/{order_id}")
    async def get_order(order_id: str) -> Any:
        result = await find_orders_uc.find_by_id(order_id)
        if isinstance(result, Success):
            return _to_out(result.unwrap())
        return _error_response(result.failure())

    @app.patch("/orders/{order_id}/status")
    async def update_status(order_id: str, req: UpdateStatusRequest) -> Any:
        result = await update_status_uc.update_status(
            UpdateStatusCommand(order_id=order_id, new_status=req.status)
        )
        if isinstance(result, Success):
            return _to_out(result.unwrap())
        return _error_response(result.failure())

    return app
