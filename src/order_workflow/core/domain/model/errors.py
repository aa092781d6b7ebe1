from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AppError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ValidationError(AppError):
    allowed: tuple[str, ...] = ()


@dataclass(frozen=True)
class NotFoundError(AppError):
    pass


@dataclass(frozen=True)
class BusinessRuleError(AppError):
    product_id: int | None = None
    available: int | None = None
    requested: int | None = None


@dataclass(frozen=True)
class InternalError(AppError):
    pass


# ---- collaborator failures (raised, never returned) -----------------------


class StoreError(Exception):
    """A store operation failed (connection lost, write rejected, ...)."""


class QueueError(Exception):
    """The notification queue refused a message."""
