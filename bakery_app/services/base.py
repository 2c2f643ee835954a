"""Helpers shared by the service layer."""

from decimal import ROUND_HALF_UP, Decimal
from functools import wraps
from typing import Callable, Iterable, Optional, TypeVar

from bakery_app.core.errors import AppError, ValidationError
from bakery_app.core.logging import logger

F = TypeVar("F", bound=Callable)

CENTS = Decimal("0.01")


def service_operation(failure_message: str) -> Callable[[F], F]:
    """
    Let ``AppError`` propagate untouched and turn anything else into a 500.

    The unexpected exception is logged with its traceback; the caller only
    sees ``failure_message``.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except AppError:
                raise
            except Exception as e:
                logger.error(f"{failure_message}: {e}", exc_info=True, extra={"operation": func.__name__})
                raise AppError(failure_message) from e

        return wrapper  # type: ignore[return-value]

    return decorator


def clean_text(value: Optional[str]) -> Optional[str]:
    """Trim surrounding whitespace; blank strings become None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def require_text(value: Optional[str], field: str) -> str:
    cleaned = clean_text(value)
    if cleaned is None:
        raise ValidationError(f"{field} must not be empty")
    return cleaned


def require_positive_id(value: int, field: str) -> int:
    if value is None or value <= 0:
        raise ValidationError(f"{field} must be a positive integer")
    return value


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def line_total(quantity: int, price_per_unit: float) -> Decimal:
    return (Decimal(quantity) * to_money(price_per_unit)).quantize(CENTS, rounding=ROUND_HALF_UP)


def order_total(lines: Iterable) -> float:
    """Sum of ``quantity * price_per_unit`` over lines, rounded to cents."""
    total = sum((line_total(line.quantity, line.price_per_unit) for line in lines), Decimal("0"))
    return float(total.quantize(CENTS, rounding=ROUND_HALF_UP))
