"""
Values -- Decimal coercion and validation for quantities and unit prices.

Responsibility:
    Turn caller-supplied numbers into finite ``Decimal`` values and reject
    the ones an operation cannot accept. Every quantity and unit cost in
    the costing kernel passes through here.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic: floats are converted through ``str()`` so
      ``0.1`` stays ``Decimal("0.1")`` rather than its binary expansion.
    - Non-finite values (NaN, Infinity) never enter a cost record.
    - Zero is always unsigned; "-0" is read as "0".
    - Timestamps written to history carry a timezone.

Failure modes:
    - ValueError from ``to_decimal`` for non-numeric or non-finite input.
    - InvalidQuantityError, InvalidPriceError, InvalidCommodityIdError and
      InvalidTimestampError from the operation-level validators.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Union

from costing_kernel.exceptions import (
    InvalidCommodityIdError,
    InvalidPriceError,
    InvalidQuantityError,
    InvalidTimestampError,
)

Numeric = Union[Decimal, int, str, float]

ZERO = Decimal("0")


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert a numeric value to a finite Decimal.

    Raises:
        ValueError: If value is a bool, not numeric, or not finite.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise ValueError(f"Invalid numeric value: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Non-finite numeric value: {value!r}")
    if result.is_zero():
        # -0 would otherwise be stored and serialized as "-0"
        return result.copy_abs()
    return result


def positive_quantity(value: Numeric) -> Decimal:
    """Validate a quantity that must be strictly positive."""
    try:
        quantity = to_decimal(value)
    except ValueError as e:
        raise InvalidQuantityError(str(value), "not a finite number") from e
    if quantity <= ZERO:
        raise InvalidQuantityError(str(quantity), "must be greater than zero")
    return quantity


def non_negative_quantity(value: Numeric) -> Decimal:
    """Validate a starting balance (zero allowed)."""
    try:
        quantity = to_decimal(value)
    except ValueError as e:
        raise InvalidQuantityError(str(value), "not a finite number") from e
    if quantity < ZERO:
        raise InvalidQuantityError(str(quantity), "must not be negative")
    return quantity


def nonzero_delta(value: Numeric) -> Decimal:
    """Validate a signed adjustment delta."""
    try:
        delta = to_decimal(value)
    except ValueError as e:
        raise InvalidQuantityError(str(value), "not a finite number") from e
    if delta == ZERO:
        raise InvalidQuantityError(str(delta), "adjustment delta must not be zero")
    return delta


def unit_price(value: Numeric) -> Decimal:
    """Validate a unit price or cost (zero allowed, negative rejected)."""
    try:
        price = to_decimal(value)
    except ValueError as e:
        raise InvalidPriceError(str(value), "not a finite number") from e
    if price < ZERO:
        raise InvalidPriceError(str(price), "must not be negative")
    return price


def commodity_id(value: object) -> str:
    """Validate a commodity id: a string with at least one non-blank character."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidCommodityIdError(value)
    return value


def aware_timestamp(value: datetime) -> datetime:
    """Reject naive datetimes; history mixes no naive and aware times."""
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidTimestampError(value.isoformat())
    return value
