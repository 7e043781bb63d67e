"""
Typed Exception Hierarchy for the Costing Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the costing engine (receiving workflows, point-of-sale glue,
reporting code) must react to failures precisely. Parsing message strings
is fragile, so every failure has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

Example - WRONG way to handle errors:
    try:
        engine.apply_sale("Diesel", qty, "SALE-1")
    except Exception as e:
        if "Insufficient" in str(e):  # FRAGILE
            ...

Example - RIGHT way:
    try:
        engine.apply_sale("Diesel", qty, "SALE-1")
    except InsufficientStockError as e:
        notify(f"Only {e.available} left of {e.commodity_id}")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    CostingError (base)
    |
    +-- CommodityError
    |   +-- UnknownCommodityError
    |   +-- AlreadyInitializedError
    |
    +-- StockError
    |   +-- InsufficientStockError
    |
    +-- ValidationError
    |   +-- InvalidQuantityError
    |   +-- InvalidPriceError
    |   +-- InvalidCommodityIdError
    |   +-- InvalidTimestampError
    |
    +-- InvariantError
        +-- CostInvariantViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                      | When Raised
-----------|---------------------------|------------------------------------------
Commodity  | UNKNOWN_COMMODITY         | Sale/decrease on a commodity never stocked
           | ALREADY_INITIALIZED       | initialize() called twice for one id
-----------|---------------------------|------------------------------------------
Stock      | INSUFFICIENT_STOCK        | Sale/decrease larger than current stock
-----------|---------------------------|------------------------------------------
Validation | INVALID_QUANTITY          | Non-positive (or zero delta) quantity
           | INVALID_PRICE             | Negative or non-numeric unit price
           | INVALID_COMMODITY_ID      | Blank or non-string commodity id
           | INVALID_TIMESTAMP         | Timestamp without a timezone
-----------|---------------------------|------------------------------------------
Invariant  | COST_INVARIANT_VIOLATION  | Computed state fails reconciliation

Every mutating operation raises BEFORE publishing any new state, so a caught
exception always means the record is exactly as it was before the call.
"""


class CostingError(Exception):
    """
    Base exception for all costing kernel errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "COSTING_ERROR"


# Commodity-related exceptions


class CommodityError(CostingError):
    """Base exception for commodity lookup and lifecycle errors."""

    code: str = "COMMODITY_ERROR"


class UnknownCommodityError(CommodityError):
    """Commodity was never initialized nor received."""

    code: str = "UNKNOWN_COMMODITY"

    def __init__(self, commodity_id: str):
        self.commodity_id = commodity_id
        super().__init__(f"Commodity {commodity_id} not found in cost records")


class AlreadyInitializedError(CommodityError):
    """
    Explicit initialization requested for a commodity that already exists.

    Re-basing an existing commodity must go through adjust() so the
    history is never silently overwritten.
    """

    code: str = "ALREADY_INITIALIZED"

    def __init__(self, commodity_id: str):
        self.commodity_id = commodity_id
        super().__init__(f"Commodity {commodity_id} is already initialized")


# Stock-related exceptions


class StockError(CostingError):
    """Base exception for stock level errors."""

    code: str = "STOCK_ERROR"


class InsufficientStockError(StockError):
    """Requested decrease exceeds the commodity's current stock."""

    code: str = "INSUFFICIENT_STOCK"

    def __init__(self, commodity_id: str, available: str, requested: str):
        self.commodity_id = commodity_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {commodity_id}. "
            f"Available: {available}, Requested: {requested}"
        )


# Validation exceptions


class ValidationError(CostingError):
    """Base exception for rejected operation inputs."""

    code: str = "VALIDATION_ERROR"


class InvalidQuantityError(ValidationError):
    """Quantity is not a valid number for the requested operation."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: str, reason: str):
        self.quantity = quantity
        self.reason = reason
        super().__init__(f"Invalid quantity {quantity}: {reason}")


class InvalidPriceError(ValidationError):
    """Unit price is negative or not a number."""

    code: str = "INVALID_PRICE"

    def __init__(self, price: str, reason: str):
        self.price = price
        self.reason = reason
        super().__init__(f"Invalid unit price {price}: {reason}")


class InvalidCommodityIdError(ValidationError):
    """Commodity id is blank or not a string."""

    code: str = "INVALID_COMMODITY_ID"

    def __init__(self, commodity_id: object):
        self.commodity_id = commodity_id
        super().__init__(f"Invalid commodity id: {commodity_id!r}")


class InvalidTimestampError(ValidationError):
    """Timestamp is naive; history times must carry a timezone."""

    code: str = "INVALID_TIMESTAMP"

    def __init__(self, timestamp: str):
        self.timestamp = timestamp
        super().__init__(f"Timestamp {timestamp} has no timezone")


# Invariant exceptions


class InvariantError(CostingError):
    """Base exception for broken structural invariants."""

    code: str = "INVARIANT_ERROR"


class CostInvariantViolationError(InvariantError):
    """
    A computed cost record failed reconciliation.

    This signals a defect in the engine, not bad input. The new state is
    discarded and the published record is left untouched.
    """

    code: str = "COST_INVARIANT_VIOLATION"

    def __init__(self, commodity_id: str, violations: list[str]):
        self.commodity_id = commodity_id
        self.violations = violations
        super().__init__(
            f"Cost invariant violated for {commodity_id}: "
            + "; ".join(violations)
        )
