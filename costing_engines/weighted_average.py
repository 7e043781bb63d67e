"""
costing_engines.weighted_average -- Moving weighted-average cost calculations.

Responsibility:
    Compute the effect of a stock movement on a commodity's running stock,
    average unit cost and value.  Receipts blend the incoming lot into
    the average; issues (sales, write-downs) consume stock at the existing
    average and leave it unchanged.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import costing_kernel.  The stateful CostingEngine service
    that publishes results lives in costing_services.

Invariants enforced:
    - Empty-stock rebase: when stock before a receipt is <= 0 the receipt's
      unit price becomes the average cost outright.
    - Issues never change the average cost.
    - total_value_after == stock_after * avg_cost_after exactly.

Failure modes:
    - ValueError from calculate_issue if the issued quantity exceeds the
      stock on hand.  Services check stock first and raise the typed
      InsufficientStockError; this is the last line of defence.

Usage:
    movement = calculate_receipt(
        old_stock=Decimal("1000"),
        old_average_cost=Decimal("25"),
        quantity_received=Decimal("500"),
        unit_price=Decimal("28"),
    )
    movement.avg_cost_after   # Decimal("26")
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from costing_engines.tracer import traced_engine

ENGINE_NAME = "weighted_average"
ENGINE_VERSION = "1.0"


@dataclass(frozen=True, slots=True)
class CostMovement:
    """Before/after figures of one stock movement."""

    quantity_delta: Decimal
    unit_price: Decimal
    stock_before: Decimal
    stock_after: Decimal
    avg_cost_before: Decimal
    avg_cost_after: Decimal

    @property
    def total_value_after(self) -> Decimal:
        return self.stock_after * self.avg_cost_after

    @property
    def total_value_before(self) -> Decimal:
        return self.stock_before * self.avg_cost_before


@traced_engine(
    ENGINE_NAME,
    ENGINE_VERSION,
    fingerprint_fields=("old_stock", "old_average_cost", "quantity_received", "unit_price"),
)
def calculate_moving_average(
    old_stock: Decimal,
    old_average_cost: Decimal,
    quantity_received: Decimal,
    unit_price: Decimal,
) -> Decimal:
    """
    New average unit cost after receiving quantity_received at unit_price.

        new_avg = (old_stock * old_avg + qty * price) / (old_stock + qty)

    If old_stock <= 0 the incoming lot defines the cost basis and the
    result is unit_price exactly.
    """
    if old_stock <= 0:
        return unit_price

    total_stock = old_stock + quantity_received
    if total_stock <= 0:
        return unit_price

    old_value = old_stock * old_average_cost
    new_value = quantity_received * unit_price
    return (old_value + new_value) / total_stock


def calculate_receipt(
    old_stock: Decimal,
    old_average_cost: Decimal,
    quantity_received: Decimal,
    unit_price: Decimal,
) -> CostMovement:
    """Movement for an incoming lot recorded at unit_price."""
    avg_after = calculate_moving_average(
        old_stock, old_average_cost, quantity_received, unit_price,
    )
    return CostMovement(
        quantity_delta=quantity_received,
        unit_price=unit_price,
        stock_before=old_stock,
        stock_after=old_stock + quantity_received,
        avg_cost_before=old_average_cost,
        avg_cost_after=avg_after,
    )


@traced_engine(
    ENGINE_NAME,
    ENGINE_VERSION,
    fingerprint_fields=("old_stock", "old_average_cost", "quantity_issued"),
)
def calculate_issue(
    old_stock: Decimal,
    old_average_cost: Decimal,
    quantity_issued: Decimal,
) -> CostMovement:
    """
    Movement for stock leaving at the current average cost.

    The recorded unit price is the average cost, i.e. the COGS basis.
    """
    if quantity_issued > old_stock:
        raise ValueError(
            f"Cannot issue {quantity_issued} with only {old_stock} on hand"
        )
    return CostMovement(
        quantity_delta=-quantity_issued,
        unit_price=old_average_cost,
        stock_before=old_stock,
        stock_after=old_stock - quantity_issued,
        avg_cost_before=old_average_cost,
        avg_cost_after=old_average_cost,
    )


def calculate_cogs(quantity: Decimal, average_cost: Decimal) -> Decimal:
    """Cost of goods sold for quantity units at average_cost."""
    return quantity * average_cost
