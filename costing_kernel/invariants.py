"""
Costing Invariants Contract.

These invariants are structural law for every commodity cost record.
No configuration may override them.  The costing engine checks a newly
computed record with ``assert_record_consistent`` before publishing it,
and tests use ``verify_record`` to audit whole histories.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum, unique

from costing_kernel.domain.cost_record import CommodityCostRecord
from costing_kernel.exceptions import CostInvariantViolationError


@unique
class CostingInvariant(str, Enum):
    """Non-configurable invariants enforced by the costing kernel."""

    NON_NEGATIVE_STOCK = "non_negative_stock"
    """current_stock >= 0 at all times. Enforced by the insufficient-stock
    guard on sales and downward adjustments."""

    NON_NEGATIVE_COST = "non_negative_cost"
    """average_cost >= 0. Enforced by unit price validation on receipts."""

    VALUE_RECONCILES = "value_reconciles"
    """total_value == current_stock * average_cost after every mutation."""

    ENTRY_BRACKET = "entry_bracket"
    """Every history entry satisfies stock_after == stock_before +
    quantity_delta. Enforced by HistoryEntry construction."""

    HISTORY_CHAIN = "history_chain"
    """Consecutive entries chain: each entry starts where the previous one
    ended, and the last entry ends at the current position."""


ALL_COSTING_INVARIANTS: frozenset[CostingInvariant] = frozenset(CostingInvariant)

# The kernel package may not import from these packages.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "costing_services",
    "costing_config",
    "costing_engines",
)


def verify_record(record: CommodityCostRecord) -> list[str]:
    """Return a description of every invariant the record violates."""
    violations: list[str] = []

    if record.current_stock < 0:
        violations.append(
            f"{CostingInvariant.NON_NEGATIVE_STOCK.value}: stock {record.current_stock}"
        )
    if record.average_cost < 0:
        violations.append(
            f"{CostingInvariant.NON_NEGATIVE_COST.value}: average cost {record.average_cost}"
        )
    if record.total_value != record.current_stock * record.average_cost:
        violations.append(
            f"{CostingInvariant.VALUE_RECONCILES.value}: {record.total_value} != "
            f"{record.current_stock} * {record.average_cost}"
        )

    previous_after: Decimal | None = None
    for index, entry in enumerate(record.history):
        if entry.stock_after != entry.stock_before + entry.quantity_delta:
            violations.append(
                f"{CostingInvariant.ENTRY_BRACKET.value}: entry {index}"
            )
        if previous_after is not None and entry.stock_before != previous_after:
            violations.append(
                f"{CostingInvariant.HISTORY_CHAIN.value}: entry {index} starts at "
                f"{entry.stock_before}, previous ended at {previous_after}"
            )
        previous_after = entry.stock_after

    last = record.last_entry
    if last is not None and (
        last.stock_after != record.current_stock
        or last.avg_cost_after != record.average_cost
    ):
        violations.append(
            f"{CostingInvariant.HISTORY_CHAIN.value}: last entry does not match position"
        )

    return violations


def assert_record_consistent(record: CommodityCostRecord) -> None:
    """Raise CostInvariantViolationError if the record breaks any invariant."""
    violations = verify_record(record)
    if violations:
        raise CostInvariantViolationError(record.commodity_id, violations)
