"""
costing_kernel.domain.cost_record -- Commodity cost records and their history.

Responsibility:
    Define the immutable value objects of the costing ledger: the
    ``HistoryEntry`` audit record of one stock-affecting event, the
    ``CostPosition`` running state (stock, average cost, value) of one
    commodity, and the ``CommodityCostRecord`` snapshot that joins a
    position with its ordered history.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    The stateful CostLedger that owns positions and entries lives in
    costing_services.

Invariants enforced:
    - Bracket arithmetic: HistoryEntry.__post_init__ rejects entries where
      stock_after != stock_before + quantity_delta.
    - Replay safety: all value objects are frozen dataclasses; history is
      exposed as a tuple and never reordered.

Failure modes:
    - ValueError from HistoryEntry.__post_init__ if the stock bracket does
      not add up.

Audit relevance:
    Each entry's document_reference traces back to the receiving invoice,
    sale ticket or adjustment memo that caused it.  For sales the entry's
    unit_price is the average cost at the time of sale (the COGS basis),
    never a selling price.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from costing_kernel.logging_config import get_logger

logger = get_logger("domain.cost_record")


class CostAction(str, Enum):
    """Kinds of stock-affecting events."""

    PURCHASE = "purchase"
    SALE = "sale"
    ADJUSTMENT = "adjustment"
    TRANSFER = "transfer"


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """
    Immutable record of one stock-affecting event.

    quantity_delta is signed: positive for purchases and upward
    adjustments, negative for sales and write-downs.
    """

    occurred_at: datetime
    action: CostAction
    document_reference: str
    quantity_delta: Decimal
    unit_price: Decimal
    stock_before: Decimal
    stock_after: Decimal
    avg_cost_before: Decimal
    avg_cost_after: Decimal
    notes: str = ""

    def __post_init__(self) -> None:
        if self.occurred_at.tzinfo is None:
            raise ValueError(
                f"occurred_at {self.occurred_at.isoformat()} has no timezone"
            )
        if self.stock_after != self.stock_before + self.quantity_delta:
            logger.error("history_entry_bracket_mismatch", extra={
                "document_reference": self.document_reference,
                "stock_before": str(self.stock_before),
                "quantity_delta": str(self.quantity_delta),
                "stock_after": str(self.stock_after),
            })
            raise ValueError(
                f"stock_after {self.stock_after} != stock_before "
                f"{self.stock_before} + quantity_delta {self.quantity_delta}"
            )

    @property
    def entry_date(self) -> date:
        return self.occurred_at.date()

    @property
    def entry_time(self) -> time:
        return self.occurred_at.time().replace(microsecond=0)

    @property
    def is_increase(self) -> bool:
        return self.quantity_delta > 0

    @property
    def value_delta(self) -> Decimal:
        """Signed value moved by this event at its unit price."""
        return self.quantity_delta * self.unit_price

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation for reporting collaborators."""
        return {
            "occurred_at": self.occurred_at.isoformat(),
            "date": self.entry_date.isoformat(),
            "time": self.entry_time.isoformat(),
            "action": self.action.value,
            "document_reference": self.document_reference,
            "quantity_delta": str(self.quantity_delta),
            "unit_price": str(self.unit_price),
            "stock_before": str(self.stock_before),
            "stock_after": str(self.stock_after),
            "avg_cost_before": str(self.avg_cost_before),
            "avg_cost_after": str(self.avg_cost_after),
            "notes": self.notes,
        }


@dataclass(frozen=True, slots=True)
class CostPosition:
    """
    Running cost state of one commodity, without its history.

    history_length is the number of entries that belong to this position;
    a reader holding a position sees exactly that prefix of the history.
    """

    commodity_id: str
    current_stock: Decimal
    average_cost: Decimal
    total_value: Decimal
    last_updated: datetime
    history_length: int

    @classmethod
    def empty(cls, commodity_id: str, as_of: datetime) -> CostPosition:
        """Baseline for a commodity first seen on a receipt."""
        zero = Decimal("0")
        return cls(
            commodity_id=commodity_id,
            current_stock=zero,
            average_cost=zero,
            total_value=zero,
            last_updated=as_of,
            history_length=0,
        )


@dataclass(frozen=True, slots=True)
class CommodityCostRecord:
    """
    Snapshot of a commodity's cost position together with its history.

    Records handed to callers are complete: the history tuple always
    matches the position it was taken with.
    """

    commodity_id: str
    current_stock: Decimal
    average_cost: Decimal
    total_value: Decimal
    last_updated: datetime
    history: tuple[HistoryEntry, ...]

    @classmethod
    def from_position(
        cls,
        position: CostPosition,
        history: tuple[HistoryEntry, ...],
    ) -> CommodityCostRecord:
        return cls(
            commodity_id=position.commodity_id,
            current_stock=position.current_stock,
            average_cost=position.average_cost,
            total_value=position.total_value,
            last_updated=position.last_updated,
            history=history,
        )

    @property
    def last_entry(self) -> HistoryEntry | None:
        return self.history[-1] if self.history else None

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation; history stays in insertion order."""
        return {
            "commodity_id": self.commodity_id,
            "current_stock": str(self.current_stock),
            "average_cost": str(self.average_cost),
            "total_value": str(self.total_value),
            "last_updated": self.last_updated.isoformat(),
            "history": [entry.to_dict() for entry in self.history],
        }
