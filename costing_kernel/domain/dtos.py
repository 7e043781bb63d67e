"""
Data Transfer Objects for the costing boundary.

These are the shapes upstream workflows hand to the costing engine:
a receiving document with one line per commodity received, and a sold
line from the sales workflow.  Pure data, no behavior beyond light
construction checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class ReceiptLine:
    """One received commodity on a purchase document."""

    commodity_id: str
    quantity_received: Decimal | int | str
    unit_price: Decimal | int | str


@dataclass(frozen=True)
class ReceivingDocument:
    """
    A purchase receipt as supplied by the receiving workflow.

    document_reference is normally the supplier's tax invoice number.
    purchase_order is optional and only used to annotate history notes.
    """

    document_reference: str
    lines: tuple[ReceiptLine, ...]
    timestamp: datetime | None = None
    purchase_order: str | None = None

    def __post_init__(self) -> None:
        if not self.document_reference:
            raise ValueError("ReceivingDocument requires a document_reference")
        # Accept any iterable of lines but store a tuple
        object.__setattr__(self, "lines", tuple(self.lines))


@dataclass(frozen=True)
class SaleLine:
    """One sold commodity line from the sales workflow."""

    commodity_id: str
    quantity: Decimal | int | str
    document_reference: str
