"""
Pure domain layer.

This module contains the immutable cost record types, boundary DTOs and
numeric validation with NO dependencies on:
- Storage
- Locks or threads
- Wall-clock time (SystemClock is the one sanctioned boundary)

All domain objects are immutable and deterministic.
"""

from costing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from costing_kernel.domain.cost_record import (
    CommodityCostRecord,
    CostAction,
    CostPosition,
    HistoryEntry,
)
from costing_kernel.domain.dtos import ReceiptLine, ReceivingDocument, SaleLine
from costing_kernel.domain.values import ZERO, to_decimal

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "CommodityCostRecord",
    "CostAction",
    "CostPosition",
    "HistoryEntry",
    "ReceiptLine",
    "ReceivingDocument",
    "SaleLine",
    "ZERO",
    "to_decimal",
]
