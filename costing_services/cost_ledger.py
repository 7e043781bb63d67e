"""
costing_services.cost_ledger -- Keyed store of commodity cost records.

Responsibility:
    Own the per-commodity cost positions and their append-only histories,
    create records through explicit initialization, hand out complete
    snapshots to readers, and provide the one exclusive-access scope per
    commodity that every mutation runs inside.

Architecture position:
    Services -- stateful orchestration over kernel domain types.
    Constructed explicitly by the owning service and passed to the
    CostingEngine (no module-level singleton, no import-time seeding).
    Several ledgers may coexist, e.g. one per tenant.

Invariants enforced:
    - Append-only history: entries are appended, never removed or
      reordered.
    - Atomic publication: a new entry is appended before the position
      that counts it is published, and readers take the position first,
      so no reader ever sees a half-applied mutation.
    - One explicit initialization per commodity (AlreadyInitializedError).

Failure modes:
    - AlreadyInitializedError from initialize() on a known commodity.
    - InvalidQuantityError / InvalidPriceError from initialize() on
      negative starting balances.
    - ValueError from publish() if the position does not count exactly
      one more entry than the history holds.

Concurrency:
    Mutations for one commodity are serialized by that commodity's
    re-entrant lock (``exclusive``).  Different commodities never block
    each other.  Reads take no per-commodity lock.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal

from costing_kernel.domain import values
from costing_kernel.domain.clock import Clock, SystemClock
from costing_kernel.domain.cost_record import (
    CommodityCostRecord,
    CostAction,
    CostPosition,
    HistoryEntry,
)
from costing_kernel.exceptions import AlreadyInitializedError
from costing_kernel.logging_config import get_logger

logger = get_logger("services.cost_ledger")

INIT_DOCUMENT_REFERENCE = "INIT"


class _CommodityBook:
    """Mutable holder for one commodity: its lock, position and entries."""

    __slots__ = ("lock", "position", "entries")

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.position: CostPosition | None = None
        self.entries: list[HistoryEntry] = []


class HistoryView(Sequence):
    """
    Most-recent-first view over a commodity's history.

    The view is bound to the history length of the position it was
    created from, so entries published later never show up in it.
    Iteration is lazy and may be restarted any number of times.
    """

    __slots__ = ("_entries", "_length", "_top")

    def __init__(
        self,
        entries: list[HistoryEntry],
        history_length: int,
        limit: int | None = None,
    ):
        if limit is not None and limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")
        self._entries = entries
        self._length = history_length if limit is None else min(limit, history_length)
        # Newest entry sits at index history_length - 1
        self._top = history_length - 1

    def __len__(self) -> int:
        return self._length

    def __getitem__(self, index):
        if isinstance(index, slice):
            return tuple(self[i] for i in range(*index.indices(self._length)))
        if index < 0:
            index += self._length
        if not 0 <= index < self._length:
            raise IndexError("history index out of range")
        return self._entries[self._top - index]

    def __iter__(self) -> Iterator[HistoryEntry]:
        for offset in range(self._length):
            yield self._entries[self._top - offset]

    def __repr__(self) -> str:
        return f"HistoryView(length={self._length})"

    @classmethod
    def empty(cls) -> HistoryView:
        return cls([], 0)


class CostLedger:
    """
    Keyed collection of commodity cost records.

    Contract:
        Receives a Clock via constructor injection; timestamps for
        initialize() default to ``clock.now()``.
    Guarantees:
        - ``get`` and ``list`` return complete, immutable snapshots.
        - ``initialize`` creates exactly one seed entry per commodity.
        - ``publish`` is the only way state changes after initialization.
    Non-goals:
        - No persistence; records live as long as the ledger.
        - Does not compute costs; that is the CostingEngine's job.
    """

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or SystemClock()
        self._books: dict[str, _CommodityBook] = {}
        self._registry_lock = threading.Lock()

    @property
    def clock(self) -> Clock:
        return self._clock

    # =========================================================================
    # Record lifecycle
    # =========================================================================

    def initialize(
        self,
        commodity_id: str,
        initial_stock: Decimal | int | str,
        initial_cost: Decimal | int | str,
        timestamp: datetime | None = None,
        notes: str = "Initial stock setup",
    ) -> CommodityCostRecord:
        """
        Create a record with a known starting balance.

        The record starts with one seed entry (action=adjustment,
        document_reference="INIT", stock_before=0, avg_cost_before=0).

        Raises:
            AlreadyInitializedError: If the commodity already has a record.
            InvalidQuantityError: If initial_stock is negative.
            InvalidPriceError: If initial_cost is negative.
            InvalidCommodityIdError: If commodity_id is blank.
            InvalidTimestampError: If timestamp is naive.
        """
        commodity_id = values.commodity_id(commodity_id)
        stock = values.non_negative_quantity(initial_stock)
        cost = values.unit_price(initial_cost)
        occurred_at = (
            values.aware_timestamp(timestamp) if timestamp is not None
            else self._clock.now()
        )
        zero = values.ZERO

        with self.exclusive(commodity_id):
            if self.current_position(commodity_id) is not None:
                logger.warning("commodity_already_initialized", extra={
                    "commodity_id": commodity_id,
                })
                raise AlreadyInitializedError(commodity_id)

            seed = HistoryEntry(
                occurred_at=occurred_at,
                action=CostAction.ADJUSTMENT,
                document_reference=INIT_DOCUMENT_REFERENCE,
                quantity_delta=stock,
                unit_price=cost,
                stock_before=zero,
                stock_after=stock,
                avg_cost_before=zero,
                avg_cost_after=cost,
                notes=notes,
            )
            position = CostPosition(
                commodity_id=commodity_id,
                current_stock=stock,
                average_cost=cost,
                total_value=stock * cost,
                last_updated=occurred_at,
                history_length=1,
            )
            record = self.publish(position, seed)

        logger.info("commodity_initialized", extra={
            "commodity_id": commodity_id,
            "initial_stock": str(stock),
            "initial_cost": str(cost),
        })
        return record

    def publish(
        self,
        position: CostPosition,
        entry: HistoryEntry,
    ) -> CommodityCostRecord:
        """
        Append entry and make position the commodity's current state.

        Callers must hold ``exclusive(position.commodity_id)``.  The
        position must count exactly one more entry than the history holds.
        """
        book = self._book(position.commodity_id)
        expected = len(book.entries) + 1
        if position.history_length != expected:
            raise ValueError(
                f"Position for {position.commodity_id} counts "
                f"{position.history_length} entries, expected {expected}"
            )
        book.entries.append(entry)
        book.position = position
        return CommodityCostRecord.from_position(position, tuple(book.entries))

    # =========================================================================
    # Exclusive scope
    # =========================================================================

    @contextmanager
    def exclusive(self, commodity_id: str) -> Iterator[None]:
        """Hold the commodity's mutation lock for the duration of the block."""
        book = self._book(commodity_id)
        with book.lock:
            yield

    def _book(self, commodity_id: str) -> _CommodityBook:
        book = self._books.get(commodity_id)
        if book is not None:
            return book
        with self._registry_lock:
            book = self._books.get(commodity_id)
            if book is None:
                book = _CommodityBook()
                self._books[commodity_id] = book
            return book

    # =========================================================================
    # Lookup
    # =========================================================================

    def current_position(self, commodity_id: str) -> CostPosition | None:
        book = self._books.get(commodity_id)
        return book.position if book is not None else None

    def get(self, commodity_id: str) -> CommodityCostRecord | None:
        """Return a complete snapshot of the record, or None if absent."""
        book = self._books.get(commodity_id)
        if book is None:
            return None
        position = book.position
        if position is None:
            return None
        history = tuple(book.entries[: position.history_length])
        return CommodityCostRecord.from_position(position, history)

    def history(
        self,
        commodity_id: str,
        limit: int | None = None,
    ) -> HistoryView:
        """Most-recent-first history view; empty for unknown commodities."""
        book = self._books.get(commodity_id)
        position = book.position if book is not None else None
        if position is None:
            if limit is not None and limit < 0:
                raise ValueError(f"limit must not be negative, got {limit}")
            return HistoryView.empty()
        return HistoryView(book.entries, position.history_length, limit)

    def positions(self) -> list[CostPosition]:
        """Current positions of all known commodities (no history copy)."""
        with self._registry_lock:
            books = list(self._books.values())
        return [b.position for b in books if b.position is not None]

    def list(self) -> list[CommodityCostRecord]:
        """All record snapshots; order is not significant."""
        with self._registry_lock:
            ids = list(self._books)
        records = (self.get(commodity_id) for commodity_id in ids)
        return [r for r in records if r is not None]

    def commodity_ids(self) -> list[str]:
        return [p.commodity_id for p in self.positions()]

    def __contains__(self, commodity_id: object) -> bool:
        return isinstance(commodity_id, str) and self.current_position(commodity_id) is not None

    def __len__(self) -> int:
        return len(self.positions())
