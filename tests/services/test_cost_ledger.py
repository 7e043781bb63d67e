"""
Tests for the CostLedger store.

Covers:
- Explicit initialization and its seed entry
- Duplicate initialization rejected
- Snapshots, listing and membership
- History views (ordering, limits, restartability)
- Publication guard
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from costing_kernel.domain.cost_record import CostAction, CostPosition, HistoryEntry
from costing_kernel.exceptions import (
    AlreadyInitializedError,
    InvalidPriceError,
    InvalidQuantityError,
)
from costing_services.cost_ledger import CostLedger, HistoryView
from tests.conftest import FIXED_TIME


class TestInitialize:

    def test_scenario_initialize_diesel(self, ledger):
        record = ledger.initialize("Diesel", 1000, 25)

        assert record.current_stock == Decimal("1000")
        assert record.average_cost == Decimal("25")
        assert record.total_value == Decimal("25000")
        assert record.last_updated == FIXED_TIME

    def test_seed_entry(self, ledger):
        record = ledger.initialize("Diesel", Decimal("1000"), Decimal("25"))

        assert len(record.history) == 1
        seed = record.history[0]
        assert seed.action == CostAction.ADJUSTMENT
        assert seed.document_reference == "INIT"
        assert seed.stock_before == 0
        assert seed.stock_after == Decimal("1000")
        assert seed.avg_cost_before == 0
        assert seed.avg_cost_after == Decimal("25")
        assert seed.notes == "Initial stock setup"

    def test_zero_starting_balance(self, ledger):
        record = ledger.initialize("E85", 0, 25)
        assert record.current_stock == 0
        assert record.average_cost == Decimal("25")
        assert record.total_value == 0

    def test_duplicate_rejected_and_history_kept(self, ledger):
        ledger.initialize("Diesel", 1000, 25)

        with pytest.raises(AlreadyInitializedError) as exc_info:
            ledger.initialize("Diesel", 5, 99)

        assert exc_info.value.code == "ALREADY_INITIALIZED"
        record = ledger.get("Diesel")
        assert record.current_stock == Decimal("1000")
        assert len(record.history) == 1

    def test_negative_stock_rejected(self, ledger):
        with pytest.raises(InvalidQuantityError):
            ledger.initialize("Diesel", -1, 25)
        assert ledger.get("Diesel") is None

    def test_negative_cost_rejected(self, ledger):
        with pytest.raises(InvalidPriceError):
            ledger.initialize("Diesel", 10, "-25")
        assert "Diesel" not in ledger

    def test_explicit_timestamp(self, ledger):
        when = datetime(2025, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
        record = ledger.initialize("Diesel", 1, 1, timestamp=when)
        assert record.last_updated == when
        assert record.history[0].occurred_at == when


class TestLookup:

    def test_get_unknown_returns_none(self, ledger):
        assert ledger.get("Unobtainium") is None

    def test_list_and_membership(self, ledger):
        ledger.initialize("Diesel", 1000, 25)
        ledger.initialize("E20", 10, 32)

        ids = {r.commodity_id for r in ledger.list()}
        assert ids == {"Diesel", "E20"}
        assert set(ledger.commodity_ids()) == {"Diesel", "E20"}
        assert len(ledger) == 2
        assert "Diesel" in ledger
        assert "E85" not in ledger
        assert 42 not in ledger

    def test_lock_reservation_does_not_create_record(self, ledger):
        with ledger.exclusive("Ghost"):
            pass
        assert ledger.get("Ghost") is None
        assert ledger.list() == []
        assert len(ledger) == 0

    def test_independent_ledgers(self):
        first, second = CostLedger(), CostLedger()
        first.initialize("Diesel", 1, 1)
        assert second.get("Diesel") is None

    def test_snapshot_is_not_affected_by_later_publication(self, ledger):
        ledger.initialize("Diesel", 1000, 25)
        before = ledger.get("Diesel")

        position = ledger.current_position("Diesel")
        entry = HistoryEntry(
            occurred_at=FIXED_TIME,
            action=CostAction.SALE,
            document_reference="S-1",
            quantity_delta=Decimal("-1"),
            unit_price=Decimal("25"),
            stock_before=Decimal("1000"),
            stock_after=Decimal("999"),
            avg_cost_before=Decimal("25"),
            avg_cost_after=Decimal("25"),
        )
        with ledger.exclusive("Diesel"):
            ledger.publish(
                CostPosition(
                    commodity_id="Diesel",
                    current_stock=Decimal("999"),
                    average_cost=Decimal("25"),
                    total_value=Decimal("24975"),
                    last_updated=FIXED_TIME,
                    history_length=position.history_length + 1,
                ),
                entry,
            )

        assert before.current_stock == Decimal("1000")
        assert len(before.history) == 1
        assert len(ledger.get("Diesel").history) == 2


class TestPublish:

    def test_wrong_history_length_rejected(self, ledger):
        ledger.initialize("Diesel", 1000, 25)
        position = ledger.current_position("Diesel")
        entry = ledger.get("Diesel").history[0]

        with ledger.exclusive("Diesel"):
            with pytest.raises(ValueError, match="expected 2"):
                ledger.publish(position, entry)

        assert len(ledger.get("Diesel").history) == 1


class TestHistoryView:

    def _entries(self, n: int) -> list[HistoryEntry]:
        entries = []
        stock = Decimal("0")
        for i in range(n):
            entries.append(HistoryEntry(
                occurred_at=FIXED_TIME,
                action=CostAction.PURCHASE,
                document_reference=f"INV-{i}",
                quantity_delta=Decimal("1"),
                unit_price=Decimal("10"),
                stock_before=stock,
                stock_after=stock + 1,
                avg_cost_before=Decimal("10"),
                avg_cost_after=Decimal("10"),
            ))
            stock += 1
        return entries

    def test_most_recent_first(self):
        view = HistoryView(self._entries(3), 3)
        assert [e.document_reference for e in view] == ["INV-2", "INV-1", "INV-0"]

    def test_limit(self):
        view = HistoryView(self._entries(5), 5, limit=2)
        assert len(view) == 2
        assert [e.document_reference for e in view] == ["INV-4", "INV-3"]

    def test_limit_larger_than_history(self):
        assert len(HistoryView(self._entries(2), 2, limit=10)) == 2

    def test_limit_zero(self):
        assert list(HistoryView(self._entries(2), 2, limit=0)) == []

    def test_negative_limit_rejected(self):
        with pytest.raises(ValueError):
            HistoryView(self._entries(2), 2, limit=-1)

    def test_restartable(self):
        view = HistoryView(self._entries(3), 3)
        assert list(view) == list(view)

    def test_bound_to_length_at_creation(self):
        entries = self._entries(3)
        view = HistoryView(entries, 2)
        entries.append(entries[-1])
        assert [e.document_reference for e in view] == ["INV-1", "INV-0"]

    def test_indexing_and_slicing(self):
        view = HistoryView(self._entries(4), 4)
        assert view[0].document_reference == "INV-3"
        assert view[-1].document_reference == "INV-0"
        assert [e.document_reference for e in view[1:3]] == ["INV-2", "INV-1"]
        with pytest.raises(IndexError):
            view[4]

    def test_unknown_commodity_history_is_empty(self, ledger):
        assert list(ledger.history("Nothing")) == []
        with pytest.raises(ValueError):
            ledger.history("Nothing", limit=-3)
