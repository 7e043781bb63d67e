"""
costing_services.costing_engine -- Moving weighted-average costing operations.

Responsibility:
    Apply purchase receipts, sales and stock adjustments to the records
    held by a CostLedger, and answer cost/stock/value/history queries for
    the reporting layer.

Architecture position:
    Services -- stateful orchestration over engines + kernel.
    Composes the pure calculations in costing_engines.weighted_average
    with a CostLedger received by constructor injection.

Invariants enforced:
    - Non-partial failure: inputs are validated, the movement computed,
      the new entry and position built and checked BEFORE anything is
      published.  Any exception leaves the record exactly as it was.
    - Sales and write-downs never change the average cost.
    - Stock never goes negative (InsufficientStockError).
    - Every mutation runs inside ``ledger.exclusive(commodity_id)``, so
      concurrent writers on one commodity cannot lose updates.

Failure modes:
    - InvalidQuantityError: non-positive quantity, or zero adjustment.
    - InvalidPriceError: negative unit price.
    - UnknownCommodityError: sale or write-down on a commodity never
      initialized or received; unpriced increase on an unknown commodity.
    - InsufficientStockError: sale or write-down larger than stock.
    - CostInvariantViolationError: computed state fails reconciliation.
    - InvalidCommodityIdError: blank commodity id.
    - InvalidTimestampError: naive timestamp supplied.

Audit relevance:
    Every applied movement appends a HistoryEntry carrying the source
    document reference, and is logged with commodity, quantities and
    before/after average cost.  Sale entries record the average cost as
    unit_price: the COGS basis, never the selling price.

Usage:
    ledger = CostLedger(clock=SystemClock())
    engine = CostingEngine(ledger)

    ledger.initialize("Diesel", Decimal("1000"), Decimal("25"))
    engine.apply_receipt("Diesel", Decimal("500"), Decimal("28"), "INV-1")
    engine.apply_sale("Diesel", Decimal("200"), "SALE-1")
    engine.compute_cogs("Diesel", Decimal("200"))   # Decimal("5200")
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from costing_engines.weighted_average import (
    CostMovement,
    calculate_cogs,
    calculate_issue,
    calculate_receipt,
)
from costing_kernel.domain import values
from costing_kernel.domain.clock import Clock
from costing_kernel.domain.cost_record import (
    CommodityCostRecord,
    CostAction,
    CostPosition,
    HistoryEntry,
)
from costing_kernel.domain.dtos import ReceivingDocument, SaleLine
from costing_kernel.exceptions import (
    CostInvariantViolationError,
    InsufficientStockError,
    UnknownCommodityError,
)
from costing_kernel.invariants import assert_record_consistent
from costing_kernel.logging_config import LogContext, get_logger
from costing_services.cost_ledger import CostLedger, HistoryView

logger = get_logger("services.costing_engine")

Numeric = Decimal | int | str

DEFAULT_ADJUSTMENT_REFERENCE = "ADJ"


class CostingEngine:
    """
    Costing operations over a CostLedger.

    Contract:
        Receives the CostLedger (and optionally a Clock) via constructor
        injection.  When no timestamp is given, ``clock.now()`` is used.
    Guarantees:
        - ``apply_receipt`` blends the lot into the moving average.
        - ``apply_sale`` consumes stock at the current average cost.
        - ``adjust`` behaves as a receipt (delta > 0) or a sale
          (delta < 0) but is recorded as an adjustment.
        - Queries never mutate and never fail for unknown commodities.
    Non-goals:
        - No selling prices, margins or tax; those belong to reporting.
        - No lot, FIFO or LIFO costing.
    """

    def __init__(self, ledger: CostLedger, clock: Clock | None = None):
        self._ledger = ledger
        self._clock = clock or ledger.clock

    @property
    def ledger(self) -> CostLedger:
        return self._ledger

    # =========================================================================
    # Receipts
    # =========================================================================

    def apply_receipt(
        self,
        commodity_id: str,
        quantity_received: Numeric,
        unit_price: Numeric,
        document_reference: str,
        timestamp: datetime | None = None,
        notes: str | None = None,
    ) -> CommodityCostRecord:
        """
        Receive quantity_received units at unit_price.

        An unknown commodity is opened implicitly with zero stock (no seed
        entry); the receipt price then becomes its average cost.

        Raises:
            InvalidCommodityIdError: If commodity_id is blank.
            InvalidQuantityError: If quantity_received <= 0.
            InvalidPriceError: If unit_price < 0.
            InvalidTimestampError: If timestamp is naive.
        """
        quantity = values.positive_quantity(quantity_received)
        price = values.unit_price(unit_price)
        return self._receive(
            commodity_id,
            quantity,
            price,
            document_reference,
            timestamp,
            CostAction.PURCHASE,
            notes if notes is not None else f"Received on {document_reference}",
        )

    def apply_receiving_document(
        self,
        document: ReceivingDocument,
    ) -> tuple[CommodityCostRecord, ...]:
        """
        Apply every line of a receiving document, in line order.

        All lines are validated before the first one is applied, so a bad
        line rejects the whole document without touching any record.
        """
        validated: list[tuple[str, Decimal, Decimal]] = []
        for line in document.lines:
            validated.append((
                values.commodity_id(line.commodity_id),
                values.positive_quantity(line.quantity_received),
                values.unit_price(line.unit_price),
            ))

        if document.purchase_order:
            notes = f"Received from PO {document.purchase_order}"
        else:
            notes = f"Received on {document.document_reference}"
        timestamp = self._occurred_at(document.timestamp)

        with LogContext.bind(document_reference=document.document_reference):
            records = tuple(
                self._receive(
                    commodity_id,
                    quantity,
                    price,
                    document.document_reference,
                    timestamp,
                    CostAction.PURCHASE,
                    notes,
                )
                for commodity_id, quantity, price in validated
            )
            logger.info("receiving_document_applied", extra={
                "line_count": len(records),
                "purchase_order": document.purchase_order,
            })
        return records

    # =========================================================================
    # Sales
    # =========================================================================

    def apply_sale(
        self,
        commodity_id: str,
        quantity_sold: Numeric,
        document_reference: str,
        timestamp: datetime | None = None,
        notes: str | None = None,
    ) -> CommodityCostRecord:
        """
        Issue quantity_sold units at the current average cost.

        The average cost is unchanged.  The entry's unit_price is the
        average cost (COGS basis), not the price the customer paid.

        Raises:
            InvalidCommodityIdError: If commodity_id is blank.
            InvalidQuantityError: If quantity_sold <= 0.
            UnknownCommodityError: If the commodity has no record.
            InsufficientStockError: If quantity_sold > current stock.
        """
        quantity = values.positive_quantity(quantity_sold)
        return self._issue(
            commodity_id,
            quantity,
            document_reference,
            timestamp,
            CostAction.SALE,
            notes if notes is not None else "Sale transaction",
        )

    def apply_sale_line(
        self,
        line: SaleLine,
        timestamp: datetime | None = None,
    ) -> CommodityCostRecord:
        """Apply one sold line handed over by the sales workflow."""
        return self.apply_sale(
            line.commodity_id,
            line.quantity,
            line.document_reference,
            timestamp=timestamp,
        )

    # =========================================================================
    # Adjustments
    # =========================================================================

    def adjust(
        self,
        commodity_id: str,
        quantity_delta: Numeric,
        unit_price_for_increase: Numeric | None = None,
        document_reference: str = DEFAULT_ADJUSTMENT_REFERENCE,
        timestamp: datetime | None = None,
        notes: str | None = None,
    ) -> CommodityCostRecord:
        """
        Correct stock by a signed delta, recorded as an adjustment.

        A positive delta is costed like a receipt at unit_price_for_increase,
        or at the current average cost when no price is given.  A negative
        delta is a write-down at the current average cost with the same
        insufficient-stock guard as a sale.

        Raises:
            InvalidCommodityIdError: If commodity_id is blank.
            InvalidQuantityError: If quantity_delta == 0.
            InvalidPriceError: If unit_price_for_increase < 0.
            UnknownCommodityError: If decreasing an unknown commodity, or
                increasing one without a price to cost it at.
            InsufficientStockError: If the decrease exceeds current stock.
        """
        delta = values.nonzero_delta(quantity_delta)
        if delta > 0:
            price = (
                values.unit_price(unit_price_for_increase)
                if unit_price_for_increase is not None
                else None
            )
            return self._receive(
                commodity_id,
                delta,
                price,
                document_reference,
                timestamp,
                CostAction.ADJUSTMENT,
                notes if notes is not None else "Stock increase adjustment",
            )
        return self._issue(
            commodity_id,
            -delta,
            document_reference,
            timestamp,
            CostAction.ADJUSTMENT,
            notes if notes is not None else "Stock decrease adjustment",
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def compute_cogs(self, commodity_id: str, quantity: Numeric) -> Decimal:
        """quantity * current average cost; zero for unknown commodities."""
        qty = values.non_negative_quantity(quantity)
        return calculate_cogs(qty, self.query_average_cost(commodity_id))

    def query_average_cost(self, commodity_id: str) -> Decimal:
        position = self._ledger.current_position(commodity_id)
        return position.average_cost if position is not None else values.ZERO

    def query_stock(self, commodity_id: str) -> Decimal:
        position = self._ledger.current_position(commodity_id)
        return position.current_stock if position is not None else values.ZERO

    def query_stock_value(self, commodity_id: str) -> Decimal:
        position = self._ledger.current_position(commodity_id)
        return position.total_value if position is not None else values.ZERO

    def query_history(
        self,
        commodity_id: str,
        limit: int | None = None,
    ) -> HistoryView:
        """Entries most-recent-first, at most ``limit`` of them."""
        return self._ledger.history(commodity_id, limit)

    def get_record(self, commodity_id: str) -> CommodityCostRecord | None:
        return self._ledger.get(commodity_id)

    def total_portfolio_value(self) -> Decimal:
        """Sum of total_value across every record in the ledger."""
        return sum(
            (p.total_value for p in self._ledger.positions()),
            values.ZERO,
        )

    # =========================================================================
    # Internals
    # =========================================================================

    def _receive(
        self,
        commodity_id: str,
        quantity: Decimal,
        price: Decimal | None,
        document_reference: str,
        timestamp: datetime | None,
        action: CostAction,
        notes: str,
    ) -> CommodityCostRecord:
        commodity_id = values.commodity_id(commodity_id)
        occurred_at = self._occurred_at(timestamp)

        with LogContext.bind(
            commodity_id=commodity_id,
            document_reference=document_reference,
        ):
            # Nothing to cost an unpriced increase at.  Checked before
            # taking the lock so a rejected call leaves no lock behind.
            if price is None and commodity_id not in self._ledger:
                logger.warning("receipt_rejected_unknown_commodity", extra={
                    "action": action.value,
                })
                raise UnknownCommodityError(commodity_id)

            with self._ledger.exclusive(commodity_id):
                position = self._ledger.current_position(commodity_id)
                opened = position is None
                if position is None:
                    position = CostPosition.empty(commodity_id, occurred_at)
                if price is None:
                    price = position.average_cost

                movement = calculate_receipt(
                    position.current_stock,
                    position.average_cost,
                    quantity,
                    price,
                )
                record = self._commit(
                    position, movement, action, document_reference, occurred_at, notes,
                )

            if opened:
                logger.info("commodity_opened_on_receipt", extra={
                    "unit_price": str(price),
                })
            logger.info("receipt_applied", extra={
                "action": action.value,
                "quantity": str(quantity),
                "unit_price": str(price),
                "stock_after": str(movement.stock_after),
                "avg_cost_before": str(movement.avg_cost_before),
                "avg_cost_after": str(movement.avg_cost_after),
            })
        return record

    def _issue(
        self,
        commodity_id: str,
        quantity: Decimal,
        document_reference: str,
        timestamp: datetime | None,
        action: CostAction,
        notes: str,
    ) -> CommodityCostRecord:
        commodity_id = values.commodity_id(commodity_id)
        occurred_at = self._occurred_at(timestamp)

        with LogContext.bind(
            commodity_id=commodity_id,
            document_reference=document_reference,
        ):
            # A position is never removed once published, so checking
            # outside the lock is safe and keeps unknown ids out of the ledger.
            if commodity_id not in self._ledger:
                logger.warning("issue_rejected_unknown_commodity", extra={
                    "action": action.value,
                })
                raise UnknownCommodityError(commodity_id)

            with self._ledger.exclusive(commodity_id):
                position = self._ledger.current_position(commodity_id)

                if quantity > position.current_stock:
                    logger.warning("issue_rejected_insufficient_stock", extra={
                        "action": action.value,
                        "available": str(position.current_stock),
                        "requested": str(quantity),
                    })
                    raise InsufficientStockError(
                        commodity_id,
                        available=str(position.current_stock),
                        requested=str(quantity),
                    )

                movement = calculate_issue(
                    position.current_stock,
                    position.average_cost,
                    quantity,
                )
                record = self._commit(
                    position, movement, action, document_reference, occurred_at, notes,
                )

            logger.info("issue_applied", extra={
                "action": action.value,
                "quantity": str(quantity),
                "cost_basis": str(movement.unit_price),
                "stock_after": str(movement.stock_after),
            })
        return record

    def _occurred_at(self, timestamp: datetime | None) -> datetime:
        if timestamp is None:
            return self._clock.now()
        return values.aware_timestamp(timestamp)

    def _commit(
        self,
        position: CostPosition,
        movement: CostMovement,
        action: CostAction,
        document_reference: str,
        occurred_at: datetime,
        notes: str,
    ) -> CommodityCostRecord:
        """Build, check and publish the new state. Caller holds the lock."""
        entry = HistoryEntry(
            occurred_at=occurred_at,
            action=action,
            document_reference=document_reference,
            quantity_delta=movement.quantity_delta,
            unit_price=movement.unit_price,
            stock_before=movement.stock_before,
            stock_after=movement.stock_after,
            avg_cost_before=movement.avg_cost_before,
            avg_cost_after=movement.avg_cost_after,
            notes=notes,
        )
        new_position = CostPosition(
            commodity_id=position.commodity_id,
            current_stock=movement.stock_after,
            average_cost=movement.avg_cost_after,
            total_value=movement.total_value_after,
            last_updated=occurred_at,
            history_length=position.history_length + 1,
        )
        if entry.stock_before != position.current_stock:
            raise CostInvariantViolationError(
                position.commodity_id,
                ["history_chain: movement does not start at current stock"],
            )
        # Only the new tail needs checking; earlier entries were checked
        # when they were published.
        assert_record_consistent(
            CommodityCostRecord.from_position(new_position, (entry,))
        )
        return self._ledger.publish(new_position, entry)
