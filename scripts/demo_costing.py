#!/usr/bin/env python3
"""
Walk a fresh cost ledger through the standard costing scenarios.

Optionally lists the grades of a configuration set, then on a fresh ledger:
  1. initializes Diesel at 1000 @ 25
  2. receives 500 @ 28 on INV-1           -> average 26
  3. sells 200 on SALE-1                  -> stock 1300, COGS 5200
  4. tries to sell 2000 on SALE-2         -> rejected, stock unchanged
  5. receives Gasohol95 100 @ 40 on INV-2 -> average 40 (first receipt)

Usage:
    python3 scripts/demo_costing.py
    python3 scripts/demo_costing.py --config default   # also list a YAML set
    python3 scripts/demo_costing.py --json             # dump records as JSON
    python3 scripts/demo_costing.py --log              # structured logs to stderr
"""

import argparse
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from costing_config import get_ledger_config  # noqa: E402
from costing_kernel.exceptions import InsufficientStockError  # noqa: E402
from costing_kernel.logging_config import configure_logging  # noqa: E402
from costing_services import CostLedger, CostingEngine, bootstrap_ledger  # noqa: E402


def _line(label: str, engine: CostingEngine, commodity_id: str) -> None:
    print(
        f"  {label:<32} stock={engine.query_stock(commodity_id):>8}  "
        f"avg={engine.query_average_cost(commodity_id):>6}  "
        f"value={engine.query_stock_value(commodity_id):>10}"
    )


def run(engine: CostingEngine) -> None:
    ledger = engine.ledger

    print("\nScenario 1: initialize Diesel")
    ledger.initialize("Diesel", Decimal("1000"), Decimal("25"))
    _line("initialize 1000 @ 25", engine, "Diesel")

    print("\nScenario 2: receive Diesel")
    engine.apply_receipt("Diesel", Decimal("500"), Decimal("28"), "INV-1")
    _line("receive 500 @ 28 (INV-1)", engine, "Diesel")

    print("\nScenario 3: sell Diesel")
    engine.apply_sale("Diesel", Decimal("200"), "SALE-1")
    _line("sell 200 (SALE-1)", engine, "Diesel")
    print(f"  COGS for 200: {engine.compute_cogs('Diesel', Decimal('200'))}")

    print("\nScenario 4: oversell Diesel")
    try:
        engine.apply_sale("Diesel", Decimal("2000"), "SALE-2")
    except InsufficientStockError as e:
        print(f"  rejected [{e.code}]: {e}")
    _line("after rejected sale", engine, "Diesel")

    print("\nScenario 5: first receipt of Gasohol95")
    engine.apply_receipt("Gasohol95", Decimal("100"), Decimal("40"), "INV-2")
    _line("receive 100 @ 40 (INV-2)", engine, "Gasohol95")

    print("\nDiesel history (most recent first):")
    for entry in engine.query_history("Diesel"):
        print(
            f"  {entry.entry_date} {entry.entry_time} {entry.action.value:<10} "
            f"{entry.document_reference:<6} {entry.quantity_delta:>6} "
            f"@ {entry.unit_price:<4} stock {entry.stock_before} -> {entry.stock_after}"
        )

    print(f"\nTotal portfolio value: {engine.total_portfolio_value()}")


def show_configured_grades(ledger: CostLedger) -> None:
    print("\nConfigured grades:")
    for record in sorted(ledger.list(), key=lambda r: r.commodity_id):
        print(
            f"  {record.commodity_id:<16} stock={record.current_stock:>8}  "
            f"avg={record.average_cost:>6}"
        )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Moving weighted-average costing demo")
    parser.add_argument("--config", help="configuration set whose grades to list first (e.g. default)")
    parser.add_argument("--json", action="store_true", help="print final records as JSON")
    parser.add_argument("--log", action="store_true", help="emit structured logs to stderr")
    args = parser.parse_args(argv)

    if args.log:
        configure_logging(level=logging.INFO)

    if args.config:
        show_configured_grades(bootstrap_ledger(get_ledger_config(args.config)))

    # The walkthrough seeds Diesel itself, so it always starts from an empty ledger
    ledger = CostLedger()
    engine = CostingEngine(ledger)

    run(engine)

    if args.json:
        print(json.dumps([r.to_dict() for r in ledger.list()], indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
