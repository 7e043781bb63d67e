"""
Pytest fixtures for the costing test suite.

Provides:
- A deterministic clock so history timestamps are predictable
- Fresh, isolated ledgers and engines per test
- A Diesel ledger at the standard starting balance (1000 @ 25)
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from costing_kernel.domain.clock import DeterministicClock
from costing_kernel.logging_config import LogContext
from costing_services.cost_ledger import CostLedger
from costing_services.costing_engine import CostingEngine

FIXED_TIME = datetime(2026, 3, 1, 8, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(FIXED_TIME)


@pytest.fixture
def ledger(deterministic_clock) -> CostLedger:
    return CostLedger(clock=deterministic_clock)


@pytest.fixture
def engine(ledger) -> CostingEngine:
    return CostingEngine(ledger)


@pytest.fixture
def diesel_engine(engine) -> CostingEngine:
    """Engine whose ledger holds Diesel at 1000 @ 25."""
    engine.ledger.initialize("Diesel", Decimal("1000"), Decimal("25"))
    return engine


@pytest.fixture(autouse=True)
def _clear_log_context():
    LogContext.clear()
    yield
    LogContext.clear()
