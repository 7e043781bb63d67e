"""
costing_services.bootstrap -- Explicit construction of a seeded ledger.

Responsibility:
    Build a fresh CostLedger (and the CostingEngine over it) from a
    validated LedgerConfiguration.  The owning service calls this once at
    startup; nothing is seeded as an import side effect, so tests and
    tenants each get an isolated ledger.

Failure modes:
    - AlreadyInitializedError if the configuration lists an id twice
      (the validator rejects such sets first).
    - InvalidQuantityError / InvalidPriceError for negative seeds.
"""

from __future__ import annotations

from costing_config.schema import LedgerConfiguration
from costing_kernel.domain.clock import Clock
from costing_kernel.logging_config import get_logger
from costing_services.cost_ledger import CostLedger
from costing_services.costing_engine import CostingEngine

logger = get_logger("services.bootstrap")


def bootstrap_ledger(
    config: LedgerConfiguration,
    clock: Clock | None = None,
) -> CostLedger:
    """Create a ledger and initialize every configured commodity."""
    ledger = CostLedger(clock=clock)
    for seed in config.commodities:
        ledger.initialize(
            seed.commodity_id,
            seed.initial_stock,
            seed.initial_cost,
        )

    logger.info("ledger_bootstrapped", extra={
        "config_id": config.config_id,
        "config_version": config.version,
        "checksum": config.checksum,
        "commodities": list(config.commodity_ids),
    })
    return ledger


def build_costing_engine(
    config: LedgerConfiguration,
    clock: Clock | None = None,
) -> CostingEngine:
    """Bootstrap a ledger from config and wrap it in a CostingEngine."""
    ledger = bootstrap_ledger(config, clock=clock)
    return CostingEngine(ledger, clock=clock)
