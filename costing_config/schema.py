"""
Ledger configuration schema.

Defines the human-authored, reviewable source artifact for bootstrapping
a cost ledger: which commodities exist and the balance each starts with.
YAML sets are parsed into these types by the loader and validated by the
validator before a ledger is seeded from them.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

# ---------------------------------------------------------------------------
# Commodities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CommoditySeed:
    """Starting balance for one commodity."""

    commodity_id: str
    initial_stock: Decimal
    initial_cost: Decimal
    description: str = ""


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerConfiguration:
    """A complete, parsed ledger configuration set."""

    config_id: str
    version: int
    commodities: tuple[CommoditySeed, ...]
    description: str = ""
    checksum: str = ""

    @property
    def commodity_ids(self) -> tuple[str, ...]:
        return tuple(seed.commodity_id for seed in self.commodities)
