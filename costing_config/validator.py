"""
Configuration Validator (``costing_config.validator``).

Validates a ``LedgerConfiguration`` before a ledger is seeded from it.

Invariants enforced
-------------------
* Commodity id uniqueness -- a ledger can only initialize an id once.
* Non-empty commodity ids.
* Non-negative starting stock and cost.

Validation errors block bootstrapping; warnings only flag sets worth a
second look (for example a set with no commodities at all).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from costing_config.schema import LedgerConfiguration


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    ``is_valid`` returns ``True`` only when ``errors`` is empty.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: LedgerConfiguration) -> ConfigValidationResult:
    """Validate a parsed ledger configuration."""
    result = ConfigValidationResult()

    if not config.commodities:
        result.add_warning(f"Configuration '{config.config_id}' declares no commodities")

    seen: set[str] = set()
    for seed in config.commodities:
        if not seed.commodity_id.strip():
            result.add_error("Commodity with empty commodity_id")
            continue
        if seed.commodity_id in seen:
            result.add_error(f"Duplicate commodity_id '{seed.commodity_id}'")
        seen.add(seed.commodity_id)
        if seed.initial_stock < 0:
            result.add_error(
                f"Commodity '{seed.commodity_id}' has negative initial_stock "
                f"{seed.initial_stock}"
            )
        if seed.initial_cost < 0:
            result.add_error(
                f"Commodity '{seed.commodity_id}' has negative initial_cost "
                f"{seed.initial_cost}"
            )

    return result
