"""
Configuration Loader (``costing_config.loader``).

Responsibility
--------------
Loads ledger configuration YAML files and parses them into typed
``costing_config.schema`` dataclass instances.  Runtime callers go
through ``costing_config.get_ledger_config()`` instead of calling this
module directly.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Quantities and costs are parsed to ``Decimal`` through ``str()`` so a
  YAML float such as ``28.5`` never carries binary noise.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
* Non-numeric balances  -> ``ValueError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from costing_config.schema import CommoditySeed, LedgerConfiguration
from costing_kernel.domain.values import to_decimal


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any) -> Decimal:
    """Parse a YAML scalar (int, float or string) into a finite Decimal."""
    return to_decimal(value)


def parse_commodity_seed(data: dict[str, Any]) -> CommoditySeed:
    """Parse a CommoditySeed from a dict."""
    return CommoditySeed(
        commodity_id=str(data["commodity_id"]),
        initial_stock=parse_decimal(data.get("initial_stock", 0)),
        initial_cost=parse_decimal(data["initial_cost"]),
        description=data.get("description", ""),
    )


def parse_ledger_configuration(data: dict[str, Any]) -> LedgerConfiguration:
    """
    Parse a ``LedgerConfiguration`` from the dict form of a YAML set.

    The checksum is computed over the raw dict so that any edit to the
    source file changes it.
    """
    return LedgerConfiguration(
        config_id=data["config_id"],
        version=int(data.get("version", 1)),
        description=data.get("description", ""),
        commodities=tuple(
            parse_commodity_seed(item) for item in data.get("commodities", ())
        ),
        checksum=compute_checksum(data),
    )


def load_ledger_configuration(path: Path) -> LedgerConfiguration:
    """Load and parse one YAML configuration set."""
    return parse_ledger_configuration(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
