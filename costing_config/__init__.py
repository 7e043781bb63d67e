"""
costing_config -- single public entrypoint for ledger configuration.

Responsibility:
    Provides the way to obtain a validated ledger configuration at
    runtime through ``get_ledger_config()``.  YAML loading is internal
    tooling; callers receive a frozen ``LedgerConfiguration``.

Architecture position:
    Configuration -- YAML-driven, validated before use.  Sits above
    ``costing_kernel`` and below ``costing_services``.  The kernel never
    imports from this package.

Failure modes:
    - ``FileNotFoundError`` -- no configuration set with the given name.
    - ``ConfigurationError`` -- the set parsed but failed validation.

Audit relevance:
    Every successful ``get_ledger_config()`` call emits a
    ``COSTING_CONFIG_TRACE`` log entry with the config_id, version,
    checksum and commodity count, tying a bootstrapped ledger back to the
    exact configuration that seeded it.
"""

from __future__ import annotations

from pathlib import Path

from costing_config.loader import load_ledger_configuration
from costing_config.schema import CommoditySeed, LedgerConfiguration
from costing_config.validator import ConfigValidationResult, validate_configuration
from costing_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


class ConfigurationError(Exception):
    """A ledger configuration set failed validation."""

    code: str = "CONFIG_ERROR"

    def __init__(self, config_id: str, errors: list[str]):
        self.config_id = config_id
        self.errors = errors
        super().__init__(
            f"Configuration '{config_id}' is invalid: " + "; ".join(errors)
        )


def get_ledger_config(
    name: str = "default",
    config_dir: Path | None = None,
) -> LedgerConfiguration:
    """Load, validate and return the named configuration set.

    Args:
        name: Set name; resolves to ``<config_dir>/<name>.yaml``.
        config_dir: Override path to the sets directory.
            Defaults to costing_config/sets/.

    Raises:
        FileNotFoundError: If the set does not exist.
        ConfigurationError: If validation reports errors.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    path = sets_dir / f"{name}.yaml"
    config = load_ledger_configuration(path)

    validation = validate_configuration(config)
    for warning in validation.warnings:
        _logger.warning("config_validation_warning", extra={
            "config_id": config.config_id,
            "warning": warning,
        })
    if not validation.is_valid:
        _logger.error("config_validation_failed", extra={
            "config_id": config.config_id,
            "errors": validation.errors,
        })
        raise ConfigurationError(config.config_id, validation.errors)

    _logger.info("COSTING_CONFIG_TRACE", extra={
        "trace_type": "COSTING_CONFIG_TRACE",
        "config_id": config.config_id,
        "config_version": config.version,
        "checksum": config.checksum,
        "commodity_count": len(config.commodities),
        "source": str(path),
    })
    return config


__all__ = [
    "CommoditySeed",
    "ConfigValidationResult",
    "ConfigurationError",
    "LedgerConfiguration",
    "get_ledger_config",
    "validate_configuration",
]
