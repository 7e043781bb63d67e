"""
Module: costing_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    costing calculations.  This is the import surface for costing_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import costing_kernel.  MUST NOT import costing_services.

Invariants enforced:
    - Purity: engines never read the clock; timestamps are the caller's job.
    - Decimal-only arithmetic.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via the ``@traced_engine`` decorator
    (see ``costing_engines.tracer``), emitting COSTING_ENGINE_TRACE log
    records that include engine name, version, input fingerprint, and
    duration.
"""

from costing_engines.tracer import compute_input_fingerprint, traced_engine
from costing_engines.weighted_average import (
    CostMovement,
    calculate_cogs,
    calculate_issue,
    calculate_moving_average,
    calculate_receipt,
)

__all__ = [
    "CostMovement",
    "calculate_cogs",
    "calculate_issue",
    "calculate_moving_average",
    "calculate_receipt",
    "compute_input_fingerprint",
    "traced_engine",
]
