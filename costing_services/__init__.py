"""
costing_services -- Package init and public API.

Responsibility:
    Stateful orchestration over the pure costing engines: the CostLedger
    store, the CostingEngine operations and the explicit bootstrap.  This
    is the only layer that holds mutable state, locks or wall-clock time.

Architecture position:
    Services -- stateful orchestration over engines + kernel.

    Dependency direction:
        costing_services/ -> costing_engines/  (allowed)
        costing_services/ -> costing_kernel/   (allowed)
        costing_services/ -> costing_config/   (allowed, bootstrap only)
        costing_engines/  -> costing_services/ (FORBIDDEN)
        costing_kernel/   -> costing_services/ (FORBIDDEN)
"""

from costing_services.bootstrap import bootstrap_ledger, build_costing_engine
from costing_services.cost_ledger import CostLedger, HistoryView
from costing_services.costing_engine import CostingEngine

__all__ = [
    "CostLedger",
    "CostingEngine",
    "HistoryView",
    "bootstrap_ledger",
    "build_costing_engine",
]
