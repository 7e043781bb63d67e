"""
Costing Kernel

An in-memory inventory costing core with:
- Moving weighted-average unit cost per commodity
- Append-only audit history per commodity
- Typed, coded exceptions and non-partial failure
- Structured JSON logging
"""

__version__ = "0.1.0"
