"""
costing_engines.tracer -- COSTING_ENGINE_TRACE records for pure calculations.

``@traced_engine`` wraps a costing calculation so that every call leaves a
DEBUG record naming the engine, its version, how long it took, whether it
returned or raised, and a short fingerprint of the inputs that determine
its result.  Two calls with the same stock, cost and price fingerprint
identically, so a surprising average can be matched back to the exact
inputs that produced it.

The wrapper never alters arguments or results.  Exceptions from the
calculation are re-raised untouched after the ``error`` trace is written.
When DEBUG is off for the tracer logger the wrapped function is called
directly and no fingerprint is computed.
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

from costing_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_TYPE = "COSTING_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16


def _canonical(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, Decimal):
        # 26 and 26.00 are the same cost
        return str(value.normalize()) if value.is_finite() else str(value)
    if isinstance(value, Mapping):
        return "{" + ",".join(
            f"{key}:{_canonical(value[key])}" for key in sorted(value)
        ) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonical(item) for item in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """
    Short SHA-256 digest over the named arguments, in field order.

    A field absent from ``arguments`` hashes the same as an explicit None.
    """
    canonical = "|".join(
        f"{name}={_canonical(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable[[Callable], Callable]:
    """
    Decorate a pure costing calculation with COSTING_ENGINE_TRACE logging.

    ``fingerprint_fields`` are parameter names of the decorated function;
    they are resolved against its signature, so positional and keyword
    calls fingerprint alike.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if not _logger.isEnabledFor(logging.DEBUG):
                return func(*args, **kwargs)

            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.perf_counter()
            outcome = "error"
            try:
                result = func(*args, **kwargs)
                outcome = "ok"
                return result
            finally:
                _logger.debug(TRACE_TYPE, extra={
                    "trace_type": TRACE_TYPE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 3),
                    "outcome": outcome,
                    "function": func.__qualname__,
                })

        return wrapper

    return decorator
