"""
Structured JSON logging for the costing ledger.

Every costing log line is one JSON object: timestamp, level, logger name,
event message, the ambient context (which commodity and which document
the event belongs to) and any ``extra=`` fields the caller attached.
Decimal quantities and prices are written as strings so no precision is
lost between the ledger and whoever reads the logs.

Context is held in a single ``ContextVar`` so it follows the current
thread or task without leaking between concurrent postings.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Mapping
from uuid import UUID

_LOGGER_PREFIX = "costing_kernel"

_CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "document_reference",
    "commodity_id",
    "actor_id",
)

_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar(
    "costing_log_context", default=_EMPTY
)


def _merged(current: Mapping[str, str], fields: dict[str, str | None]) -> Mapping[str, str]:
    unknown = set(fields) - set(_CONTEXT_FIELDS)
    if unknown:
        raise TypeError(f"Unknown log context field(s): {sorted(unknown)}")
    updated = dict(current)
    updated.update({k: v for k, v in fields.items() if v is not None})
    return MappingProxyType(updated)


class LogContext:
    """Request-scoped fields stamped onto every costing log line."""

    @staticmethod
    def set(
        *,
        correlation_id: str | None = None,
        document_reference: str | None = None,
        commodity_id: str | None = None,
        actor_id: str | None = None,
    ) -> None:
        """Set context fields. None leaves a field as it was."""
        _context.set(_merged(_context.get(), {
            "correlation_id": correlation_id,
            "document_reference": document_reference,
            "commodity_id": commodity_id,
            "actor_id": actor_id,
        }))

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)

    @staticmethod
    def bind(**fields: str | None) -> "_BoundContext":
        """Scope fields to a ``with`` block; the previous context comes back on exit."""
        return _BoundContext(fields)


class _BoundContext:

    def __init__(self, fields: dict[str, str | None]):
        self._fields = fields
        self._token: Token | None = None

    def __enter__(self) -> type[LogContext]:
        self._token = _context.set(_merged(_context.get(), self._fields))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        if self._token is not None:
            _context.reset(self._token)
            self._token = None


# Attributes every LogRecord carries; anything else came from extra=.
_RECORD_ATTRIBUTES: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (UUID, Exception)):
        return str(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return repr(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # CostingError subclasses keep their facts as public attributes
    for attr, value in vars(exc).items():
        if not attr.startswith("_") and attr != "code":
            fields[f"exc_{attr}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


def get_logger(name: str) -> logging.Logger:
    """Logger under the costing_kernel namespace, e.g. ``get_logger("services.ledger")``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_state_lock = threading.Lock()
_installed_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the costing_kernel logger tree.

    Only the first call has any effect; later calls return without touching
    the installed handler or level.
    """
    global _installed_handler
    with _state_lock:
        if _installed_handler is not None:
            return
        target = handler or logging.StreamHandler(stream or sys.stderr)
        target.setFormatter(StructuredFormatter())

        costing_logger = logging.getLogger(_LOGGER_PREFIX)
        costing_logger.setLevel(level)
        costing_logger.propagate = False
        costing_logger.addHandler(target)
        _installed_handler = target


def reset_logging() -> None:
    """Detach the installed handler. Used by tests."""
    global _installed_handler
    with _state_lock:
        costing_logger = logging.getLogger(_LOGGER_PREFIX)
        costing_logger.handlers.clear()
        costing_logger.setLevel(logging.WARNING)
        costing_logger.propagate = True
        _installed_handler = None
