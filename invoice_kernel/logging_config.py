"""
Structured JSON logging for the invoice kernel.

Each record is written as one JSON object per line::

    {"ts": "...", "level": "WARNING", "logger": "invoice_kernel.domain...",
     "message": "transition_rejected", "tx_id": "ab..", "invoice_ref": "dede..",
     "action": "pay", "rule": "pay.compliance_signed", ...}

The validator itself stays a pure function of its inputs. The transaction
and invoice being evaluated reach the log lines through LogContext, which
the entry adapter binds around each evaluation.
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
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Iterator

KERNEL_LOGGER = "invoice_kernel"

# ---------------------------------------------------------------------------
# Evaluation context
# ---------------------------------------------------------------------------

_CONTEXT_FIELDS = ("correlation_id", "tx_id", "invoice_ref", "action", "trace_id")

_context_vars: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"invoice_log_{name}", default=None) for name in _CONTEXT_FIELDS
}


def _context_var(name: str) -> ContextVar[str | None]:
    try:
        return _context_vars[name]
    except KeyError:
        raise TypeError(f"unknown log context field {name!r}") from None


class LogContext:
    """
    Evaluation-scoped log fields, isolated per thread and per task.

    Fields: correlation_id, tx_id, invoice_ref, action, trace_id.
    None values are ignored on set and bind; unknown names raise TypeError.
    """

    FIELDS = _CONTEXT_FIELDS

    @staticmethod
    def set(**fields: str | None) -> None:
        for name, value in fields.items():
            var = _context_var(name)
            if value is not None:
                var.set(value)

    @staticmethod
    def get_all() -> dict[str, str]:
        return {
            name: value
            for name, var in _context_vars.items()
            if (value := var.get()) is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _context_vars.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a block, then restore the old values."""
        tokens = []
        for name, value in fields.items():
            var = _context_var(name)
            if value is not None:
                tokens.append((var, var.set(value)))
        try:
            yield LogContext
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(obj: Any) -> Any:
    # Hashes, token names and datum fingerprints are bytes.
    if isinstance(obj, (bytes, bytearray)):
        return bytes(obj).hex()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset)):
        return sorted(str(_json_default(item)) for item in obj)
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # Decode path, rule and label of kernel errors
    for key, value in vars(exc).items():
        if not key.startswith("_"):
            fields[f"exc_{key}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(LogContext.get_all())
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in payload
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_json_default)


def get_logger(name: str) -> logging.Logger:
    """Logger under the invoice_kernel namespace."""
    return logging.getLogger(f"{KERNEL_LOGGER}.{name}")


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

_lock = threading.Lock()
_installed: list[logging.Handler] = []


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one structured handler to the invoice_kernel logger.

    Only the first call takes effect until reset_logging() is called.
    """
    with _lock:
        if _installed:
            return
        if handler is None:
            handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setFormatter(StructuredFormatter())
        kernel_logger = logging.getLogger(KERNEL_LOGGER)
        kernel_logger.setLevel(level)
        kernel_logger.propagate = False
        kernel_logger.addHandler(handler)
        _installed.append(handler)


def reset_logging() -> None:
    """Detach the handler installed by configure_logging(). FOR TESTING ONLY."""
    with _lock:
        kernel_logger = logging.getLogger(KERNEL_LOGGER)
        for handler in _installed:
            kernel_logger.removeHandler(handler)
        _installed.clear()
        kernel_logger.setLevel(logging.NOTSET)
        kernel_logger.propagate = True
