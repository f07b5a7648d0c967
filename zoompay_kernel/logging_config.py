"""
Structured logging (``zoompay_kernel.logging_config``).

Every zoompay logger lives under the ``zoompay`` namespace and writes one
JSON object per line.  Lifecycle operations bind who is acting on which
record through ``LogContext``; those fields are stamped onto every line
emitted inside the binding, ahead of any ``extra`` fields with the same
name.  A logged ``ZoompayError`` contributes its ``code`` and public
attributes as ``exc_*`` fields, so a refusal can be filtered by
``exc_code`` without parsing messages.
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
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from enum import Enum
from typing import Any

NAMESPACE = "zoompay"

# Fields an operation may bind, in the order they appear on a log line.
CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "actor_id",
    "actor_role",
    "record_id",
    "action",
)

_context: ContextVar[Mapping[str, str]] = ContextVar("zoompay_log_context", default={})


class LogContext:
    """Operation-scoped log fields, isolated per thread and per task."""

    @staticmethod
    def _merged(fields: Mapping[str, Any]) -> dict[str, str]:
        merged = dict(_context.get())
        for name, value in fields.items():
            if name in CONTEXT_FIELDS and value is not None:
                merged[name] = str(value)
        return merged

    @classmethod
    def set(
        cls,
        *,
        correlation_id: str | None = None,
        actor_id: str | None = None,
        actor_role: str | None = None,
        record_id: str | None = None,
        action: str | None = None,
    ) -> None:
        """Update the given fields; ``None`` leaves a field as it was."""
        _context.set(cls._merged({
            "correlation_id": correlation_id,
            "actor_id": actor_id,
            "actor_role": actor_role,
            "record_id": record_id,
            "action": action,
        }))

    @staticmethod
    def get_all() -> dict[str, str]:
        current = _context.get()
        return {name: current[name] for name in CONTEXT_FIELDS if name in current}

    @staticmethod
    def clear() -> None:
        _context.set({})

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block.

        Unknown names and ``None`` values are ignored.  On exit the context
        is restored to exactly what it was on entry.

            with LogContext.bind(actor_id=actor.actor_id, action="check"):
                ...
        """
        token = _context.set(cls._merged(fields))
        try:
            yield cls
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------

_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "taskName",
}


def _to_json(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    # UUID, Decimal and anything else without a JSON form
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: ts, level, logger, message, context, extras."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for name, value in vars(record).items():
            if name not in _RESERVED:
                line.setdefault(name, value)

        if record.exc_info and record.exc_info[1] is not None:
            line.update(_exception_fields(record.exc_info[1]))
            line["traceback"] = self.formatException(record.exc_info)

        return json.dumps(line, default=_to_json)


def get_logger(name: str) -> logging.Logger:
    """``get_logger("modules.vouchers.service")`` -> ``zoompay.modules.vouchers.service``."""
    return logging.getLogger(f"{NAMESPACE}.{name}")


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_setup_lock = threading.Lock()
_installed_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach a JSON handler to the ``zoompay`` logger.

    Only the first call has any effect until ``reset_logging()``; later
    calls (from scripts, bootstrap and tests alike) are no-ops.
    """
    global _installed_handler
    with _setup_lock:
        if _installed_handler is not None:
            return
        _installed_handler = (
            handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
        )
        _installed_handler.setFormatter(StructuredFormatter())

        logger = logging.getLogger(NAMESPACE)
        logger.setLevel(level)
        logger.propagate = False
        logger.addHandler(_installed_handler)


def reset_logging() -> None:
    """Detach every handler and forget the previous setup. Tests only."""
    global _installed_handler
    with _setup_lock:
        _installed_handler = None
        logger = logging.getLogger(NAMESPACE)
        logger.handlers.clear()
        logger.setLevel(logging.WARNING)
