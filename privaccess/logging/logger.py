"""
Logger Implementation
=====================

structlog pipeline for access attempts. Console output uses rich
tracebacks; production emits one JSON object per line. Location data
and key material are redacted before any renderer sees them.

Version: 0.1.0
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from privaccess.config import get_settings


if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger


# Matched as substrings of lowercased keys, so "user_hash_prefix" is caught too
SENSITIVE_KEYS = frozenset(
    {
        "password",
        "secret",
        "token",
        "authorization",
        "private_key",
        "nonce",
        "fingerprint",
        "geohash",
        "user_hash",
        "latitude",
        "longitude",
        "witness",
    }
)

REDACTED = "***REDACTED***"

QUIET_LOGGERS = ("asyncio",)


def _is_sensitive(key: str) -> bool:
    key = key.lower()
    return any(s in key for s in SENSITIVE_KEYS)


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: REDACTED if _is_sensitive(str(k)) else _redact(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(_redact(v) for v in value)
    return value


def censor_secrets(logger: WrappedLogger | None, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace sensitive values at any depth of the event."""
    return _redact(event_dict)


def _service_stamp(service_name: str) -> Processor:
    def stamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return stamp


def _renderer(json_logs: bool) -> tuple[Processor, Processor]:
    """Exception processor and final renderer for the chosen output."""
    if json_logs:
        return structlog.processors.format_exc_info, structlog.processors.JSONRenderer()
    # Locals stay hidden: prover frames hold the private key and nonce
    traceback = structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=10)
    return structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer(colors=True, exception_formatter=traceback)


def setup_logging(
    log_level: str | None = None,
    json_logs: bool | None = None,
    service_name: str = "privaccess",
) -> None:
    """
    Route structlog and stdlib logging through one handler on stdout.

    Args:
        log_level: Level name; defaults to ``settings.log_level``
        json_logs: JSON lines instead of console output; defaults to on in production
        service_name: Value of the ``service`` field on every event
    """
    settings = get_settings()
    if log_level is None:
        log_level = settings.log_level.value
    if json_logs is None:
        json_logs = settings.is_production

    exc_processor, renderer = _renderer(json_logs)
    pre_chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_stamp(service_name),
        censor_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        exc_processor,
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level.upper())
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> "BoundLogger":
    """Module logger, e.g. ``get_logger(__name__).info("access_decision", door_id="101")``."""
    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every later event in the current async context."""
    structlog.contextvars.bind_contextvars(**kwargs)


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """
    Bind fields for the duration of a block.

    Previous values of the same keys come back on exit, including when the
    block raises or is cancelled.

    Example:
        with log_context(attempt_id=attempt_id, door_id="101"):
            logger.info("access_attempt_started")
    """
    with structlog.contextvars.bound_contextvars(**kwargs):
        yield


def clear_context() -> None:
    """Drop every bound field."""
    structlog.contextvars.clear_contextvars()
