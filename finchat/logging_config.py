"""
Structured logging for finchat.

Event logs (dispatch outcomes, detected transfers) go through structlog;
library modules keep using ``logging.getLogger(__name__)`` and are rendered by
the same formatter. DEBUG renders for a terminal, anything else as JSON lines.
"""

import logging
import sys
from typing import Any, MutableMapping, Optional

import structlog

from .config import Settings, get_settings

SERVICE_NAME = "finchat"

# Never emitted, even if a caller binds them by mistake
_REDACTED_KEYS = frozenset({"api_key", "xi_api_key", "authorization"})


def _add_service(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _redact_credentials(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    for key in _REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def setup_logging(log_level: Optional[str] = None, settings: Optional[Settings] = None) -> None:
    """Configure structlog and the root logger.

    Args:
        log_level: Override level name (default: ``settings.log_level``)
        settings: Settings to read the level from (default: global settings)
    """
    level_name = (log_level or (settings or get_settings()).log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    pre_chain: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_service,
        _redact_credentials,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if level == logging.DEBUG:
        renderer: Any = structlog.dev.ConsoleRenderer()
    else:
        pre_chain.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    # Request/response chatter from the HTTP client stack
    for name in ("httpcore", "httpx"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


def bind_request_context(**values: object) -> None:
    """Replace the per-invocation context (e.g. ``request_id``) on every log line."""

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


__all__ = ["SERVICE_NAME", "bind_request_context", "get_logger", "setup_logging"]
