"""structlog setup for the service process.

Both structlog loggers and stdlib loggers (uvicorn, googleapiclient) end
up on a single stdout handler, rendered as JSON lines in production or
coloured console output in development.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable

import structlog
from structlog.types import Processor

# Loggers that chatter at INFO about every discovery document or token refresh
NOISY_LOGGERS = ("googleapiclient.discovery_cache", "google_auth_httplib2")

# uvicorn installs its own handlers unless run with ``log_config=None``
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def _renderers(json: bool) -> list[Processor]:
    if json:
        return [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    # ConsoleRenderer formats exc_info itself
    return [structlog.dev.ConsoleRenderer()]


def setup_logging(
    *,
    json: bool = True,
    level: str = "INFO",
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Configure structlog and route stdlib logging through it.

    Parameters
    ----------
    json:
        JSON lines with structured tracebacks when *True*, the console
        renderer otherwise.
    level:
        Root log level name, case-insensitive.
    quiet:
        Stdlib loggers raised to ``WARNING``.
    """
    pre_chain = _pre_chain()

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
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_renderers(json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
