"""structlog setup.

Development gets coloured console output; everything else gets one JSON
object per line. contextvars are merged first so the request_id bound by
RequestIdMiddleware shows up on every entry logged during a request.
"""

import logging

import structlog

from hireboard.config import Settings


def configure_logging(config: Settings) -> None:
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if config.environment == "development":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
