# /callscript/utils/logging.py

import logging
import sys
import structlog
from callscript.config.settings import settings

# Navigation events (dangling references, stale results, resets) are emitted
# as structured key/value events so script administrators can query them.

_HANDLER_NAME = "callscript"

# Libraries that log every request or scheduler tick at INFO.
_NOISY_LOGGERS = ("uvicorn.access", "apscheduler", "slowapi")


def _renderer():
    if settings.environment == "development":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging():
    """
    Route structlog and stdlib logging through one stdout handler.

    Safe to call more than once: the app lifespan runs again for every
    TestClient, and a second call replaces the handler instead of stacking it.
    Request-scoped values bound with ``structlog.contextvars`` by the HTTP
    middleware (method and path) are merged into every event.
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=_renderer(), foreign_pre_chain=shared_processors)
    )

    root_logger = logging.getLogger()
    for existing in [h for h in root_logger.handlers if h.get_name() == _HANDLER_NAME]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
