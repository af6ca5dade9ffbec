import logging
import sys

import structlog
from structlog.stdlib import LoggerFactory

SHARED_PROCESSORS = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def build_processors(log_format="console"):
    """Processor chain ending in a JSON renderer for ``json``, console otherwise."""
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()
    return SHARED_PROCESSORS + [renderer]


def configure_logging(log_level="INFO", log_format="console", stream=None):
    """
    Route structlog through stdlib logging at ``log_level``.

    A no-op once structlog is configured, so embedding applications and
    test suites keep their own setup.
    """
    if structlog.is_configured():
        return

    # stdout carries program output (listings, run results)
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper(), logging.INFO),
        stream=stream or sys.stderr,
        force=True,
    )
    structlog.configure(
        processors=build_processors(log_format),
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    structlog.get_logger(__name__).debug("VM logging ready", level=log_level, renderer=log_format)
