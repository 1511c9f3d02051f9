# chatwire/logging_config.py
import logging
import structlog
from typing import Union
import sys


def setup_logging(log_level: Union[int, str] = logging.INFO, colors: bool = True):
    """Set up structured logging for applications embedding chatwire.

    This configures structlog and applies it to the root logger,
    so chatwire's debug traces and the host application's logs share
    one format and level filter.
    """
    if isinstance(log_level, str):
        log_level = getattr(logging, log_level.upper())

    shared_processors = [
        # Add context from contextvars
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper("iso"),
    ]

    structlog.configure(
        processors=shared_processors + [structlog.dev.ConsoleRenderer(colors=colors)],
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Filter logs according to level *before* processing
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )

    # --- Standard library logging integration ---

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=colors),
        # Processors to apply to logs from non-structlog loggers
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # Keep httpx request lines out of INFO output
    if isinstance(log_level, int) and log_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    return None
