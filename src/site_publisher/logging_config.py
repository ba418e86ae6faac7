"""Logging configuration module."""

from logging import INFO, Handler, Logger, StreamHandler, getLogger

import structlog
from structlog import dev, processors, stdlib
from structlog.processors import JSONRenderer, TimeStamper, dict_tracebacks


def configure_logging(testing: bool = False, level: int = INFO) -> None:
    """Configure structured logging for the publisher.

    Args:
        testing: Whether the process is running in test mode
        level: Log level for the root and package loggers
    """
    root_logger: Logger = getLogger()
    root_logger.setLevel(level)

    package_logger: Logger = getLogger("site_publisher")
    package_logger.setLevel(level)

    handler: Handler = StreamHandler()
    handler.setLevel(level)

    shared_processors = [
        stdlib.add_logger_name,
        stdlib.add_log_level,
        stdlib.PositionalArgumentsFormatter(),
        TimeStamper(fmt="%Y-%m-%d %H:%M:%S.%f"),
        dict_tracebacks,
    ]

    structlog.configure(
        processors=[
            stdlib.filter_by_level,
            *shared_processors,
            processors.format_exc_info,
            JSONRenderer() if not testing else processors.KeyValueRenderer(),
        ],
        context_class=dict,
        logger_factory=stdlib.LoggerFactory(),
        wrapper_class=stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = stdlib.ProcessorFormatter(
        processor=processors.JSONRenderer() if not testing else dev.ConsoleRenderer(),
        foreign_pre_chain=shared_processors,
    )
    handler.setFormatter(formatter)

    # Clear existing handlers to prevent duplicates
    root_logger.handlers = []
    package_logger.handlers = []

    root_logger.addHandler(handler)
    package_logger.propagate = False
    package_logger.addHandler(handler)
