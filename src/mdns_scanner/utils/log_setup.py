"""
structlog configuration shared by the CLI and the terminal UI.
"""
import logging as py_logging
import sys

import structlog

from ..config import LoggingConfig


def configure_logging(logging_config: LoggingConfig) -> None:
    """
    Routes structlog through stdlib logging. With a log file configured the
    terminal stays free for the UI; otherwise records go to stderr.
    """
    if logging_config.file is not None:
        handler: py_logging.Handler = py_logging.FileHandler(logging_config.file, encoding="utf-8")
    else:
        handler = py_logging.StreamHandler(sys.stderr)

    py_logging.basicConfig(
        level=getattr(py_logging, logging_config.level.upper()),
        format="%(message)s",
        handlers=[handler],
        force=True
    )

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(colors=logging_config.file is None) if logging_config.format.lower() == "console"
            else structlog.processors.JSONRenderer(sort_keys=True)
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    structlog.get_logger(__name__).info(
        "Logging configured.", logging_level=logging_config.level, logging_format=logging_config.format
    )
