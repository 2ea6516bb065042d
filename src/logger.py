"""
Logging Setup Module.

Builds the application logger on structlog. Log records go to stderr (stdout
is reserved for exported data) and, optionally, to a file in the configured
log directory.

Events are logged with keyword context, e.g.
``logger.info("Fetched issue page", page=2, issues=100)``. Production output
is one JSON object per line; development output is a readable console line.
"""

import logging
import os
import sys
from typing import Any, List, Optional

import structlog


SHARED_PROCESSORS: List[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
]


def json_formatter() -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
    )


def console_formatter() -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
    )


class LogManager:
    """
    Configures structlog and a named stdlib logger behind it.

    Attributes:
        logger (structlog.stdlib.BoundLogger): The configured logger instance.
    """

    def __init__(
        self,
        app_name: str,
        log_dir: Optional[str] = None,
        development: bool = False,
        level: int = logging.WARNING,
    ):
        """Initialize handlers and renderers.

        Args:
            app_name (str): Logger name, also used for the log file name.
            log_dir (Optional[str]): Directory for the log file; no file when None.
            development (bool): Render readable console lines instead of JSON.
            level (int): Logging level.
        """
        structlog.configure(
            processors=SHARED_PROCESSORS
            + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

        stdlib_logger = logging.getLogger(app_name)
        stdlib_logger.setLevel(level)
        stdlib_logger.propagate = False
        stdlib_logger.handlers.clear()

        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(console_formatter() if development else json_formatter())
        stdlib_logger.addHandler(console)

        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(
                os.path.join(log_dir, f"{app_name}.log"), encoding="utf-8"
            )
            file_handler.setFormatter(json_formatter())
            stdlib_logger.addHandler(file_handler)

        self.logger = structlog.get_logger(app_name)
