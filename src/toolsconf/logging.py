import logging
import sys
from typing import Any

import structlog


def configure_logging(level: int | str = logging.WARNING, json_output: bool | None = None) -> None:
    """
    Configure the structlog/standard logging bridge on stderr.

    Events render as JSON when stderr is not a terminal (or json_output is
    set), as plain console lines otherwise.
    """
    if json_output is None:
        json_output = not sys.stderr.isatty()

    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr, force=True)


def bind_command_context(command: str, **kwargs: Any) -> None:
    """Attach the running command to every event logged while it runs."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(command=command, **kwargs)
