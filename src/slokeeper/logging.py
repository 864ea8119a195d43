import logging
from typing import Any

import structlog


def configure_logging(level: int | str = logging.INFO, *, json: bool = True) -> None:
    """Configure the structlog/stdlib bridge used by the SLO provider.

    Hosts that capture provider output line by line want ``json=True``;
    interactive runs and the test suite use the console renderer.
    """

    renderer: Any = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.processors.add_log_level,
    ]
    if json:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=json,
    )

    logging.basicConfig(level=level, format="%(message)s", force=True)


def bind_context(**kwargs: Any) -> structlog.stdlib.BoundLogger:
    """Return a logger carrying resource context such as ``slo_id``."""

    return structlog.get_logger().bind(**kwargs)
