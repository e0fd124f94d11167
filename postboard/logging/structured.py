"""structlog setup shared by the services.

Events are emitted as ``logger.info("post_created", post_id=...)``. The
request id and acting user are carried in structlog contextvars, so each
request (and each threadpool task it spawns) logs with its own values.
Output is JSON when ``LOG_JSON`` is set, console-friendly otherwise.
"""

import logging
import sys
from typing import Optional
from uuid import UUID

import structlog
from structlog.types import EventDict, WrappedLogger

from postboard.config import LOG_JSON, LOG_LEVEL

SERVICE_NAME = "postboard"


def add_service_info(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    event_dict["service"] = SERVICE_NAME
    return event_dict


def configure_structlog(json_format: bool = LOG_JSON, log_level: str = LOG_LEVEL) -> None:
    """(Re)configure structlog and the stdlib root handler it writes through."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_service_info,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(
    request_id: Optional[str] = None,
    user_id: Optional[UUID] = None,
) -> None:
    """Attach request_id / user_id to every event logged in this context."""
    values = {}
    if request_id:
        values["request_id"] = request_id
    if user_id:
        values["user_id"] = str(user_id)
    if values:
        structlog.contextvars.bind_contextvars(**values)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


configure_structlog()
