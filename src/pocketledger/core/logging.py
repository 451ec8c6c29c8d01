"""Structured JSON logging with the app session id bound from context."""

import logging

import structlog


def set_session_id(session_id: str) -> None:
    """Tag every log line from this context (and the tasks it spawns) with ``session_id``."""
    structlog.contextvars.bind_contextvars(session_id=session_id)


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog with JSON output."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # SQLAlchemy and aiosqlite log through stdlib; only their warnings are worth keeping
    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=structlog.processors.JSONRenderer(ensure_ascii=False))
    )
    for name in ("sqlalchemy", "aiosqlite"):
        library_logger = logging.getLogger(name)
        library_logger.handlers = [handler]
        library_logger.setLevel(logging.WARNING)
        library_logger.propagate = False


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structlog logger; session ID is merged in from context at log time."""
    return structlog.get_logger(name)
