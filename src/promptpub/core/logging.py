"""Logging configuration for PromptPub."""

import logging
import logging.config
import sys
from pathlib import Path
from typing import Optional

import structlog

from .config import settings


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """Setup logging configuration.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format (json, console)
        log_file: Optional log file path
    """
    log_level = log_level or settings.log_level
    log_format = log_format or settings.log_format
    log_file = log_file or settings.log_file

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        # JSON format for production
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # Console format for development
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers = ["console"]
    if log_file:
        handlers.append("file")

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processor": processors[-1],
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "formatter": "structured",
            },
        },
        "loggers": {
            "": {
                "handlers": handlers,
                "level": log_level,
                "propagate": True,
            },
            "uvicorn": {
                "handlers": handlers,
                "level": "INFO",
                "propagate": False,
            },
            "uvicorn.access": {
                "handlers": handlers,
                "level": "INFO",
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "handlers": handlers,
                "level": "WARNING",
                "propagate": False,
            },
            "aiosqlite": {
                "handlers": handlers,
                "level": "WARNING",
                "propagate": False,
            },
        },
    }

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logging_config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(log_path),
            "maxBytes": 10 * 1024 * 1024,  # 10MB
            "backupCount": 5,
            "formatter": "structured",
        }

    logging.config.dictConfig(logging_config)

    logger = structlog.get_logger(__name__)
    logger.info(f"Logging configured: level={log_level}, format={log_format}")
    if log_file:
        logger.info(f"Log file: {log_file}")


def log_request_response(
    logger: structlog.stdlib.BoundLogger,
    request_id: str,
    method: str,
    url: str,
    status_code: int,
    duration_ms: float,
    **kwargs
) -> None:
    """Log HTTP request/response details.

    Args:
        logger: Logger instance
        request_id: Unique request ID
        method: HTTP method
        url: Request URL
        status_code: Response status code
        duration_ms: Request duration in milliseconds
        **kwargs: Additional context
    """
    logger.info(
        "HTTP request completed",
        request_id=request_id,
        method=method,
        url=url,
        status_code=status_code,
        duration_ms=duration_ms,
        **kwargs
    )


def log_version_transition(
    logger: structlog.stdlib.BoundLogger,
    action: str,
    prompt_id: str,
    version_id: str,
    version: str,
    superseded_version_id: Optional[str] = None,
    **kwargs
) -> None:
    """Log a version lifecycle transition.

    Args:
        logger: Logger instance
        action: Lifecycle action (create, revise, rollback, copy)
        prompt_id: Owning prompt ID
        version_id: ID of the newly current version
        version: Label of the newly current version
        superseded_version_id: Version moved to history, if any
        **kwargs: Additional context
    """
    logger.info(
        "Prompt version created",
        action=action,
        prompt_id=prompt_id,
        version_id=version_id,
        version=version,
        superseded_version_id=superseded_version_id,
        **kwargs
    )
