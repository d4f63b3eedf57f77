"""Logging setup for the bookshop: stdlib handlers with structlog on top.

Console output always; ``bookshop.log`` and ``bookshop_error.log`` rotate in
``BOOKSHOP_LOG_DIR``. Request and operation context bound through
``add_context`` is merged into every record emitted while it is bound.
"""

import logging
import logging.handlers
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import structlog

LEVEL_BY_ENV = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
JSON_ENVS = ("production", "staging")
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


def _environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """``LOG_LEVEL`` wins; otherwise the level follows the deployment environment."""
    return os.getenv("LOG_LEVEL", LEVEL_BY_ENV.get(_environment(), "INFO"))


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_dir: str | None = None) -> None:
    level = get_log_level()
    log_path = Path(log_dir or os.getenv("BOOKSHOP_LOG_DIR", "logs"))
    log_path.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [
        console,
        _rotating_handler(log_path / "bookshop.log", level),
        _rotating_handler(log_path / "bookshop_error.log", logging.ERROR),
    ]

    for noisy in ("protean", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def setup_structlog() -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if _environment() in JSON_ENVS
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str | None = None) -> None:
    setup_stdlib_logging(log_dir)
    setup_structlog()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def add_context(**kwargs: Any) -> None:
    """Bind key/values onto every log record emitted from this context onwards."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind key/values for the duration of the block, restoring what was bound before."""
    previous = structlog.contextvars.get_contextvars()
    add_context(**kwargs)
    try:
        yield
    finally:
        clear_context()
        add_context(**previous)
