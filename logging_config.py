"""
Logging setup for Innoprint.

Every record carries the thread name and the id of the signed-in user
("-" outside a request), so one customer's checkout can be followed
through the log.

Handlers:
    stdout         - always
    innoprint.log  - production only, rotated
    innoprint_error.log - production only, ERROR and above

Log Format:
    2026-10-18 10:15:30 [INFO    ] [MainThread] [-] innoprint.app - Starting Innoprint
    2026-10-18 10:15:31 [INFO    ] [Thread-3] [u-8f2c] innoprint.core.address_store - Saved address a1b2

Usage:
    setup_logging(log_level=logging.DEBUG, enable_file_logging=False)   # create_app()
    logger = get_logger(__name__)                                       # any module
"""

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from flask import has_request_context, session


ROOT_LOGGER_NAME = "innoprint"


# =============================================================================
# REQUEST CONTEXT FILTER
# =============================================================================

class RequestContextFilter(logging.Filter):
    """
    Logging filter that stamps request context onto every record.

    Adds:
        - thread_name: Name of the current thread
        - user_id: Signed-in user id from the Flask session, or "-"
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.thread_name = threading.current_thread().name

        user_id = "-"
        if has_request_context():
            user_id = session.get("user_id") or "-"
        record.user_id = user_id

        # Context only, never drops a record
        return True


# =============================================================================
# LOGGING SETUP
# =============================================================================

LOG_FORMAT = "%(asctime)s [%(levelname)-8s] [%(thread_name)s] [%(user_id)s] %(name)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 10


def _attach(
    logger: logging.Logger,
    handler: logging.Handler,
    level: int,
    formatter: logging.Formatter,
    context_filter: logging.Filter,
) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(context_filter)
    logger.addHandler(handler)


def _rotating(path: Path) -> RotatingFileHandler:
    return RotatingFileHandler(
        filename=path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )


def setup_logging(
    app_name: str = ROOT_LOGGER_NAME,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = True,
) -> logging.Logger:
    """
    Install handlers on the application's root logger.

    Console output always; with enable_file_logging, <app_name>.log and an
    ERROR-only <app_name>_error.log in log_dir (./logs by default), both
    rotated at LOG_FILE_MAX_BYTES.

    Calling it again replaces the handlers, so create_app() can run once
    per test.

    Returns:
        The "innoprint" logger that get_logger() children propagate to
    """
    root = logging.getLogger(app_name)
    root.setLevel(log_level)
    root.propagate = False
    root.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    context_filter = RequestContextFilter()

    _attach(root, logging.StreamHandler(sys.stdout), log_level, formatter, context_filter)

    if enable_file_logging:
        log_dir = Path(log_dir) if log_dir else Path(__file__).parent / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        _attach(root, _rotating(log_dir / f"{app_name}.log"), log_level, formatter, context_filter)
        _attach(root, _rotating(log_dir / f"{app_name}_error.log"), logging.ERROR, formatter, context_filter)
        root.debug(f"Writing logs to {log_dir}")

    root.debug(f"Log level {logging.getLevelName(log_level)}")
    return root


def get_logger(name: str) -> logging.Logger:
    """
    Child logger under the "innoprint" namespace.

    get_logger("core.address_store") -> "innoprint.core.address_store"
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
