"""
Centralized logging configuration for the supervisor and its helper stages.

Backends talk to the print spooler through standard error, so every record is
written there as ``LEVEL: [scheme pid] message``. This keeps the spooler's
severity prefixes (NOTICE, WARNING, ERROR, ...) while identifying which
supervisor instance produced the line. The stream is the audit trail of the
supervision state machine, so nothing below WARNING is dropped by default.

Optionally a technical log is also appended to ``{log_dir}/{scheme}.log``.
"""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Optional, TextIO

NOTICE = 25
logging.addLevelName(NOTICE, "NOTICE")

CONSOLE_FORMAT = "%(levelname)s: [%(scheme)s %(process)d] %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(scheme)s %(process)d] %(message)s"

_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)
_UNKNOWN_LOGGER_NAME = "<unknown>"


class SchemeFilter(logging.Filter):
    """Stamp every record with the scheme name used in the audit trail."""

    def __init__(self, scheme: str) -> None:
        super().__init__()
        self.scheme = scheme

    def filter(self, record: logging.LogRecord) -> bool:
        record.scheme = self.scheme
        return True


def _close_handlers(logger: logging.Logger, logger_name: Optional[str] = None) -> None:
    """Close all handlers for a logger, logging any errors."""
    for handler in list(logger.handlers):
        try:
            handler.close()
        except OSError as e:  # Best-effort cleanup operation  # policy_guard: allow-silent-handler
            safe_name = logger_name if logger_name else _UNKNOWN_LOGGER_NAME
            _MODULE_LOGGER.debug("Handler close failed for logger '%s': %s", safe_name, e)


def _reset_all_handlers(root_logger: logging.Logger) -> None:
    """Close existing root handlers so reconfiguration never duplicates output."""
    _close_handlers(root_logger)
    root_logger.handlers = []


def _build_console_handler(stream: TextIO, debug: bool) -> logging.Handler:
    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    return console_handler


def _configure_file_handler(scheme: str, log_dir: Optional[Path]) -> Optional[logging.Handler]:
    if log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"{scheme}.log"

    # Several jobs share one file, so always append.
    handler_cls = getattr(logging.handlers, "WatchedFileHandler", logging.FileHandler)
    file_handler = handler_cls(log_path, mode="a")
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, "%Y-%m-%d %H:%M:%S"))
    file_handler.setLevel(logging.DEBUG)
    return file_handler


def setup_logging(
    scheme: str,
    *,
    debug: bool = False,
    log_dir: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure logging for a supervisor (or forwarding stage) process.

    May be called again after configuration has been read; the previous
    handlers are closed and replaced.
    """
    with _config_lock:
        root_logger = logging.getLogger()
        _reset_all_handlers(root_logger)

        scheme_filter = SchemeFilter(scheme)

        console_handler = _build_console_handler(stream if stream is not None else sys.stderr, debug)
        console_handler.addFilter(scheme_filter)
        root_logger.addHandler(console_handler)

        file_handler = _configure_file_handler(scheme, log_dir)
        if file_handler:
            file_handler.addFilter(scheme_filter)
            root_logger.addHandler(file_handler)

        root_logger.setLevel(logging.DEBUG if debug or file_handler else logging.INFO)


__all__ = ["NOTICE", "SchemeFilter", "setup_logging"]
