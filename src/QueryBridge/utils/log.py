"""QueryBridge logging utilities.

All modules log through the package logger ``log``. The CLI calls
``configure_logging`` once per command; library callers that never do so get
the stdlib defaults.

Line format: ``mm-dd HH:MM:SS [LVL] message`` with LVL one of
DEBG/INFO/WARN/ERRO.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Final

_FORMAT: Final = "%(asctime)s [%(levelabbr)s] %(message)s"
_DATE_FORMAT: Final = "%m-%d %H:%M:%S"

_ABBREVIATIONS: Final[dict[int, str]] = {
    logging.DEBUG: "DEBG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERRO",
    logging.CRITICAL: "ERRO",
}

log = logging.getLogger("QueryBridge")


class _ShortLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 - stdlib name
        record.levelabbr = _ABBREVIATIONS.get(record.levelno, record.levelname[:4])
        return super().format(record)


def _console_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _file_handler(log_dir: str, action: str, formatter: logging.Formatter) -> tuple[logging.Handler, Path]:
    """Open ``<log_dir>/<action>/<action>_<mmddHHMMSS>.log``; files always get DEBUG."""
    directory = Path(log_dir or "log") / action
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{action}_{datetime.now():%m%d%H%M%S}.log"
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler, path


def configure_logging(
    *,
    level: str = "INFO",
    action: str | None = None,
    log_to_file: bool = False,
    log_dir: str = "log",
) -> Path | None:
    """(Re)install the handlers of the QueryBridge logger.

    Args:
        level: Console log level name; unknown names fall back to INFO.
        action: CLI command name, used for the log file location.
        log_to_file: Mirror every record (DEBUG and up) into a file.
        log_dir: Base directory for log files.

    Returns:
        The log file path, or None when no file is written.
    """
    console_level = logging.getLevelName((level or "INFO").upper())
    if not isinstance(console_level, int):
        console_level = logging.INFO

    formatter = _ShortLevelFormatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)
    handlers = [_console_handler(console_level, formatter)]
    log_path: Path | None = None
    if log_to_file and action:
        file_handler, log_path = _file_handler(log_dir, action, formatter)
        handlers.append(file_handler)

    for old in list(log.handlers):
        log.removeHandler(old)
        old.close()
    for handler in handlers:
        log.addHandler(handler)

    # The logger passes everything; each handler filters by its own level.
    log.setLevel(logging.DEBUG)
    log.propagate = False
    return log_path
