# === FILE: site_crawler/logger.py ===
"""Logging for **SiteCrawler**: one named logger writing to stdout and,
optionally, to a rotating log file.

    from site_crawler.logger import logger
    logger.info("Crawl started")

The CLI calls :func:`init_logging` again with the ``--log-*`` options.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "SiteCrawler"


def _file_handler(file: Path | str) -> RotatingFileHandler:
    path = Path(file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )


def init_logging(
    level: Union[int, str] = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """(Re)configure the project logger, replacing the handlers of earlier calls."""
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)

    for handler in lg.handlers[:]:
        lg.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(_file_handler(log_file))
    for handler in handlers:
        handler.setFormatter(logging.Formatter(log_format))
        lg.addHandler(handler)

    lg.propagate = False
    return lg


logger: logging.Logger = init_logging()

__all__ = ["logger", "init_logging", "DEFAULT_FORMAT", "LOGGER_NAME"]
