"""
SMA-16 Emulator: Logging Setup

Library modules only ever do ``log = logging.getLogger(__name__)``.
Applications embedding the emulator call setup_logging() once to get a
rich console handler and, optionally, a timestamped log file.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)-7s | %(message)s"


def setup_logging(
    name: str = "sma16",
    level: int = logging.DEBUG,
    console_level: int = logging.WARNING,
    log_dir: Optional[Union[str, Path]] = None,
    rich_console: bool = True,
) -> logging.Logger:
    """
    Configure and return a logger.

    Console handler is a RichHandler unless rich_console is False, in which
    case a plain stderr StreamHandler is used. When log_dir is given, a
    file handler captures everything at DEBUG and above:
    ``<log_dir>/<name>_YYYYMMDD_HHMMSS.log``

    A logger that already has handlers is returned unchanged.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(level)

    log_file = None
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"{name}_{ts}.log"
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(fh)

    if rich_console:
        ch = RichHandler(
            level=console_level,
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
    else:
        ch = logging.StreamHandler(sys.stderr)
        ch.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    ch.setLevel(console_level)
    logger.addHandler(ch)

    logger.debug("Logger initialized: %s", name)
    if log_file is not None:
        logger.debug("Log file: %s", log_file)

    return logger
