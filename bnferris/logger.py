# bnferris/logger.py

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from bnferris.config import _ensure_bnferris_dir

try:
    import colorlog
    HAS_COLORLOG = True
except ImportError:
    HAS_COLORLOG = False

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def _console_formatter(use_color: bool) -> logging.Formatter:
    if use_color and HAS_COLORLOG:
        return colorlog.ColoredFormatter(
            fmt="%(log_color)s[%(levelname)s]%(reset)s %(name)s - %(message)s",
            log_colors=LOG_COLORS,
        )
    return logging.Formatter("[%(levelname)s] %(name)s - %(message)s")


def setup_bnferris_logger(
    log_level=logging.WARNING,
    log_to_file=False,
    log_to_console=True,
    max_bytes=5 * 1024 * 1024,
    backup_count=5,
    use_color=True,
    log_file=None
):
    """
    Configure the "bnferris" logger that every module logs under.

    Console output goes to stderr since stdout carries the generated
    messages. With log_to_file, records also go to a rotating file,
    ~/.bnferris/bnferris.log unless log_file says otherwise.
    """
    logger = logging.getLogger("bnferris")
    logger.setLevel(log_level)

    # Clear existing handlers if rerun
    if logger.hasHandlers():
        logger.handlers.clear()

    if log_to_console:
        ch = logging.StreamHandler(sys.stderr)
        ch.setLevel(log_level)
        ch.setFormatter(_console_formatter(use_color))
        logger.addHandler(ch)

    if log_to_file:
        if log_file is None:
            log_file = os.path.join(_ensure_bnferris_dir(), "bnferris.log")
        fh = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count,
                                 encoding="utf-8")
        fh.setLevel(log_level)
        fh.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(fh)

    logger.debug("bnferris logger configured. Colorlog: %s, log file: %s",
                 HAS_COLORLOG, log_file if log_to_file else None)
    return logger
