import logging
import textwrap
from logging import Logger
from pathlib import Path

from colorlog import ColoredFormatter

LOG_COLORS = {"DEBUG": "cyan", "INFO": "green", "WARNING": "yellow", "ERROR": "red", "CRITICAL": "red,bg_white"}


def configure_logger(level: int = logging.INFO, log_file: Path | None = None, name: str = "tocspotter") -> Logger:
    """Configure the package logger.

    Console output is coloured, the optional log file gets the same records
    without colours. Calling it again replaces the previous handlers.
    """
    # Suppress noisy warnings from pdfminer, which is used by pdfplumber
    logging.getLogger("pdfminer").setLevel(logging.ERROR)

    logger = logging.getLogger(name)
    if logger.hasHandlers():
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    logger.setLevel(level)
    logger.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        ColoredFormatter(
            "%(log_color)s%(asctime)s - %(levelname)s - [TOC]: %(message)s%(reset)s",
            log_colors=LOG_COLORS,
        )
    )
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter("%(asctime)s-%(levelname)s-[TOC]: %(message)s"))
        logger.addHandler(file_handler)
    return logger


def dedent_and_log(logger: Logger, message: str, level: int = logging.DEBUG):
    """Log a multi-line message one line at a time."""
    for line in textwrap.dedent(message).strip().split("\n"):
        logger.log(level, line)
