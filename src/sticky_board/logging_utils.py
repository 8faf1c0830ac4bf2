"""Configure loguru output for processes embedding the store."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger


_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{module}</cyan>:<cyan>{line}</cyan>\n"
    "{message}"
)


def configure_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Replace loguru sinks with a stderr sink (and optionally a debug log file).

    Args:
        level: Minimum level for the stderr sink.
        log_file: Optional file receiving every record at DEBUG level.
    """
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=_FORMAT)
    if log_file is not None:
        logger.add(str(log_file), level="DEBUG", format=_FORMAT, encoding="utf-8")
