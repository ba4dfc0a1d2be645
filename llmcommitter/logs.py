"""Logging setup for llmcommitter.

Library modules log through the shared loguru ``logger``; only the
application entry point calls setup_logging() to install sinks.
"""

import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from llmcommitter.global_config import get_log_dir

LOG_LEVEL_ENV_VAR = "LLMCOMMITTER_LOG_LEVEL"


def setup_logging(debug: bool = False, log_dir: Optional[Path] = None) -> Path:
    """Install the console and file sinks.

    Args:
        debug: Log DEBUG messages to the console as well.
        log_dir: Directory for the rotating log file. Defaults to
            ~/.llmcommitter/logs.

    Returns:
        Path to the log file.
    """
    logger.remove()

    console_level = "DEBUG" if debug else os.getenv(LOG_LEVEL_ENV_VAR, "INFO").upper()
    logger.add(
        sys.stderr,
        level=console_level,
        format="<level>{level: <8}</level> | {message}",
        catch=True,
    )

    log_dir = log_dir or get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = log_dir / "llmcommitter.log"
    logger.add(
        logfile,
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
        rotation="5 MB",
        retention="14 days",
        catch=True,
    )

    logger.debug(f"Logging to {logfile}")
    return logfile
