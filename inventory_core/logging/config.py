# =============================================================================
# inventory_core/logging/config.py
# Logging Configuration for the Inventory Dashboard
# =============================================================================

import logging
import os
import sys
import time
from pathlib import Path
from datetime import datetime
from typing import Optional, Union


LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_LOG_DIR = Path(os.environ.get("INVENTORY_LOG_DIR", "logs"))

# Chatty libraries kept at WARNING
QUIET_LOGGERS = ("urllib3", "requests", "PIL", "reportlab", "openpyxl", "watchdog")

_configured = False


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_dir: Optional[Path] = None,
    log_to_file: bool = True,
) -> None:
    """
    Configure logging for the dashboard process.

    Streamlit re-runs page scripts on every interaction; only the first call
    installs handlers.

    Args:
        level: Root level, as a number or a name such as "DEBUG"
        log_dir: Folder for the daily log file (default: ./logs or INVENTORY_LOG_DIR)
        log_to_file: Write inventory_YYYY-MM-DD.log next to stdout
    """
    global _configured
    if _configured:
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_to_file:
        folder = Path(log_dir) if log_dir is not None else DEFAULT_LOG_DIR
        try:
            folder.mkdir(parents=True, exist_ok=True)
            handlers.append(
                logging.FileHandler(folder / f"inventory_{datetime.now():%Y-%m-%d}.log", encoding="utf-8")
            )
        except OSError as e:
            # Read-only deployments still log to stdout
            print(f"Log file disabled: {e}", file=sys.stderr)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True
    logging.getLogger("inventory_core").info(f"Logging initialized ({logging.getLevelName(level)})")


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a module.

    Usage:
        from inventory_core.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


class LogContext:
    """
    Logs the duration of a block and whether it raised.

    Usage:
        with LogContext(logger, "Replaying pending writes"):
            coordinator.sync_pending()
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self._started = 0.0

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.debug(f"{self.operation}: started")
        return self

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self._started

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.logger.log(self.level, f"{self.operation}: done in {self.elapsed:.2f}s")
        else:
            self.logger.error(f"{self.operation}: failed after {self.elapsed:.2f}s: {exc_val}", exc_info=True)
        return False
