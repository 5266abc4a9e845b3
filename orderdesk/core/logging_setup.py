"""
Logging bootstrap for processes embedding orderdesk

- Writes to LOGS_DIR/orderdesk.log with rotation when the directory is writable
- Falls back to console-only output when it is not (read-only volumes in Docker)
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from orderdesk.core.config import Config


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str | None = None,
    logs_dir: str | None = None,
    log_to_file: bool = True,
) -> list[logging.Handler]:
    """
    Configure the root logger

    Args:
        level: Log level name, defaults to Config.LOG_LEVEL
        logs_dir: Directory for the rotating log file, defaults to Config.LOGS_DIR
        log_to_file: Disable to log to stdout only

    Returns:
        Handlers installed on the root logger
    """
    log_formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_formatter)

    handlers: list[logging.Handler] = [console_handler]

    if log_to_file:
        log_file_path = Path(logs_dir or Config.LOGS_DIR) / "orderdesk.log"
        try:
            log_file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                str(log_file_path),
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(log_formatter)
            handlers.insert(0, file_handler)
        except (PermissionError, OSError) as e:
            sys.stderr.write(f"[logging] WARNING: cannot use file logging at {log_file_path}: {e}\n")

    log_level = getattr(logging, (level or Config.LOG_LEVEL).upper(), logging.INFO)
    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    logging.getLogger("orderdesk").setLevel(log_level)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    if log_level == logging.DEBUG:
        logging.getLogger(__name__).info("DEBUG logging enabled (LOG_LEVEL=DEBUG)")

    return handlers
