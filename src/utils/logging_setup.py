# ========================
# src/utils/logging_setup.py
# ========================

"""
Logging Configuration

Console logging for every run. Runs that write outputs also append a
full DEBUG trace to pipeline.log under the configured log directory, so a
rejected CSV can be diagnosed after the fact.
"""

import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from .config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Server and upload libraries log every request at INFO
QUIET_LOGGERS = ('uvicorn.access', 'multipart', 'httpx')

def resolve_level(level_name: str) -> int:
    """
    Map a level name such as 'info' to its logging constant.

    Raises:
        ValueError: For names logging does not know.
    """
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name!r}")
    return level

def setup_logging(config: Optional[Config] = None,
                  log_file: Optional[str] = None,
                  quiet_loggers: Iterable[str] = QUIET_LOGGERS) -> Optional[Path]:
    """
    Configure the root logger for a pipeline run.

    Args:
        config (Config): Supplies LOG_LEVEL and LOG_DIR
        log_file (str): File name under LOG_DIR; console only when omitted
        quiet_loggers (iterable): Logger names capped at WARNING

    Returns:
        Path: The log file in use, or None
    """
    config = config or Config()
    level = resolve_level(config.LOG_LEVEL)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_path = None
    if log_file:
        file_path = Path(config.LOG_DIR) / log_file
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(file_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # The root must pass DEBUG records through for the file handler
    root_logger.setLevel(logging.DEBUG if file_path else level)

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)

    if file_path:
        logging.info(f"Logging to file: {file_path}")
    logging.debug(f"Logging initialized - Level: {logging.getLevelName(level)}")
    return file_path
