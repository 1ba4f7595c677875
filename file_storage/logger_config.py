import logging
import sys
from pathlib import Path

from file_storage import config


def setup_logger():
    logger = logging.getLogger("file_storage")
    # Every module calls this at import time; configure handlers only once
    if logger.handlers:
        return logger

    # Create logs directory if it doesn't exist
    logs_dir = Path(config.LOG_DIR)
    logs_dir.mkdir(exist_ok=True, parents=True)

    logger.setLevel(logging.DEBUG)

    # Create formatters
    file_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s'
    )

    # File handler (for detailed logging)
    file_handler = logging.FileHandler(logs_dir / "file_storage.log")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)

    # Console handler (for basic logging)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
    console_handler.setFormatter(console_formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger
