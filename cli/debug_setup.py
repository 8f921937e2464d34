"""Logging setup for CLI"""

import logging
import os

from settings import DEBUG_LOG_FILE, LOG_LEVEL


def setup_logging(debug: bool = False, log_level: str = LOG_LEVEL) -> None:
    """
    Configure the root logger

    Args:
        debug: Switch to DEBUG and append everything to the debug log file
        log_level: Level name used when debug is off
    """
    root_logger = logging.getLogger()

    # Clear existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if not debug:
        level = getattr(logging, str(log_level).upper(), logging.INFO)
        root_logger.setLevel(level)
        console_handler.setLevel(level)
        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)
        return

    root_logger.setLevel(logging.DEBUG)
    console_handler.setLevel(logging.DEBUG)

    log_file = os.path.abspath(DEBUG_LOG_FILE)
    file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')  # 'a' to append
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    logging.getLogger(__name__).info(f"Debug logging enabled - appending to {log_file}")
