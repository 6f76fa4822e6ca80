"""
Logging Setup

Console plus append-mode log file, with the log file cut down to its most
recent half once it grows past MAX_LOG_SIZE.
"""

import logging
import os

from .controller_constants import MAX_LOG_SIZE

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def truncate_log(log_path: str, max_size: int = MAX_LOG_SIZE) -> bool:
    """Keep only the last max_size // 2 bytes of an oversized log file.

    Returns True if the file was truncated.
    """
    try:
        size = os.path.getsize(log_path)
    except OSError:
        return False
    if size <= max_size:
        return False

    with open(log_path, 'rb') as f:
        f.seek(-(max_size // 2), os.SEEK_END)
        tail = f.read()
    with open(log_path, 'wb') as f:
        f.write(tail)
    return True


def setup_logging(log_file: str = None, level: str = 'INFO') -> logging.Logger:
    """Configure the 'dualsense_gui' logger tree."""
    root = logging.getLogger('dualsense_gui')
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        if truncate_log(log_file):
            root.info("Truncated log file %s to %d bytes", log_file, MAX_LOG_SIZE // 2)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root
