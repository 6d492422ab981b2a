import os
import logging
from logging.handlers import RotatingFileHandler
import sys

from forbid_gps import config


def setup_logger(name="forbid_gps", level=None, log_dir=None):
    """
    Set up and configure a logger for the upload filter and its tools.

    Args:
        name (str): Name of the logger
        level: Logging level (default: LOG_LEVEL from the environment)
        log_dir (str): Directory for the rotating log file (default: LOG_FOLDER)

    Returns:
        logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level if level is not None else config.get_log_level())

    # Don't add handlers if they already exist
    if logger.handlers:
        return logger

    log_dir = log_dir or config.get_log_folder()
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'forbid_gps.log')

    file_handler = RotatingFileHandler(log_file, maxBytes=10485760, backupCount=5)  # 10MB max size, keep 5 backups
    file_handler.setLevel(logger.level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logger.level)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


def resolve_output_path(filename, output_dir):
    """
    Place a relative output filename inside output_dir.

    Absolute paths are returned unchanged.
    """
    if os.path.isabs(filename):
        return filename
    os.makedirs(output_dir, exist_ok=True)
    return os.path.join(output_dir, os.path.basename(filename))
