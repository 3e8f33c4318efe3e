"""
Process-wide logging setup.

Every module logs through logging.getLogger(__name__); this only decides
where records go (stderr, plus LOG_FILE when set) and at which level.
"""
import logging
import os

from .config_defaults import get_setting

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging():
    """Attach stream (and optional file) handlers to the root logger."""
    level_name = (get_setting('LOG_LEVEL', 'INFO') or 'INFO').upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    log_file_path = get_setting('LOG_FILE')
    if log_file_path:
        try:
            log_dir = os.path.dirname(log_file_path)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(log_file_path, mode='a')
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.error(f"Failed to setup file logging at {log_file_path}: {e}")

    logging.getLogger(__name__).info(f"Logging initialized at level {level_name}")
