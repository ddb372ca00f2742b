import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_level=logging.INFO, log_file=None):
    """
    Set up structured logging for the outline service and client.

    Args:
        log_level: The logging level (default: INFO)
        log_file: Path to log file (optional, defaults to console only)
    """
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Only replace the handlers this module installed earlier
    for handler in list(root_logger.handlers):
        if getattr(handler, '_outline_handler', False):
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler._outline_handler = True
    root_logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler._outline_handler = True
        root_logger.addHandler(file_handler)

    return root_logger


def get_logger(name):
    """
    Get a logger instance with the specified name.

    Args:
        name: Name of the logger (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


# Pre-configured logger instances
app_logger = get_logger('app')
db_logger = get_logger('database')
security_logger = get_logger('security')
reorder_logger = get_logger('reorder')
store_logger = get_logger('store')


def _format(message, kwargs):
    if kwargs:
        return f"{message} | Data: {kwargs}"
    return message


def log_info(logger, message, **kwargs):
    """Log an info message with optional structured data."""
    logger.info(_format(message, kwargs))


def log_warning(logger, message, **kwargs):
    """Log a warning message with optional structured data."""
    logger.warning(_format(message, kwargs))


def log_error(logger, message, **kwargs):
    """Log an error message with optional structured data."""
    logger.error(_format(message, kwargs))


def log_debug(logger, message, **kwargs):
    """Log a debug message with optional structured data."""
    logger.debug(_format(message, kwargs))


# Initialize logging on module import
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
LOG_FILE = os.environ.get('LOG_FILE', None)

log_level_map = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL
}

setup_logging(log_level=log_level_map.get(LOG_LEVEL, logging.INFO), log_file=LOG_FILE)
