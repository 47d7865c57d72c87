import json
import logging
import os
from logging.handlers import RotatingFileHandler

# Log format with more detail for production debugging
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

logger = logging.getLogger('clockbook')

_configured = False


# JSON structured formatter for production use
class JsonFormatter(logging.Formatter):
    """Outputs log records as single-line JSON objects."""

    def format(self, record):
        log_entry = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "filename": record.filename,
            "lineno": record.lineno,
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def _resolve_log_dir(log_dir):
    """Create the log directory, falling back to the working directory."""
    if not os.path.exists(log_dir):
        try:
            os.makedirs(log_dir)
        except OSError:
            return '.'
    return log_dir


def setup_logging(log_dir='logs', log_format='text', level='INFO'):
    """Install console and rotating file handlers on the root logger.

    Safe to call more than once; handlers are only installed the first time.
    """
    global _configured
    if _configured:
        return logger

    log_dir = _resolve_log_dir(log_dir)
    if log_format.lower() == 'json':
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # Console handler (always enabled)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level.upper())
    console_handler.setFormatter(formatter)

    handlers = [console_handler]

    # File handler with rotation (5MB max, keep 5 backups)
    try:
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'clockbook.log'),
            maxBytes=5*1024*1024,
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    except OSError as e:
        logger.warning(f"File logging disabled: {e}")

    # Error-only file handler for quick issue identification
    try:
        error_handler = RotatingFileHandler(
            os.path.join(log_dir, 'errors.log'),
            maxBytes=2*1024*1024,
            backupCount=3
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        handlers.append(error_handler)
    except OSError as e:
        logger.warning(f"Error log file disabled: {e}")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in handlers:
        root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger('alembic').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy').setLevel(logging.WARNING)
    logging.getLogger('werkzeug').setLevel(logging.WARNING)

    _configured = True
    logger.info("Clockbook logging initialized")
    return logger
