import logging
import logging.handlers
import os

from config.env import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

QUIET_LOGGERS = ('uvicorn.access', 'sqlalchemy.engine', 'httpx', 'openai')

def get_logs_dir() -> str:
    logs_dir = settings.log_dir or os.path.join(os.path.dirname(os.path.dirname(__file__)), 'logs')
    os.makedirs(logs_dir, exist_ok=True)
    return logs_dir

def _rotating_handler(logs_dir: str, filename: str, level: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(logs_dir, filename),
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding='utf-8'
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(level)
    return handler

def setup_logging():
    """Send every record to tenxcards.log, errors also to error.log, and
    ``settings.log_level`` and above to the console."""
    logs_dir = get_logs_dir()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    # Replace handlers so a reload does not duplicate output
    root_logger.handlers = [
        _rotating_handler(logs_dir, 'tenxcards.log', logging.DEBUG),
        _rotating_handler(logs_dir, 'error.log', logging.ERROR),
        console_handler,
    ]

    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f'Logging setup completed, writing to {logs_dir}')
