import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from careconnect.config import get_settings

settings = get_settings()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
MAX_LOG_BYTES = 10 * 1024 * 1024


def _rotating_handler(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=5)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _build_root_logger() -> logging.Logger:
    """Console + app.log + errors.log, configured once per process."""
    level = logging.DEBUG if settings.APP_DEBUG else logging.INFO
    root = logging.getLogger("careconnect")
    root.setLevel(level)
    root.propagate = False

    # Re-imports (reload, test runners) must not stack handlers
    if root.handlers:
        root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(console)

    logs_dir = Path(settings.LOG_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)
    root.addHandler(_rotating_handler(logs_dir / "app.log", logging.INFO))
    root.addHandler(_rotating_handler(logs_dir / "errors.log", logging.ERROR))
    return root


logger = _build_root_logger()


def get_logger(name: str = None) -> logging.Logger:
    """Get a logger instance. If name is provided, returns a child logger."""
    if name:
        return logger.getChild(name)
    return logger
