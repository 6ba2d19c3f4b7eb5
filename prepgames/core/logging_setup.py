import logging
import os
from logging.handlers import RotatingFileHandler

from prepgames.core.config import settings


def setup_logging() -> None:
    logger = logging.getLogger("prepgames")
    logger.setLevel(logging.INFO)

    # Only attach the file handler once, create_app() may be called repeatedly (tests)
    if any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        return

    if not os.path.exists(settings.LOG_DIR):
        os.makedirs(settings.LOG_DIR, exist_ok=True)
    log_path = os.path.join(settings.LOG_DIR, settings.LOG_FILE)
    file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(file_handler)
    # Also configure root logger to see logs from other libraries
    logging.basicConfig(level=logging.INFO)
