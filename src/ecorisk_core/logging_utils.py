import logging

from .config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str = "ecorisk") -> logging.Logger:
    """
    Returns a logger with the specified name.
    Ensures no duplicate handlers are added (Streamlit reruns import modules again).
    """
    logger = logging.getLogger(name)

    if not logger.hasHandlers():
        logger.setLevel(Settings.from_env().log_level)

        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger


__all__ = ["get_logger", "LOG_FORMAT"]
