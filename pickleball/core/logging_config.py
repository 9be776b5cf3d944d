import logging

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO", fmt: str = "[%(asctime)s] [%(levelname)-7s] %(name)s: %(message)s") -> logging.Logger:
    """
    Installs a single console handler on the package logger.
    Safe to call more than once: existing handlers are replaced, not stacked.
    """
    logger = logging.getLogger("pickleball")

    # Clear any existing handlers to avoid duplicate lines on app re-creation
    logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)
    logger.setLevel(level.upper())

    logger.debug("Logging configured at level %s", level)
    return logger
