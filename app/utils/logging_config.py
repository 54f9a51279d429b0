import logging
import sys


def setup_logging() -> logging.Logger:
    """
    Sets up logging for the helpdesk with a single stdout handler.
    """
    logger = logging.getLogger("helpdesk")
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)

    console_handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)
    return logger


logger = setup_logging()
