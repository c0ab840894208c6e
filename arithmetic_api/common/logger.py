"""Shared logger used by the server, the client and the CLI."""
import logging
import sys

LOGGER_NAME: str = "arithmetic_api"
LOG_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(processName)s | %(message)s"


def configure_logger(level: str = "INFO") -> logging.Logger:
    """
    Attach a stderr handler to the project logger (once) and set its level.

    :param str level: Logging level name, e.g. "DEBUG" or "INFO"

    :return: The configured project logger
    :rtype: logging.Logger
    """
    project_logger = logging.getLogger(LOGGER_NAME)
    if not project_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        project_logger.addHandler(handler)
    project_logger.setLevel(level.upper())
    return project_logger


logger: logging.Logger = configure_logger()
