import logging
import sys

LOGGER_NAME = "dbquery"

def setup_logger(level=logging.WARNING):
    """
    Configure the package logger. Records go to stderr so stdout carries only
    the plugin status line.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        h = logging.StreamHandler(sys.stderr)
        fmt = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S")
        h.setFormatter(fmt)
        logger.addHandler(h)
    logger.setLevel(level)
    return logger
