import logging
import os
import sys

ROOT_LOGGER_NAME = "repo_tracker"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

def get_logger(name: str) -> logging.Logger:
    """
    Returns a logger in the 'repo_tracker' hierarchy.

    The stdout handler is attached once, to the package logger; module loggers
    (client, activity service, API) propagate to it. LOG_LEVEL sets the level.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)

    if not root.handlers:
        root.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        root.addHandler(console_handler)

    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return root.getChild(name)
