"""
Logging Configuration
Sets up the 'clubtree' logger namespace for a session.

The controller modules (layout, reconciler, viewport) log once per pass, which
is every click of the user. Their level can be set apart from the rest so a
debug session on data loading is not flooded by per-pass messages.
"""
import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "clubtree"
PASS_LOGGER = "clubtree.controller"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    pass_level: Optional[int] = None,
) -> logging.Logger:
    """
    Configures the logger for the 'clubtree' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
        pass_level: Optional separate level for the per-pass controller loggers.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # A rebuilt session must not stack handlers
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Handlers inherit the level filtering of the loggers that feed them
    logging.getLogger(PASS_LOGGER).setLevel(pass_level if pass_level is not None else logging.NOTSET)

    logger.info("Logging initialized.")
    return logger
