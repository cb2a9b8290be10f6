"""Logging configuration for htmldistill."""

import logging
import sys

from htmldistill.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("htmldistill")


def setup_logging(*, debug: bool | None = None) -> None:
    """Send log records to stderr and set the htmldistill level.

    Meant to be called once by the embedding application or script; the
    library itself only logs through ``logger``. Previously installed root
    handlers are replaced, and third-party loggers stay at WARNING.

    Args:
        debug: Log at DEBUG instead of INFO. Falls back to DISTILL_DEBUG.

    """
    if debug is None:
        debug = settings.distill_debug

    logging.root.handlers = []
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT, stream=sys.stderr)

    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)
    logger.info("htmldistill logging initialized at %s level", logging.getLevelName(level))
