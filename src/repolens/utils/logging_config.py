import logging
import os
import sys


def setup_logging(stream=sys.stdout, level=None):
    """
    Set up basic logging configuration.

    The level defaults to REPOLENS_LOG_LEVEL, or INFO when that is unset.
    """
    level = level or os.environ.get("REPOLENS_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=stream,
    )


logger = logging.getLogger("repolens")
