"""Root logger setup shared by all CLI commands"""

import logging
import sys


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Send log records to stderr and set the root level.

    An already-configured root logger keeps its handlers; only the level changes.
    """
    logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, stream=sys.stderr)
    logging.getLogger().setLevel(level.upper())
