# ==============================================
# Logging Setup
# ==============================================
#
# Modules log through logging.getLogger(__name__). The CLI calls
# setup_logging() once with the configured level; library users keep
# whatever handlers they already have.
# ==============================================

import logging
import sys
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: Union[str, int] = "INFO") -> None:
    """
    Configure the root logger with a single stderr handler.

    Args:
        level: Level name ("DEBUG", "INFO", ...) or numeric level
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Replace handlers so repeated calls don't duplicate output
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # requests/urllib3 are chatty at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))
