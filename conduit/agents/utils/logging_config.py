"""
Logging setup.
"""

import logging
from typing import Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Union[str, int] = logging.INFO) -> None:
    """Install the root handler once; later calls only change the level."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
    # httpx logs every request to a network server at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
