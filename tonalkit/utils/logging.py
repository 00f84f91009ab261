# utils/logging.py
import logging
from typing import Optional, Union

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None):
    """Configure the root logger for command-line use.

    Library modules only create loggers; applications call this once.
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )
