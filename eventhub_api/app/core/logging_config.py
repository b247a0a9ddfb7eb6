"""
Logging configuration for the EventHub API.

``setup_logging`` attaches a console handler (and optionally a file
handler) to the root logger.  Service modules obtain their own loggers
via ``logging.getLogger(__name__)`` so every record carries the module
that produced it, e.g. ``eventhub_api.app.services.registration_service``.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Per-request chatter from the server and the HTTP client library.
NOISY_LOGGERS = ("uvicorn.access", "httpx", "urllib3")


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger exactly once.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive; unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Path of a file to mirror log records to.  Relative paths are
        resolved against the current working directory.

    Access logs and HTTP client request logs are held at ``WARNING``
    unless ``level`` is ``DEBUG``.
    """
    root_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(root_level, int):
        root_level = logging.INFO
    quiet_level = logging.NOTSET if root_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    logger = logging.getLogger()
    if logger.handlers:
        # create_app may run several times in one process (tests).
        return

    logger.setLevel(root_level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logfile:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
