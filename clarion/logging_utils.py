from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    also_console: bool = True,
) -> logging.Logger:
    """Configure the root logger once for the whole process.

    Calling it again is a no-op apart from updating the level, so the
    composition root and tests can both call it safely.
    """

    logger = logging.getLogger()
    logger.setLevel(level)

    if getattr(logger, "_clarion_configured", False):
        return logger

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
    handlers: list[logging.Handler] = []

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(fmt)
        handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_clarion_configured", True)
    logging.getLogger(__name__).debug(
        "Logging initialized (level=%s, file=%s)", level, log_file
    )
    return logger
