from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from todo_app.config import SETTINGS, Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# SQLAlchemy echoes every statement at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def setup_logging(settings: Settings = SETTINGS) -> Path:
    """Send log records to ``settings.log_path`` (rotated) and the console.

    Calling it again replaces the handlers installed by the previous call.
    Returns the log file path.
    """
    log_path = settings.log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    level = settings.log_level.upper()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler = RotatingFileHandler(log_path, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler.set_name("todo_app.file")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.set_name("todo_app.console")

    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() in ("todo_app.file", "todo_app.console"):
            root.removeHandler(handler)
            handler.close()
    root.addHandler(file_handler)
    root.addHandler(console_handler)
    root.setLevel(level)

    if level != "DEBUG":
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    return log_path
