# Overview: Application logging setup; level, stream format and optional rotating file.

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

from flask import Flask

LOG_FORMAT = "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"


def configure_logging(app: Flask) -> None:
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in app.logger.handlers:
        handler.setFormatter(formatter)

    log_file = app.config.get("LOG_FILE")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)

    app.logger.setLevel(level)
