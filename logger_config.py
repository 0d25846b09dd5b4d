import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler

import config


def setup_logging(level=None, log_file=None):
    """Configure application-wide logging with console + optional rotating file."""
    root = logging.getLogger()
    if root.handlers:
        # Avoid double configuration if reloaded
        return

    root.setLevel(level or config.LOG_LEVEL)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] [%(name)s] %(message)s")

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(fmt)
    root.addHandler(console)

    log_file = log_file or config.LOG_FILE
    if log_file:
        parent = os.path.dirname(log_file)
        if parent:
            os.makedirs(parent, exist_ok=True)
        file_handler = TimedRotatingFileHandler(log_file, when="midnight", backupCount=7, encoding="utf-8")
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)
