"""Logging setup for the report service CLI.

Pipeline modules log through ``logging.getLogger(__name__)`` and never add
handlers themselves; ``configure_logging()`` is the single place that does,
and it leaves an already-configured root logger (pytest, an embedding app)
untouched.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_FILE = "logs/report_service.log"

# Libraries that log per-font / per-connection detail at INFO or DEBUG
NOISY_LOGGERS = ("matplotlib", "PIL", "urllib3", "fontTools")


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = DEFAULT_LOG_FILE) -> None:
    """Attach console and run-log handlers to the root logger.

    Args:
        level: Root level; the CLI passes DEBUG for ``--verbose`` so pipeline
               state transitions show up
        log_file: Append-mode run log, or None for console only
    """
    root = logging.getLogger()
    if root.handlers:
        return

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        try:
            parent = os.path.dirname(log_file)
            if parent:
                os.makedirs(parent, exist_ok=True)
            fh = logging.FileHandler(log_file, mode="a")
            fh.setFormatter(formatter)
            root.addHandler(fh)
        except OSError:
            # Read-only working directory: console logging only
            pass

    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
