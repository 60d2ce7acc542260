"""Shared logging configuration for pondus.

Call ``configure_logging()`` once at the CLI entry point. The function is
idempotent: if the root logger already has handlers, it does nothing.
"""

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: int = logging.WARNING) -> None:
    """Configure root logger with a stderr handler + optional file handler.

    stdout is reserved for rendered output, so the console handler writes to
    stderr. A file handler is added when ``PONDUS_LOG_FILE`` is set.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    log_file = os.environ.get("PONDUS_LOG_FILE", "").strip()
    if log_file:
        try:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            fh = logging.FileHandler(log_file, mode="a")
            fh.setFormatter(formatter)
            root.addHandler(fh)
        except OSError as e:
            root.warning(f"Could not open log file {log_file}: {e}")

    root.setLevel(level)


def level_from_verbosity(verbosity: int) -> int:
    """Map ``-v`` count to a logging level."""
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING
