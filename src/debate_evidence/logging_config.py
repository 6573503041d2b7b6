"""Logging setup for the debate_evidence CLI.

configure_logging() is idempotent: a root logger that already has handlers
(an embedding app, pytest's caplog) is left alone.
"""

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "evidence.log"

# urllib3 logs request lines at DEBUG, query string included, and the
# video API key travels as ?key=
TRANSPORT_LOGGERS = ("urllib3", "requests")


def configure_logging(level: int = logging.INFO, log_dir: str = "logs") -> None:
    """Console handler, plus logs/evidence.log when the directory is writable."""
    root = logging.getLogger()
    if root.handlers:
        return

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    try:
        os.makedirs(log_dir, exist_ok=True)
        fh = logging.FileHandler(os.path.join(log_dir, LOG_FILE), mode="a", encoding="utf-8")
        fh.setFormatter(formatter)
        root.addHandler(fh)
    except OSError:
        pass

    root.setLevel(level)
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
