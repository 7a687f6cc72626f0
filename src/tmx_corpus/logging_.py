"""Logging utilities.

We use Python's standard `logging` module with a plain structured format.

- Logs go to: `<log_dir>/<run_id>.log`
- Also prints to the console (stderr), where the tqdm progress bar lives too.
"""

from __future__ import annotations
import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# marks handlers installed here so a second setup replaces them
_HANDLER_FLAG = "_tmx_corpus_handler"


def setup_logging(run_id: str, log_dir: Optional[str] = "logs", level: int = logging.INFO) -> Optional[str]:
    """
    Setup logging configuration.

    Args:
        run_id: Run identifier, used as the log file name
        log_dir: Log directory (None disables the file handler)
        level: Root log level

    Returns:
        Path of the log file, if any
    """
    root = logging.getLogger()
    root.setLevel(level)
    for h in [h for h in root.handlers if getattr(h, _HANDLER_FLAG, False)]:
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler()]

    log_path = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, f"{run_id}.log")
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for h in handlers:
        h.setFormatter(fmt)
        setattr(h, _HANDLER_FLAG, True)
        root.addHandler(h)
    return log_path
