from __future__ import annotations

import logging
import os
import sys
from typing import Optional

LOG_LINE_FORMAT = "[%(asctime)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ErrorLog:
    """
    Failure side channel of one facade.

    With a log file every message is appended as
    ``[YYYY-MM-DD HH:MM:SS] <message>``; without one the bare message goes to
    stderr. The logger is private to the instance (not registered with the
    logging manager) so two facades never share handlers.
    """

    def __init__(self, log_file: Optional[str] = None):
        self.log_file = log_file
        self._logger = logging.Logger(f"dbfacade.errors.{id(self):x}", logging.ERROR)
        if log_file:
            os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
            handler: logging.Handler = logging.FileHandler(log_file, mode="a", encoding="utf-8", delay=True)
            handler.setFormatter(logging.Formatter(LOG_LINE_FORMAT, LOG_DATE_FORMAT))
        else:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter("%(message)s"))
        self._handler = handler
        self._logger.addHandler(handler)

    def write(self, message: str) -> None:
        self._logger.error(message)

    def close(self) -> None:
        self._logger.removeHandler(self._handler)
        self._handler.close()
