"""
Logging setup and log sinks.
"""
import logging
from typing import Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Union[str, int] = "INFO"):
    """Configure root logging the way the service does."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


class LoggerWriter:
    """
    File-like sink that forwards complete lines to a logger.

    Partial lines are buffered until a newline arrives or flush() is called.
    """

    def __init__(self, logger: logging.Logger, level: int = logging.INFO):
        self.logger = logger
        self.level = level
        self._buffer = ""

    def write(self, data: str) -> int:
        self._buffer += data
        while "\n" in self._buffer:
            line, self._buffer = self._buffer.split("\n", 1)
            line = line.rstrip("\r")
            if line:
                self.logger.log(self.level, line)
        return len(data)

    def flush(self):
        if self._buffer:
            self.logger.log(self.level, self._buffer.rstrip("\r"))
            self._buffer = ""
