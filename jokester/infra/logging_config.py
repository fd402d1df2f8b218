"""
Logging setup for the "jokester" logger.

Console output plus one log file per calendar day:
    logs/jokester_YYYYMMDD_<START_HHMMSS>.log
START_HHMMSS is taken once per process, so a restart on the same day opens
a new file instead of appending to the previous run's.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

LOGGER_NAME = "jokester"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# HTTP client loggers used under google-genai / anthropic; INFO logs every request
NOISY_LOGGERS = ("httpx", "httpcore", "google_genai", "anthropic")

_process_started: Optional[str] = None


def _process_start_stamp() -> str:
    global _process_started
    if _process_started is None:
        _process_started = datetime.now().strftime("%H%M%S")
    return _process_started


class DailyRotatingFileHandler(logging.FileHandler):
    """
    FileHandler that switches to a new file when the date changes.

    Args:
        log_dir: Directory for log files (created if missing)
        prefix: File name prefix
        encoding: File encoding
        clock: Returns the current datetime (tests pass a fake)
    """

    def __init__(
        self,
        log_dir: str = "logs",
        prefix: str = LOGGER_NAME,
        encoding: str = "utf-8",
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.prefix = prefix
        self._clock = clock
        self._started = _process_start_stamp()
        self._day = self._today()

        super().__init__(self._path_for(self._day), mode="a", encoding=encoding)

    def _today(self) -> str:
        return self._clock().strftime("%Y%m%d")

    def _path_for(self, day: str) -> str:
        return str(self.log_dir / f"{self.prefix}_{day}_{self._started}.log")

    def emit(self, record: logging.LogRecord) -> None:
        today = self._today()
        if today != self._day:
            self.close()
            self._day = today
            self.baseFilename = self._path_for(today)
            self.stream = self._open()
        super().emit(record)


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = "logs") -> logging.Logger:
    """
    Configure the jokester logger and return it.

    Safe to call more than once: earlier handlers are closed and replaced.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (unknown -> INFO)
        log_dir: Directory for daily log files; None logs to console only

    Returns:
        logging.Logger: The "jokester" logger
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [logging.StreamHandler()]
    if log_dir:
        handlers.append(DailyRotatingFileHandler(log_dir=log_dir))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    destination = handlers[-1].baseFilename if log_dir else "console only"
    logger.info(f"Logging started - level: {logging.getLevelName(level)}, output: {destination}")
    return logger
