import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from config.settings import settings

_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class ColoredFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[37m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[41m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # color a copy; the same record also reaches the file handler
        shown = logging.makeLogRecord(record.__dict__)
        shown.levelname = f"{self.COLORS.get(record.levelname, self.RESET)}{record.levelname}{self.RESET}"
        return super().format(shown)


def _handler(handler: logging.Handler, formatter: logging.Formatter, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def init_logger() -> logging.Logger:
    """
    Configure the root logger once per process: colored stdout, plus a
    size-rotated file under LOG_DIR when LOG_TO_FILE is set. httpx request
    lines are held at WARNING so poll cycles don't flood the console.
    """
    root = logging.getLogger()
    logger = logging.getLogger(settings.LOGGER_NAME)
    if getattr(root, "_dashboard_inited", False):
        return logger

    level = logging.getLevelName((settings.LOG_LEVEL or "INFO").upper())
    if not isinstance(level, int):
        level = logging.INFO
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    root.addHandler(
        _handler(logging.StreamHandler(sys.stdout), ColoredFormatter(_FORMAT, _DATE_FORMAT), level)
    )
    if settings.LOG_TO_FILE:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        path = os.path.join(settings.LOG_DIR, settings.LOG_FILE_NAME)
        rotating = RotatingFileHandler(
            path,
            maxBytes=settings.LOG_MAX_BYTES,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        root.addHandler(_handler(rotating, logging.Formatter(_FORMAT, _DATE_FORMAT), level))

    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    root._dashboard_inited = True  # type: ignore[attr-defined]
    logger.debug("logger.init level=%s file=%s", logging.getLevelName(level), settings.LOG_TO_FILE)
    return logger
