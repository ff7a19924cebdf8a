"""TelerouteLogger — Singleton JSON logger with console and rotating file output.

Every module of the library logs through the one ``teleroute`` logger so that
update ids, endpoints and routing decisions end up in a single structured
stream on stdout and in ``<LOG_DIR>/teleroute.log``.

``LOG_LEVEL`` (a level name or number) and ``LOG_DIR`` are read from the
environment the first time the logger is requested.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

_RESERVED: frozenset = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Fixed keys: ``timestamp``, ``level``, ``logger``, ``message``, ``module``,
    ``func_name``.  Whatever the caller passes through ``extra`` is merged in,
    which is how ``endpoint``, ``update_id``, ``command`` and ``slot`` reach
    the output::

        logger.debug("Delivered update", extra={"update_id": 7, "command": "/foo"})
        # {"timestamp": "…", "level": "DEBUG", …, "update_id": 7, "command": "/foo"}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "func_name": record.funcName,
        }
        entry.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in _RESERVED and key not in entry
        )
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def _level_from_env(default: int) -> int:
    """Map ``LOG_LEVEL`` (name or number) to a logging level."""
    raw = os.environ.get("LOG_LEVEL")
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default


def _console_handler(formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    return handler


def _file_handler(formatter: logging.Formatter, log_dir: str, filename: str, max_bytes: int, backups: int) -> logging.Handler:
    os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(
        os.path.join(log_dir, filename),
        maxBytes=max_bytes,
        backupCount=backups,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


class TelerouteLogger:
    """Owner of the shared ``teleroute`` logger.

    Usage::

        from core.logger import TelerouteLogger

        logger = TelerouteLogger.get_logger()
        logger.info("Polling started", extra={"offset": 0})
    """

    _instance: Optional["TelerouteLogger"] = None

    LOGGER_NAME: str = "teleroute"
    LOG_FILE: str = "teleroute.log"
    MAX_BYTES: int = 5 * 1024 * 1024  # 5 MB
    BACKUP_COUNT: int = 5

    def __new__(cls, level: int = logging.INFO) -> "TelerouteLogger":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance.logger = logging.getLogger(cls.LOGGER_NAME)
            instance.configure(_level_from_env(level), os.environ.get("LOG_DIR", "logs"))
            cls._instance = instance
        return cls._instance

    def configure(self, level: int, log_dir: str) -> None:
        """Set *level* and attach the console and file handlers once."""
        self.logger.setLevel(level)
        # Handlers survive a module reload; don't stack duplicates.
        if self.logger.handlers:
            return
        formatter = _JsonFormatter()
        self.logger.addHandler(_console_handler(formatter))
        self.logger.addHandler(_file_handler(formatter, log_dir, self.LOG_FILE, self.MAX_BYTES, self.BACKUP_COUNT))

    @staticmethod
    def get_logger(level: int = logging.INFO) -> logging.Logger:
        """Return the shared logger, creating it on first use.

        *level* only matters on the first call.
        """
        return TelerouteLogger(level).logger

    def cleanup(self) -> None:
        """Flush, close and detach all handlers."""
        for handler in list(self.logger.handlers):
            handler.flush()
            handler.close()
            self.logger.removeHandler(handler)
