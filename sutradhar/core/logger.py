"""SutradharLogger: Singleton JSON logger with console and rotating file output.

Provides a single, project-wide logger instance that writes structured JSON to
stdout and, unless disabled, to ``<LOG_DIR>/sutradhar.log`` with automatic
rotation.  Level and destination are read from the environment the first time
the logger is created:

- ``LOG_LEVEL``  : ``DEBUG``, ``INFO`` (default), ``WARNING``, ``ERROR``.
- ``LOG_DIR``    : directory for the rotating file (default ``logs``).
- ``LOG_TO_FILE``: ``false``/``0``/``no`` disables the file handler.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional


class _JsonFormatter(logging.Formatter):
    """Format every log record as a single-line JSON object.

    Standard fields (timestamp, level, logger, message, module, func_name)
    are always present.  Any *extra* key-value pairs passed via the ``extra``
    parameter of a logging call are merged into the JSON object, so callers
    attach dispatch context such as ``command``, ``api_method`` or
    ``update_id``.  When the record carries exception info, the formatted
    traceback is added as ``stack_trace``.

    Example::

        logger.error(
            "Command handler failed",
            extra={"command": "ping", "error": "boom"},
            exc_info=True,
        )

    Produces::

        {"timestamp": "…", "level": "ERROR", …, "command": "ping", "error": "boom", "stack_trace": "Traceback …"}
    """

    # Keys that belong to the standard LogRecord; everything else is extra.
    _BUILTIN_ATTRS: frozenset[str] = frozenset(vars(logging.LogRecord(
        name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None,
    ))) | {"message", "asctime", "taskName"}

    def format(self, record: logging.LogRecord) -> str:
        """Serialize *record* to a JSON string."""
        log_entry: dict = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "func_name": record.funcName,
        }

        for key, value in record.__dict__.items():
            if key not in self._BUILTIN_ATTRS and key not in log_entry:
                log_entry[key] = value

        if record.exc_info:
            log_entry["stack_trace"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


class SutradharLogger:
    """Singleton logger with a console handler and an optional rotating file.

    Usage::

        from sutradhar.core.logger import SutradharLogger

        logger = SutradharLogger.get_logger()
        logger.info("Bot started")
    """

    _instance: Optional["SutradharLogger"] = None
    _logger: Optional[logging.Logger] = None

    LOGGER_NAME: str = "sutradhar"

    # Rotation settings
    _LOG_DIR: str = "logs"
    _LOG_FILE: str = "sutradhar.log"
    _MAX_BYTES: int = 5 * 1024 * 1024  # 5 MB
    _BACKUP_COUNT: int = 5

    def __new__(cls, level: Optional[int] = None) -> "SutradharLogger":
        """Ensure only one instance is ever created (Singleton)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._init_logger(level)
        return cls._instance

    # ------------------------------------------------------------------
    # Initialisation helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_level(level: Optional[int]) -> int:
        """Explicit *level* wins; otherwise ``LOG_LEVEL``; otherwise INFO."""
        if level is not None:
            return level
        name = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
        resolved = logging.getLevelName(name)
        return resolved if isinstance(resolved, int) else logging.INFO

    def _init_logger(self, level: Optional[int]) -> None:
        """Create the underlying :class:`logging.Logger` and attach handlers."""
        resolved = self._resolve_level(level)
        self._logger = logging.getLogger(self.LOGGER_NAME)
        self._logger.setLevel(resolved)

        # Avoid duplicate handlers if the module is reloaded.
        if self._logger.handlers:
            return

        formatter = _JsonFormatter()

        # --- Console handler (StreamHandler) ---
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(resolved)
        stream_handler.setFormatter(formatter)
        self._logger.addHandler(stream_handler)

        if not _env_flag("LOG_TO_FILE", True):
            return

        # --- Rotating file handler ---
        log_dir = os.environ.get("LOG_DIR") or self._LOG_DIR
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, self._LOG_FILE)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=self._MAX_BYTES,
            backupCount=self._BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(resolved)
        file_handler.setFormatter(formatter)
        self._logger.addHandler(file_handler)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def get_logger(level: Optional[int] = None, name: Optional[str] = None) -> logging.Logger:
        """Return the shared :class:`logging.Logger` instance.

        Creates the singleton on first call; subsequent calls return the
        same logger regardless of the *level* argument.  When *name* is
        given, a child logger (``sutradhar.<name>``) is returned so records
        still flow through the shared handlers.
        """
        instance = SutradharLogger(level)
        assert instance._logger is not None  # guaranteed by __new__
        if name:
            return instance._logger.getChild(name)
        return instance._logger

    def cleanup(self) -> None:
        """Flush and close all handlers attached to the logger."""
        if self._logger is None:
            return
        for handler in list(self._logger.handlers):
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

    def __del__(self) -> None:
        """Best-effort cleanup on garbage collection."""
        self.cleanup()
