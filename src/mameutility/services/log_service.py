"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/log_service.py
Default LogSink: standard logging, bounded in-memory history, listeners and a persistent log file.

Every entry goes to:
    1. the "mameutility" logger (console, controlled by the host's logging config)
    2. the in-memory history (newest LOG_HISTORY_LIMIT entries)
    3. every registered listener (e.g. a GUI log panel)
    4. the persistent log file, one writer at a time

Fatal exceptions are recorded at CRITICAL, recovered ones at ERROR.
"""

import logging
import threading
import traceback
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Union

from mameutility import __version__
from mameutility.core.config import ProcessingConfig

logger = logging.getLogger(__name__)

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s | v%(app_version)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LogListener = Callable[["LogEntry"], None]


@dataclass(frozen=True)
class LogEntry:
    level: int
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    is_fatal: bool = False
    exception_type: Optional[str] = None
    stack_trace: Optional[str] = None

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)

    def format(self) -> str:
        return f"{self.timestamp:%H:%M:%S} [{self.level_name}] {self.message}"


class LogService:
    """
    Thread-safe: producers on pool threads may log concurrently.

    Args:
        log_file: persistent log path; None disables the file
        history_limit: number of entries kept in memory
        target: logger receiving every entry (defaults to "mameutility")
        version: application version stamped on file entries
    """

    def __init__(
            self,
            log_file: Optional[Union[str, Path]] = ProcessingConfig.DEFAULT_LOG_FILE,
            history_limit: int = ProcessingConfig.LOG_HISTORY_LIMIT,
            target: Optional[logging.Logger] = None,
            version: str = __version__
    ):
        self._target = target or logging.getLogger("mameutility")
        self._version = version
        self._history = deque(maxlen=max(1, history_limit))
        self._listeners: List[LogListener] = []
        self._state_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self.log_file = Path(log_file) if log_file else None

        self._file_handler: Optional[logging.FileHandler] = None
        if self.log_file is not None:
            self._file_handler = logging.FileHandler(self.log_file, encoding="utf-8", delay=True)
            self._file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATE_FORMAT))

    # ---- listeners ----

    def add_listener(self, listener: LogListener) -> None:
        with self._state_lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: LogListener) -> None:
        with self._state_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # ---- LogSink ----

    def info(self, message: str) -> None:
        self._record(logging.INFO, message)

    def warn(self, message: str) -> None:
        self._record(logging.WARNING, message)

    def error(self, message: str) -> None:
        self._record(logging.ERROR, message)

    def exception(self, error: BaseException, context: str = "", fatal: bool = False) -> None:
        fatal = fatal or bool(getattr(error, "fatal", False))
        level = logging.CRITICAL if fatal else logging.ERROR
        detail = f"{type(error).__name__}: {error}"
        message = f"{context}: {detail}" if context else detail
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        self._record(level, message, is_fatal=fatal, error=error, stack_trace=stack)

    # ---- history ----

    @property
    def entries(self) -> List[LogEntry]:
        with self._state_lock:
            return list(self._history)

    def clear(self) -> None:
        with self._state_lock:
            self._history.clear()

    def close(self) -> None:
        if self._file_handler is not None:
            with self._write_lock:
                self._file_handler.close()

    # ---- internals ----

    def _record(
            self,
            level: int,
            message: str,
            is_fatal: bool = False,
            error: Optional[BaseException] = None,
            stack_trace: Optional[str] = None
    ) -> None:
        if not message or not message.strip():
            return

        entry = LogEntry(
            level=level,
            message=message,
            is_fatal=is_fatal,
            exception_type=type(error).__name__ if error is not None else None,
            stack_trace=stack_trace,
        )

        exc_info = (type(error), error, error.__traceback__) if error is not None else None
        self._target.log(level, message, exc_info=exc_info)

        with self._state_lock:
            self._history.append(entry)
            listeners = list(self._listeners)

        self._write_to_file(level, message, exc_info)

        for listener in listeners:
            try:
                listener(entry)
            except Exception as e:
                logger.warning(f"Log listener {listener!r} failed: {e}")

    def _write_to_file(self, level: int, message: str, exc_info) -> None:
        if self._file_handler is None:
            return
        record = logging.LogRecord(
            name=self._target.name, level=level, pathname=__file__, lineno=0,
            msg=message, args=None, exc_info=exc_info)
        record.app_version = self._version
        with self._write_lock:
            try:
                self._file_handler.handle(record)
            except OSError as e:
                logger.warning(f"Cannot write to log file {self.log_file}: {e}")
