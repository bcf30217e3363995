"""
Services shared by the CLI, the GUI worker and the engines.

- LogService: default LogSink with history, listeners and a persistent log file
- FileService: filesystem helpers (directory checks, catalog discovery, asset copy)
"""

from .file_service import FileService
from .log_service import LogService, LogEntry

__all__ = [
    "FileService",
    "LogService",
    "LogEntry",
]
