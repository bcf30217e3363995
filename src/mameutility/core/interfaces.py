"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines the collaborator contracts (Protocols) the catalog pipeline consumes.
The core never looks these up globally: every engine receives them as call
parameters, and the host (CLI, Qt worker, tests) decides how updates are
marshalled.

Key Components:
---------------
- ProgressSink: accepts integer percent updates (0..100), monotonic per operation.
- LogSink: accepts info/warning/error messages and exceptions with context.
- CancellationSignal: cooperative cancellation, polled at defined points.
- StdLogSink: fallback LogSink that forwards to the standard logging package.
"""

import logging
from typing import Protocol, Callable, Optional, Union, runtime_checkable


class ProgressSink(Protocol):
    """Receives overall progress in percent."""
    def report(self, percent: int) -> None: ...


class LogSink(Protocol):
    """
    Receives log events from the pipeline.
    Implementations may marshal onto another thread; callers never wait for them.
    """
    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def exception(self, error: BaseException, context: str = "", fatal: bool = False) -> None: ...


@runtime_checkable
class CancellationSignal(Protocol):
    def is_requested(self) -> bool: ...


# Plain callables are accepted anywhere a sink/signal is expected
ProgressLike = Union[ProgressSink, Callable[[int], None], None]
CancellationLike = Union[CancellationSignal, Callable[[], bool], None]


class StdLogSink:
    """LogSink used when the caller supplies none: forwards to `logging`."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("mameutility")

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warn(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)

    def exception(self, error: BaseException, context: str = "", fatal: bool = False) -> None:
        level = logging.CRITICAL if fatal else logging.ERROR
        text = f"{context}: {error}" if context else str(error)
        self._logger.log(level, text, exc_info=(type(error), error, error.__traceback__))
