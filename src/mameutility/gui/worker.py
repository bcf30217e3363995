"""
Qt worker runnable — follows modern Qt pattern: QRunnable + QThreadPool.
Runs any catalog command (partition, software list, merge, asset copy) with its params object
and marshals progress and log events into Qt signals.
"""
from typing import Any, Optional

from PySide6.QtCore import QRunnable, QObject, Signal, QMutex, QMutexLocker

from mameutility.core.interfaces import LogSink


class WorkerSignals(QObject):
    """Separate QObject to hold signals (QRunnable cannot emit signals directly)."""
    progress = Signal(int)          # percent
    log = Signal(str, str)          # level, message
    finished = Signal(object)       # operation report
    error = Signal(str)


class SignalLogSink:
    """LogSink that re-emits every entry as a `log` signal and forwards it to an optional sink."""

    def __init__(self, signals: WorkerSignals, forward: Optional[LogSink] = None):
        self._signals = signals
        self._forward = forward

    def _emit(self, level: str, message: str) -> None:
        try:
            self._signals.log.emit(level, message)
        except RuntimeError:
            pass  # receiver already deleted

    def info(self, message: str) -> None:
        self._emit("info", message)
        if self._forward:
            self._forward.info(message)

    def warn(self, message: str) -> None:
        self._emit("warning", message)
        if self._forward:
            self._forward.warn(message)

    def error(self, message: str) -> None:
        self._emit("error", message)
        if self._forward:
            self._forward.error(message)

    def exception(self, error: BaseException, context: str = "", fatal: bool = False) -> None:
        text = f"{context}: {error}" if context else str(error)
        self._emit("critical" if fatal else "error", text)
        if self._forward:
            self._forward.exception(error, context, fatal)


class OperationWorker(QRunnable):
    """
    Worker runnable that executes one command in the thread pool.
    Automatically deleted after execution (setAutoDelete=True).

    Usage:
        worker = OperationWorker(CopyAssetsCommand(), CopyParams(...), log=log_service)
        worker.signals.progress.connect(progress_bar.setValue)
        QThreadPool.globalInstance().start(worker)
    """
    def __init__(self, command: Any, params: Any, log: Optional[LogSink] = None):
        super().__init__()
        self.command = command
        self.params = params
        self.signals = WorkerSignals()
        self.log_sink = SignalLogSink(self.signals, forward=log)
        self._stopped = False
        self._mutex = QMutex()
        self.setAutoDelete(True)  # Critical: auto-delete after run() completes

    def stop(self):
        """Sets the stopped flag to signal the worker to terminate gracefully."""
        with QMutexLocker(self._mutex):
            self._stopped = True

    def is_stopped(self) -> bool:
        """Returns True if the worker has been requested to stop."""
        with QMutexLocker(self._mutex):
            return self._stopped

    def safe_progress_emit(self, percent: int):
        """Emits progress signal safely with mutex protection."""
        with QMutexLocker(self._mutex):
            if not self._stopped:
                try:
                    self.signals.progress.emit(percent)
                except RuntimeError:
                    pass

    def run(self):
        """Main execution method. Runs in thread pool thread."""
        try:
            if self.is_stopped():
                return

            report = self.command.execute(
                self.params,
                progress_callback=self.safe_progress_emit,
                stopped_flag=self.is_stopped,
                log=self.log_sink
            )

            if not self.is_stopped():
                self.signals.finished.emit(report)
        except Exception as e:
            if not self.is_stopped():
                self.signals.error.emit(f"{type(e).__name__}: {str(e)}")
