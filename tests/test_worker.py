"""
Unit tests for OperationWorker — Qt thread integration layer.
Verifies thread-safe cancellation, signal emission, and error handling.
"""
from unittest.mock import Mock

import pytest

pytest.importorskip("PySide6")

from mameutility.commands import CopyAssetsCommand, MergeCommand
from mameutility.core.models import CopyParams, MergeParams, MergeReport
from mameutility.gui.worker import OperationWorker


def make_params(temp_dir):
    return MergeParams(input_paths=[], xml_output_path=str(temp_dir / "merged.xml"))


class TestOperationWorker:
    """Test worker thread safety and signal emission."""

    def test_stop_sets_stopped_flag(self, temp_dir):
        worker = OperationWorker(MergeCommand(), make_params(temp_dir))

        assert worker.is_stopped() is False
        worker.stop()
        assert worker.is_stopped() is True

    def test_safe_progress_emit_skips_after_stop(self, temp_dir):
        """No progress updates reach the UI once the worker is stopped."""
        worker = OperationWorker(MergeCommand(), make_params(temp_dir))
        progress_handler = Mock()
        worker.signals.progress.connect(progress_handler)

        worker.safe_progress_emit(10)
        progress_handler.assert_called_once_with(10)

        worker.stop()
        worker.safe_progress_emit(20)
        progress_handler.assert_called_once_with(10)

    def test_run_emits_progress_log_and_finished(self, record_set_files, temp_dir):
        params = MergeParams(input_paths=[record_set_files["machines"]],
                             xml_output_path=str(temp_dir / "merged.xml"))
        worker = OperationWorker(MergeCommand(), params)
        progress, log, finished, error = Mock(), Mock(), Mock(), Mock()
        worker.signals.progress.connect(progress)
        worker.signals.log.connect(log)
        worker.signals.finished.connect(finished)
        worker.signals.error.connect(error)

        worker.run()

        assert progress.call_args_list[-1].args[0] == 100
        assert any(c.args[0] == "info" for c in log.call_args_list)
        report = finished.call_args.args[0]
        assert isinstance(report, MergeReport)
        assert report.records.names() == ["M1"]
        error.assert_not_called()

    def test_log_forwarded_to_service(self, temp_dir):
        service = Mock()
        worker = OperationWorker(MergeCommand(), make_params(temp_dir), log=service)
        worker.run()
        service.warn.assert_called_once_with("No files to merge.")

    def test_run_emits_error_on_failure(self, temp_dir):
        params = CopyParams(record_set_files=[], source_dir=str(temp_dir / "missing"), dest_dir=str(temp_dir))
        worker = OperationWorker(CopyAssetsCommand(), params)
        error, finished = Mock(), Mock()
        worker.signals.error.connect(error)
        worker.signals.finished.connect(finished)

        worker.run()

        assert "DirectoryNotFound" in error.call_args.args[0]
        finished.assert_not_called()

    def test_run_does_nothing_when_stopped_first(self, temp_dir):
        command = Mock()
        worker = OperationWorker(command, make_params(temp_dir))
        worker.stop()
        worker.run()
        command.execute.assert_not_called()
