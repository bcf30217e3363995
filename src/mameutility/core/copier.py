"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/copier.py
Copies the ROM archives or preview images named by record-set files from a flat
source folder into a flat destination folder.

PIPELINE
--------
for each record-set file (sequential):
    read names (either record-set shape)
    copy names in batches of COPY_BATCH_SIZE on the worker pool
    update weighted progress after each batch

CONTRACTS
---------
• Missing assets are skipped silently (debug log only)
• Existing destination files are overwritten
• One failing asset never stops the batch; it is logged and collected as CopyError
• An unreadable record-set file is logged and counted as completed
• Progress is non-decreasing and ends at exactly 100 unless cancelled
"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

from mameutility.core.config import ProcessingConfig
from mameutility.core.interfaces import LogSink, StdLogSink, ProgressLike, CancellationLike
from mameutility.core.models import AssetKind, CopyReport
from mameutility.core.parser import read_record_set
from mameutility.core.progress import ProgressReporter, WeightedProgress, as_stopped_flag
from mameutility.errors import CopyError, DirectoryNotFound, ParseError
from mameutility.services.file_service import FileService

logger = logging.getLogger(__name__)


@dataclass
class RecordCopyResult:
    name: str
    copied: int = 0
    found: bool = False
    errors: List[CopyError] = field(default_factory=list)


class AssetCopyEngine:
    """
    Args:
        workers: size of the pool that copies one batch (1 = sequential)
        batch_size: records per batch; progress is updated between batches
        file_service: filesystem helper (patchable in tests)
    """

    def __init__(
            self,
            workers: int = 1,
            batch_size: int = ProcessingConfig.COPY_BATCH_SIZE,
            file_service: type = FileService
    ):
        self.workers = max(1, workers)
        self.batch_size = max(1, batch_size)
        self.file_service = file_service

    def _copy_record(self, name: str, source_dir: str, dest_dir: str, kind: AssetKind) -> RecordCopyResult:
        result = RecordCopyResult(name=name)
        for extension in kind.extensions:
            source = self.file_service.asset_path(source_dir, name, extension)
            if not os.path.isfile(source):
                continue
            result.found = True
            destination = self.file_service.asset_path(dest_dir, name, extension)
            try:
                self.file_service.copy_file(source, destination)
                result.copied += 1
            except OSError as e:
                result.errors.append(CopyError(
                    f"Failed to copy {os.path.basename(source)}: {e}", path=source, record_name=name))
        if not result.found:
            logger.debug(f"{kind.display_name} not found in source for '{name}'")
        return result

    def _prepare_destination(self, dest_dir: str, log: LogSink) -> None:
        try:
            self.file_service.ensure_directory(dest_dir)
        except OSError as e:
            error = CopyError(f"Cannot create destination directory: {e}", path=dest_dir, fatal=True)
            log.exception(error, "Error preparing copy destination", fatal=True)
            raise error from e

    def copy_assets(
            self,
            record_set_files: Sequence[Union[str, Path]],
            source_dir: Union[str, Path],
            dest_dir: Union[str, Path],
            kind: AssetKind = AssetKind.ROM,
            progress: ProgressLike = None,
            log: Optional[LogSink] = None,
            cancel: CancellationLike = None
    ) -> CopyReport:
        """
        Copies every asset named in `record_set_files`.

        Raises:
            DirectoryNotFound: `source_dir` does not exist.
            CopyError (fatal): `dest_dir` is missing and cannot be created.
        """
        log = log or StdLogSink()
        stopped_flag = as_stopped_flag(cancel)
        reporter = ProgressReporter(progress)
        source_dir, dest_dir = str(source_dir), str(dest_dir)
        files = [str(p) for p in record_set_files]

        if not os.path.isdir(source_dir):
            error = DirectoryNotFound(f"{kind.display_name} source directory does not exist", path=source_dir)
            log.exception(error, f"Error copying {kind.display_name}", fatal=True)
            raise error
        self._prepare_destination(dest_dir, log)

        report = CopyReport(kind=kind, total_files=len(files))
        weighted = WeightedProgress(len(files), reporter)

        if not files:
            log.warn(f"No record-set files selected for {kind.display_name} copy.")
            reporter.complete()
            return report

        log.info(f"Copying {kind.display_name} for {len(files)} files with {self.workers} workers...")

        executor = ThreadPoolExecutor(max_workers=self.workers) if self.workers > 1 else None
        try:
            for path in files:
                if stopped_flag():
                    report.cancelled = True
                    break
                if not self._copy_file_set(path, source_dir, dest_dir, kind, report, weighted,
                                           log, stopped_flag, executor):
                    report.cancelled = True
                    break
                report.files_completed += 1
                weighted.complete_file()
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        if report.cancelled:
            log.warn(f"{kind.display_name} copy cancelled after "
                     f"{report.files_completed}/{report.total_files} files")
        log.info(report.summary())
        return report

    def _copy_file_set(self, path, source_dir, dest_dir, kind, report, weighted, log, stopped_flag, executor) -> bool:
        """Copies the assets of one record-set file. Returns False when cancelled midway."""
        try:
            _, records = read_record_set(path)
        except ParseError as e:
            log.exception(e, f"Error reading record-set file {Path(path).name}")
            report.failed_files.append(path)
            return True

        names = records.names()
        total = len(names)
        log.info(f"Processing {Path(path).name}: {total} records")

        for start in range(0, total, self.batch_size):
            if stopped_flag():
                return False

            batch = names[start:start + self.batch_size]
            chunks = self._split_at_rom_checkpoints(batch, start) if kind == AssetKind.ROM else [batch]

            results: List[RecordCopyResult] = []
            cancelled = False
            for index, chunk in enumerate(chunks):
                if index > 0 and stopped_flag():
                    cancelled = True
                    break
                if executor is not None:
                    results.extend(executor.map(lambda n: self._copy_record(n, source_dir, dest_dir, kind), chunk))
                else:
                    results.extend(self._copy_record(n, source_dir, dest_dir, kind) for n in chunk)

            for result in results:
                report.copied += result.copied
                if not result.found:
                    report.missing += 1
                for error in result.errors:
                    log.exception(error, f"Error copying {kind.display_name} for '{result.name}'")
                    report.errors.append(error)

            if cancelled:
                return False
            weighted.update_inner((start + len(batch)) / total * 100)

        return True

    @staticmethod
    def _split_at_rom_checkpoints(batch: List[str], start: int) -> List[List[str]]:
        """
        Splits a ROM batch at every ROM_CANCEL_INTERVAL-th record of the file.
        Cancellation is polled between the chunks.
        """
        interval = ProcessingConfig.ROM_CANCEL_INTERVAL
        chunks: List[List[str]] = []
        current: List[str] = []
        for offset, name in enumerate(batch):
            if current and (start + offset) % interval == 0:
                chunks.append(current)
                current = []
            current.append(name)
        if current:
            chunks.append(current)
        return chunks
