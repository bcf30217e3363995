"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/aggregator.py
Loads every software-list catalog in a folder and flattens them into one record-set.

Files are parsed concurrently on a bounded thread pool and collected in completion
order; the order of softwares within one file is preserved. A file that fails to
parse is logged and left out, the rest of the folder is still aggregated.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional, Callable, Union

from mameutility.core.config import ProcessingConfig
from mameutility.core.interfaces import LogSink, StdLogSink, ProgressLike, CancellationLike
from mameutility.core.models import AggregationReport, RecordEntry, RecordSet, RecordSetShape, SoftwareRecord
from mameutility.core.parser import parse_software_list, write_record_set
from mameutility.core.progress import ProgressReporter, as_stopped_flag
from mameutility.errors import DirectoryNotFound, NoInputFiles, ParseError
from mameutility.services.file_service import FileService

logger = logging.getLogger(__name__)


class SoftwareAggregator:
    """
    Aggregates `<software>` items from all `*.xml` files of one folder.

    Args:
        workers: thread pool size (defaults to the CPU count)
        batch_size: how many softwares are flattened between cancellation checks
    """

    def __init__(self, workers: Optional[int] = None, batch_size: int = ProcessingConfig.AGGREGATE_BATCH_SIZE):
        self.workers = workers or ProcessingConfig.get_worker_count()
        self.batch_size = max(1, batch_size)

    @staticmethod
    def _load_file(path: str, stopped_flag: Callable[[], bool]) -> Optional[List[SoftwareRecord]]:
        if stopped_flag():
            return None
        return parse_software_list(Path(path))

    def aggregate(
            self,
            directory: Union[str, Path],
            progress: ProgressLike = None,
            log: Optional[LogSink] = None,
            cancel: CancellationLike = None
    ) -> AggregationReport:
        """
        Raises:
            DirectoryNotFound: `directory` does not exist.
            NoInputFiles: `directory` holds no `*.xml` file.
        """
        log = log or StdLogSink()
        reporter = ProgressReporter(progress)
        stopped_flag = as_stopped_flag(cancel)

        if not Path(directory).is_dir():
            error = DirectoryNotFound("Software list folder does not exist", path=str(directory))
            log.exception(error, "Error loading software lists", fatal=True)
            raise error

        files = FileService.list_catalog_files(directory)
        if not files:
            error = NoInputFiles("No XML files found in the software list folder", path=str(directory))
            log.exception(error, "Error loading software lists", fatal=True)
            raise error

        report = AggregationReport(total_files=len(files))
        log.info(f"Found {len(files)} software list files. Loading with {self.workers} workers...")

        entries: List[RecordEntry] = []
        completed = 0

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = {executor.submit(self._load_file, path, stopped_flag): path for path in files}

            for future in as_completed(futures):
                path = futures[future]
                try:
                    softwares = future.result()
                except ParseError as e:
                    log.exception(e, f"Error loading software list {Path(path).name}")
                    report.failed_files.append(path)
                    report.errors.append(e)
                    softwares = []

                if softwares is None:
                    report.cancelled = True
                else:
                    for index, software in enumerate(softwares):
                        if index % self.batch_size == 0 and stopped_flag():
                            report.cancelled = True
                            break
                        entries.append(software.to_entry())

                if report.cancelled:
                    # queued files never start; running ones see the flag and return None
                    for pending in futures:
                        pending.cancel()
                    break

                if path not in report.failed_files:
                    report.parsed_files.append(path)
                completed += 1
                logger.debug(f"Loaded {len(softwares)} softwares from {path}")
                reporter.report(completed / len(files) * 100)

        report.records = RecordSet(entries)
        if report.cancelled:
            log.warn(f"Software list loading cancelled after {completed}/{len(files)} files")
            return report

        reporter.complete()
        log.info(f"Aggregated {len(entries)} softwares from {len(report.parsed_files)} files "
                 f"({len(report.failed_files)} failed).")
        return report

    def aggregate_to_file(
            self,
            directory: Union[str, Path],
            output_path: Union[str, Path],
            progress: ProgressLike = None,
            log: Optional[LogSink] = None,
            cancel: CancellationLike = None
    ) -> AggregationReport:
        """
        Aggregates and writes the result as a `Softwares` record-set file.
        Nothing is written when the run is cancelled. Write failures are logged and re-raised.
        """
        log = log or StdLogSink()
        report = self.aggregate(directory, progress=progress, log=log, cancel=cancel)
        if report.cancelled:
            return report

        try:
            FileService.ensure_directory(Path(output_path).parent)
            write_record_set(output_path, report.records, RecordSetShape.SOFTWARES)
        except OSError as e:
            log.exception(e, f"Error saving software list to {output_path}", fatal=True)
            raise

        report.output_path = str(output_path)
        log.info(f"Software list saved to {output_path}")
        return report
