"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/merger.py
Concatenates record-set files of either shape into one `Machines` record-set,
then persists it as XML plus its binary DAT twin.

Progress for merge_and_save:
    0..80  : input files read (evenly per file)
    90     : merged XML written
    100    : DAT written
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from mameutility.core.codec import write_dat
from mameutility.core.config import ProcessingConfig
from mameutility.core.interfaces import LogSink, StdLogSink, ProgressLike, CancellationLike
from mameutility.core.models import MergeReport, RecordEntry, RecordSet, RecordSetShape
from mameutility.core.parser import read_record_set, write_record_set
from mameutility.core.progress import ProgressReporter, as_stopped_flag
from mameutility.core.sanitizer import sanitize_for_xml_value
from mameutility.errors import Cancelled, MergeError, ParseError
from mameutility.services.file_service import FileService

logger = logging.getLogger(__name__)

READ_PHASE_WEIGHT = 80
XML_SAVED_PERCENT = 90


class MergeEngine:
    """Pure concatenation: input order kept, no sorting, no de-duplication."""

    def _read_one(self, path: str) -> RecordSet:
        try:
            shape, records = read_record_set(path)
        except ParseError as e:
            raise MergeError(f"Invalid record-set file: {e.message}", path=path) from e

        entries = []
        for entry in records:
            name = sanitize_for_xml_value(entry.name)
            if not name:
                continue
            entries.append(RecordEntry(name=name, description=sanitize_for_xml_value(entry.description) or ""))
        logger.debug(f"Read {len(entries)} {shape.item_tag} items from {path}")
        return RecordSet(entries)

    def merge(
            self,
            paths: Sequence[Union[str, Path]],
            log: Optional[LogSink] = None,
            cancel: CancellationLike = None,
            progress: ProgressLike = None
    ) -> RecordSet:
        """
        Reads and concatenates every file in order.

        Raises:
            MergeError: the first file that is missing, malformed, or matches neither
                `Machines/Machine` nor `Softwares/Software`. Nothing is returned for
                the files read before it.
            Cancelled: a stop request was seen before the last file was read.
        """
        log = log or StdLogSink()
        stopped_flag = as_stopped_flag(cancel)
        reporter = progress if isinstance(progress, ProgressReporter) else ProgressReporter(progress)

        parts: List[RecordSet] = []
        total = len(paths)
        for index, path in enumerate(paths, start=1):
            if stopped_flag():
                log.warn(f"Merge cancelled after {index - 1}/{total} files")
                raise Cancelled(f"Merge cancelled after {index - 1}/{total} files")
            try:
                parts.append(self._read_one(str(path)))
            except MergeError as e:
                log.exception(e, "Error merging files", fatal=True)
                raise
            reporter.report(index / total * READ_PHASE_WEIGHT)

        return RecordSet.concat(parts)

    def merge_and_save(
            self,
            paths: Sequence[Union[str, Path]],
            xml_output_path: Union[str, Path],
            dat_output_path: Optional[Union[str, Path]] = None,
            progress: ProgressLike = None,
            log: Optional[LogSink] = None,
            cancel: CancellationLike = None
    ) -> MergeReport:
        """
        Merges `paths` and writes the result to `xml_output_path` and to the DAT file
        (defaults to the XML path with a `.dat` suffix).

        An empty path list is a warning, not an error: nothing is written and progress
        jumps to 100. Write failures are logged and re-raised.
        """
        log = log or StdLogSink()
        reporter = ProgressReporter(progress)
        stopped_flag = as_stopped_flag(cancel)

        if dat_output_path is None:
            dat_output_path = Path(xml_output_path).with_suffix(ProcessingConfig.DAT_EXTENSION)

        report = MergeReport(input_files=[str(p) for p in paths])

        if not paths:
            log.warn("No files to merge.")
            reporter.complete()
            return report

        log.info(f"Merging {len(paths)} files...")
        try:
            merged = self.merge(paths, log=log, cancel=cancel, progress=reporter)
        except Cancelled:
            report.cancelled = True
            return report
        if stopped_flag():
            report.cancelled = True
            return report
        report.records = merged

        try:
            FileService.ensure_directory(Path(xml_output_path).parent)
            write_record_set(xml_output_path, merged, RecordSetShape.MACHINES)
        except OSError as e:
            log.exception(e, f"Error saving merged XML to {xml_output_path}", fatal=True)
            raise
        report.xml_output_path = str(xml_output_path)
        log.info(f"Merged file saved to: {xml_output_path}")
        reporter.report(XML_SAVED_PERCENT)

        write_dat(dat_output_path, merged, log=log)
        report.dat_output_path = str(dat_output_path)
        log.info(f"DAT file saved to: {dat_output_path}")
        reporter.complete()

        log.info(f"Merge finished: {len(merged)} records from {len(paths)} files.")
        return report
