"""
Unified command orchestrators for catalog operations.
This is the SINGLE source of truth for business logic — used by both GUI and CLI.
No Qt/PySide6 dependencies — pure Python.
"""
import logging
from pathlib import Path
from typing import Optional

from mameutility.core.aggregator import SoftwareAggregator
from mameutility.core.codec import read_dat
from mameutility.core.copier import AssetCopyEngine
from mameutility.core.interfaces import LogSink, StdLogSink, ProgressLike, CancellationLike
from mameutility.core.merger import MergeEngine
from mameutility.core.models import (
    PartitionParams, SoftwareListParams, MergeParams, CopyParams,
    PartitionReport, AggregationReport, MergeReport, CopyReport, RecordSet)
from mameutility.core.parser import parse_catalog
from mameutility.core.partition import PartitionEngine
from mameutility.errors import ParseError

logger = logging.getLogger(__name__)


class PartitionCommand:
    """
    Parses one raw catalog and writes it as record-set file(s):
    1. Parse the catalog (defusedxml)
    2. Group by the selected mode
    3. Write one file per group (or the single full list)

    Usage:
        params = PartitionParams(input_path="mame.xml", output_path="out/", mode=PartitionMode.YEAR)
        report = PartitionCommand().execute(
            params,
            progress_callback=on_progress,
            stopped_flag=token.is_requested
        )
    """

    def __init__(self, engine: Optional[PartitionEngine] = None):
        self._engine = engine or PartitionEngine()

    def execute(
            self,
            params: PartitionParams,
            progress_callback: ProgressLike = None,
            stopped_flag: CancellationLike = None,
            log: Optional[LogSink] = None
    ) -> PartitionReport:
        """
        Raises:
            ParseError: the catalog cannot be parsed (logged as fatal for this operation)
            DirectoryNotFound: output folder cannot be created
        """
        log = log or StdLogSink()
        log.info(f"Loading catalog {params.input_path}...")
        try:
            records = parse_catalog(Path(params.input_path))
        except ParseError as e:
            log.exception(e, "Error loading MAME catalog", fatal=True)
            raise
        return self._engine.run(
            records, params.mode, params.output_path,
            progress=progress_callback, log=log, cancel=stopped_flag)


class SoftwareListCommand:
    """Aggregates a folder of software lists into one `Softwares` record-set file."""

    def execute(
            self,
            params: SoftwareListParams,
            progress_callback: ProgressLike = None,
            stopped_flag: CancellationLike = None,
            log: Optional[LogSink] = None
    ) -> AggregationReport:
        aggregator = SoftwareAggregator(workers=params.workers)
        return aggregator.aggregate_to_file(
            params.input_dir, params.output_path,
            progress=progress_callback, log=log, cancel=stopped_flag)


class MergeCommand:
    """Merges record-set files into one XML and its DAT twin."""

    def __init__(self, engine: Optional[MergeEngine] = None):
        self._engine = engine or MergeEngine()

    def execute(
            self,
            params: MergeParams,
            progress_callback: ProgressLike = None,
            stopped_flag: CancellationLike = None,
            log: Optional[LogSink] = None
    ) -> MergeReport:
        return self._engine.merge_and_save(
            params.input_paths, params.xml_output_path, params.dat_output_path,
            progress=progress_callback, log=log, cancel=stopped_flag)


class CopyAssetsCommand:
    """Copies the ROMs or images named by record-set files."""

    def execute(
            self,
            params: CopyParams,
            progress_callback: ProgressLike = None,
            stopped_flag: CancellationLike = None,
            log: Optional[LogSink] = None
    ) -> CopyReport:
        engine = AssetCopyEngine(workers=params.workers)
        return engine.copy_assets(
            params.record_set_files, params.source_dir, params.dest_dir, params.kind,
            progress=progress_callback, log=log, cancel=stopped_flag)


class DatInfoCommand:
    """Loads a DAT file; an unreadable or corrupt file yields an empty record-set (logged)."""

    def execute(self, dat_path: str, log: Optional[LogSink] = None) -> RecordSet:
        return read_dat(dat_path, log=log)
