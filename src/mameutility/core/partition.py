"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/partition.py
Partition engine: splits a parsed catalog into one normalized record-set per group.

MODES
-----
FULL          : one record-set with every named machine, name and description verbatim
MANUFACTURER  : grouped by raw manufacturer; whole group skipped when the stripped
                manufacturer mentions "bootleg"; members must be working ("good"),
                non-clone, and free of bootleg/bios/prototype/playchoice markers
YEAR          : grouped by raw year, no member filter; "?" → "X" in the file name only
SOURCE_FILE   : grouped by raw source file, no member filter; file name is the
                extension-less, sanitized source file

CONTRACTS
---------
• Group enumeration is sequential and follows first appearance in the catalog
• Blank keys are dropped before the group total is computed
• Progress = processed groups / total groups * 100, reported after each group
• A failed write is logged and recorded; the remaining groups are still written
• Cancellation is checked before each group
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Callable, Sequence, Union
from pathlib import Path

from mameutility.core.interfaces import LogSink, StdLogSink, ProgressLike, CancellationLike
from mameutility.core.models import (
    MachineRecord, RecordEntry, RecordSet, RecordSetShape, PartitionMode, PartitionReport)
from mameutility.core.parser import write_record_set
from mameutility.core.progress import ProgressReporter, as_stopped_flag
from mameutility.core.sanitizer import (
    sanitize_for_xml_value, strip_manufacturer_chars, sanitize_for_file_name, manufacturer_file_key,
    year_file_key, source_file_key, contains_ci)
from mameutility.core.config import ProcessingConfig
from mameutility.errors import DirectoryNotFound, MameUtilityError

logger = logging.getLogger(__name__)

FULL_LIST_KEY = "MAME Full List"


@dataclass
class PartitionGroup:
    """One planned output file."""
    raw_key: str
    file_key: str
    records: RecordSet = field(default_factory=RecordSet)
    skip_reason: Optional[str] = None


# =============================
# Member filters
# =============================

def is_bootleg_manufacturer(manufacturer: str) -> bool:
    return contains_ci(strip_manufacturer_chars(manufacturer), "bootleg")


def passes_manufacturer_filter(machine: MachineRecord) -> bool:
    """
    Member filter applied only in manufacturer grouping.
    Keeps working, non-clone machines without bootleg/bios/prototype/playchoice markers.
    """
    if machine.emulation_status != "good":
        return False
    if machine.is_clone:
        return False
    if contains_ci(machine.name, "bootleg") or contains_ci(machine.description, "bootleg"):
        return False
    if contains_ci(machine.name, "bios") or contains_ci(machine.description, "bios"):
        return False
    if contains_ci(machine.description, "prototype") or contains_ci(machine.description, "playchoice"):
        return False
    return True


def _normalized_entry(machine: MachineRecord) -> Optional[RecordEntry]:
    name = sanitize_for_xml_value(machine.name)
    if not name:
        return None
    return RecordEntry(name=name, description=sanitize_for_xml_value(machine.description) or "")


# =============================
# Engine
# =============================

class PartitionEngine:
    """
    Groups MachineRecords and writes one record-set file per surviving group.
    The record-set writer is injectable for testability.
    """

    def __init__(self, writer: Optional[Callable[[str, RecordSet, RecordSetShape], None]] = None):
        self.writer = writer or write_record_set

    # ---- planning ----

    @staticmethod
    def _key_of(machine: MachineRecord, mode: PartitionMode) -> Optional[str]:
        if mode == PartitionMode.MANUFACTURER:
            return machine.manufacturer
        if mode == PartitionMode.YEAR:
            return machine.year
        if mode == PartitionMode.SOURCE_FILE:
            return machine.source_file
        return FULL_LIST_KEY

    @staticmethod
    def _file_key_of(raw_key: str, mode: PartitionMode) -> str:
        if mode == PartitionMode.MANUFACTURER:
            return manufacturer_file_key(raw_key)
        if mode == PartitionMode.YEAR:
            return year_file_key(raw_key)
        if mode == PartitionMode.SOURCE_FILE:
            return source_file_key(raw_key)
        return sanitize_for_file_name(raw_key)

    def plan(self, records: Sequence[MachineRecord], mode: PartitionMode) -> List[PartitionGroup]:
        """
        Builds the ordered list of output groups, including the ones that will be
        skipped (bootleg manufacturers, groups left empty by the member filter).
        """
        if mode == PartitionMode.FULL:
            entries = [RecordEntry(name=m.name, description=m.description or "")
                       for m in records if m.name]
            return [PartitionGroup(raw_key=FULL_LIST_KEY,
                                   file_key=sanitize_for_file_name(FULL_LIST_KEY),
                                   records=RecordSet(entries))]

        members: Dict[str, List[MachineRecord]] = {}
        for machine in records:
            if not machine.name:
                continue
            key = self._key_of(machine, mode)
            if key is None or not key.strip():
                continue
            members.setdefault(key, []).append(machine)

        groups = []
        used_file_keys = set()
        for raw_key, machines in members.items():
            base_key = self._file_key_of(raw_key, mode)
            file_key = base_key
            counter = 1
            while file_key.lower() in used_file_keys:
                file_key = f"{base_key}_{counter}"
                counter += 1
            used_file_keys.add(file_key.lower())

            group = PartitionGroup(raw_key=raw_key, file_key=file_key)

            if mode == PartitionMode.MANUFACTURER:
                if is_bootleg_manufacturer(raw_key):
                    group.skip_reason = "bootleg manufacturer"
                    groups.append(group)
                    continue
                machines = [m for m in machines if passes_manufacturer_filter(m)]

            entries = [e for e in (_normalized_entry(m) for m in machines) if e is not None]
            group.records = RecordSet(entries)
            if not entries:
                group.skip_reason = "no machines left after filtering"
            groups.append(group)

        return groups

    def group(self, records: Sequence[MachineRecord], mode: PartitionMode) -> Dict[str, RecordSet]:
        """Pure grouping: file key -> record-set for every group that would be written."""
        return {g.file_key: g.records for g in self.plan(records, mode) if g.skip_reason is None}

    # ---- execution ----

    def run(
            self,
            records: Sequence[MachineRecord],
            mode: PartitionMode,
            output_path: Union[str, Path],
            progress: ProgressLike = None,
            log: Optional[LogSink] = None,
            cancel: CancellationLike = None
    ) -> PartitionReport:
        """
        Writes the partition to disk.

        Args:
            records: parsed catalog
            mode: grouping mode
            output_path: output file for FULL, output folder otherwise
            progress: percent sink
            log: log sink
            cancel: cancellation signal or `() -> bool`

        Returns:
            PartitionReport with written/skipped/failed groups.

        Raises:
            DirectoryNotFound: output folder missing and cannot be created.
        """
        log = log or StdLogSink()
        reporter = ProgressReporter(progress)
        stopped_flag = as_stopped_flag(cancel)
        report = PartitionReport(mode=mode)

        if stopped_flag():
            report.cancelled = True
            return report

        output_path = Path(output_path)
        folder = output_path.parent if mode == PartitionMode.FULL else output_path
        self._ensure_folder(folder, log)

        log.info(f"Partitioning {len(records)} machines by {mode.display_name.lower()}...")
        groups = self.plan(records, mode)
        report.total_groups = len(groups)
        log.info(f"Found {report.total_groups} groups to process.")

        log_interval = max(1, report.total_groups // 10)

        for group in groups:
            if stopped_flag():
                log.warn(f"Partitioning cancelled after {report.processed_groups}/{report.total_groups} groups")
                report.cancelled = True
                return report

            if group.skip_reason:
                logger.debug(f"Skipping group '{group.raw_key}': {group.skip_reason}")
                report.skipped.append(group.file_key)
            else:
                target = output_path if mode == PartitionMode.FULL \
                    else folder / f"{group.file_key}{ProcessingConfig.RECORD_SET_EXTENSION}"
                try:
                    self.writer(str(target), group.records, RecordSetShape.MACHINES)
                    report.written[group.file_key] = str(target)
                    logger.debug(f"Saved {target} with {len(group.records)} machines")
                except OSError as e:
                    error = MameUtilityError(
                        f"Failed to save file for group '{group.raw_key}': {e}", path=str(target))
                    log.exception(e, f"Error saving {mode.value} document for '{group.file_key}'")
                    report.failed.append(group.file_key)
                    report.errors.append(error)

            processed = report.processed_groups
            if processed % log_interval == 0 or processed == report.total_groups:
                log.info(f"Processing progress: {processed}/{report.total_groups} groups")
            reporter.report(processed / report.total_groups * 100)

        reporter.complete()
        log.info(
            f"{mode.display_name} partition finished: {len(report.written)} written, "
            f"{len(report.skipped)} skipped, {len(report.failed)} failed.")
        return report

    @staticmethod
    def _ensure_folder(folder: Path, log: LogSink) -> None:
        if folder.is_dir():
            return
        try:
            os.makedirs(folder, exist_ok=True)
        except OSError as e:
            error = DirectoryNotFound(f"Cannot create output folder: {e}", path=str(folder))
            log.exception(error, "Error preparing partition output", fatal=True)
            raise error from e
