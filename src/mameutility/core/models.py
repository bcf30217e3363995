"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for catalog records, record-sets, operation parameters and reports.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Iterator, Iterable, Tuple
from pathlib import Path
from enum import Enum

from mameutility.core.config import ProcessingConfig
from mameutility.errors import MameUtilityError, CopyError


# =============================
# Enums
# =============================

class PartitionMode(Enum):
    """
    Grouping key used by the partition engine.
    """
    FULL = "full"
    MANUFACTURER = "manufacturer"
    YEAR = "year"
    SOURCE_FILE = "sourcefile"

    @property
    def display_name(self) -> str:
        """Human-readable name for UI display."""
        mapping = {
            PartitionMode.FULL: "Full List",
            PartitionMode.MANUFACTURER: "Manufacturer",
            PartitionMode.YEAR: "Year",
            PartitionMode.SOURCE_FILE: "Source File",
        }
        return mapping.get(self, self.value)

    @property
    def description(self) -> str:
        """Detailed description for help text."""
        mapping = {
            PartitionMode.FULL:
                "Every machine in one list, descriptions kept verbatim",
            PartitionMode.MANUFACTURER:
                "One list per manufacturer (working, non-clone, non-bootleg machines only)",
            PartitionMode.YEAR:
                "One list per release year ('?' becomes 'X' in file names)",
            PartitionMode.SOURCE_FILE:
                "One list per driver source file",
        }
        return mapping.get(self, self.value)

    @property
    def is_grouped(self) -> bool:
        return self != PartitionMode.FULL

    def __repr__(self) -> str:
        return self.value


class AssetKind(Enum):
    ROM = "rom"
    IMAGE = "image"

    @property
    def display_name(self) -> str:
        mapping = {
            AssetKind.ROM: "ROMs",
            AssetKind.IMAGE: "Images",
        }
        return mapping.get(self, self.value)

    @property
    def extensions(self) -> Tuple[str, ...]:
        """Candidate file extensions tried for each record, in copy order."""
        if self == AssetKind.ROM:
            return (ProcessingConfig.ROM_EXTENSION,)
        return ProcessingConfig.IMAGE_EXTENSIONS

    def __repr__(self) -> str:
        return self.value


class RecordSetShape(str, Enum):
    """The two accepted on-disk record-set layouts: (root tag, item tag, name tag)."""
    MACHINES = "Machines"
    SOFTWARES = "Softwares"

    @property
    def item_tag(self) -> str:
        return "Machine" if self == RecordSetShape.MACHINES else "Software"

    @property
    def name_tag(self) -> str:
        return "MachineName" if self == RecordSetShape.MACHINES else "SoftwareName"

    @property
    def description_tag(self) -> str:
        return "Description"


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class MachineRecord:
    """
    A single machine entry from a raw MAME catalog.
    Only `name` is mandatory; everything else may be missing from the source document.
    """
    name: str
    description: str = ""
    manufacturer: Optional[str] = None
    year: Optional[str] = None
    source_file: Optional[str] = None
    clone_of: Optional[str] = None
    emulation_status: str = ""

    @property
    def is_clone(self) -> bool:
        return bool(self.clone_of)

    def __repr__(self):
        return f"<MachineRecord name={self.name}>"


@dataclass(frozen=True)
class SoftwareRecord:
    name: str
    description: str = ProcessingConfig.NO_DESCRIPTION

    def to_entry(self) -> "RecordEntry":
        return RecordEntry(name=self.name, description=self.description)


@dataclass(frozen=True)
class RecordEntry:
    """Normalized (name, description) pair, the unit stored in record-sets and DAT files."""
    name: str
    description: str = ""

    def as_pair(self) -> Tuple[str, str]:
        return self.name, self.description


@dataclass
class RecordSet:
    """
    Ordered sequence of RecordEntry. Insertion order is preserved end to end;
    nothing in the pipeline sorts or de-duplicates it.
    """
    entries: List[RecordEntry] = field(default_factory=list)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> "RecordSet":
        return cls([RecordEntry(name=n, description=d) for n, d in pairs])

    @classmethod
    def concat(cls, record_sets: Iterable["RecordSet"]) -> "RecordSet":
        entries: List[RecordEntry] = []
        for record_set in record_sets:
            entries.extend(record_set.entries)
        return cls(entries)

    def names(self) -> List[str]:
        return [entry.name for entry in self.entries]

    def pairs(self) -> List[Tuple[str, str]]:
        return [entry.as_pair() for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[RecordEntry]:
        return iter(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)

    def __repr__(self):
        return f"<RecordSet count={len(self.entries)}>"


# ======================
#  Operation Reports
# ======================

@dataclass
class PartitionReport:
    """Outcome of a partition run. Partial success is the normal steady state."""
    mode: PartitionMode
    total_groups: int = 0
    written: Dict[str, str] = field(default_factory=dict)   # file key -> output path
    skipped: List[str] = field(default_factory=list)         # excluded or empty groups
    failed: List[str] = field(default_factory=list)          # groups whose write failed
    errors: List[MameUtilityError] = field(default_factory=list)
    cancelled: bool = False

    @property
    def processed_groups(self) -> int:
        return len(self.written) + len(self.skipped) + len(self.failed)


@dataclass
class AggregationReport:
    records: RecordSet = field(default_factory=RecordSet)
    total_files: int = 0
    parsed_files: List[str] = field(default_factory=list)
    failed_files: List[str] = field(default_factory=list)
    errors: List[MameUtilityError] = field(default_factory=list)
    output_path: Optional[str] = None
    cancelled: bool = False


@dataclass
class MergeReport:
    records: RecordSet = field(default_factory=RecordSet)
    input_files: List[str] = field(default_factory=list)
    xml_output_path: Optional[str] = None
    dat_output_path: Optional[str] = None
    cancelled: bool = False


@dataclass
class CopyReport:
    kind: AssetKind
    total_files: int = 0
    files_completed: int = 0
    copied: int = 0
    missing: int = 0
    errors: List[CopyError] = field(default_factory=list)
    failed_files: List[str] = field(default_factory=list)
    cancelled: bool = False

    def summary(self) -> str:
        lines = [
            f"{self.kind.display_name} copy summary:",
            f"Record-set files: {self.files_completed}/{self.total_files}",
            f"Copied: {self.copied}",
            f"Not found in source: {self.missing}",
            f"Errors: {len(self.errors)}",
        ]
        if self.failed_files:
            lines.append(f"Unreadable record-set files: {len(self.failed_files)}")
        if self.cancelled:
            lines.append("Cancelled before completion")
        return "\n".join(lines)


# =============================
# Operation parameters
# =============================
# Validated DTOs shared by the GUI and the CLI.


def _require_path(value, label: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(f"{label} cannot be empty")
    return str(value)


@dataclass
class PartitionParams:
    """Parameters for splitting one raw catalog into record-set files."""
    input_path: str
    output_path: str  # output folder, or output file for PartitionMode.FULL
    mode: PartitionMode = PartitionMode.FULL

    def __post_init__(self):
        self.input_path = _require_path(self.input_path, "Input catalog path")
        self.output_path = _require_path(self.output_path, "Output path")
        if not isinstance(self.mode, PartitionMode):
            self.mode = PartitionMode(self.mode)


@dataclass
class SoftwareListParams:
    input_dir: str
    output_path: str
    workers: Optional[int] = None

    def __post_init__(self):
        self.input_dir = _require_path(self.input_dir, "Software list folder")
        self.output_path = _require_path(self.output_path, "Output file")
        if self.workers is not None and self.workers < 1:
            raise ValueError("Worker count must be at least 1")


@dataclass
class MergeParams:
    input_paths: List[str]
    xml_output_path: str
    dat_output_path: Optional[str] = None

    def __post_init__(self):
        self.input_paths = [str(p) for p in self.input_paths]
        self.xml_output_path = _require_path(self.xml_output_path, "Merged XML output path")
        if not self.dat_output_path:
            # DAT lands next to the merged XML unless told otherwise
            self.dat_output_path = str(
                Path(self.xml_output_path).with_suffix(ProcessingConfig.DAT_EXTENSION))


@dataclass
class CopyParams:
    record_set_files: List[str]
    source_dir: str
    dest_dir: str
    kind: AssetKind = AssetKind.ROM
    workers: int = 1

    def __post_init__(self):
        self.record_set_files = [str(p) for p in self.record_set_files]
        self.source_dir = _require_path(self.source_dir, "Source directory")
        self.dest_dir = _require_path(self.dest_dir, "Destination directory")
        if not isinstance(self.kind, AssetKind):
            self.kind = AssetKind(self.kind)
        if self.workers < 1:
            raise ValueError("Worker count must be at least 1")
