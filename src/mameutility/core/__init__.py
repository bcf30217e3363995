"""
Catalog processing core — parser, sanitizer, partition, aggregation, merge, codec and asset copy.

- parse_catalog / read_record_set / write_record_set: XML in and out (defusedxml on input)
- PartitionEngine: one record-set per manufacturer, year or source file, or one full list
- SoftwareAggregator: parallel load of a folder of software lists
- MergeEngine: concatenation of record-sets of either shape, saved as XML + DAT
- encode / decode: compact binary DAT form (MessagePack payload, xxHash64 checksum)
- AssetCopyEngine: batched ROM / image copy with weighted progress

Nothing here depends on a GUI toolkit; progress, log and cancellation are passed in by the caller.
"""

from .parser import parse_catalog, parse_software_list, read_record_set, write_record_set
from .partition import PartitionEngine
from .aggregator import SoftwareAggregator
from .merger import MergeEngine
from .codec import encode, decode, read_dat, write_dat
from .copier import AssetCopyEngine
from .progress import CancellationToken, ProgressReporter, WeightedProgress
from .models import (
    MachineRecord, SoftwareRecord, RecordEntry, RecordSet, RecordSetShape,
    PartitionMode, AssetKind, PartitionParams, SoftwareListParams, MergeParams, CopyParams,
    PartitionReport, AggregationReport, MergeReport, CopyReport)

__all__ = [
    "parse_catalog",
    "parse_software_list",
    "read_record_set",
    "write_record_set",
    "PartitionEngine",
    "SoftwareAggregator",
    "MergeEngine",
    "encode",
    "decode",
    "read_dat",
    "write_dat",
    "AssetCopyEngine",
    "CancellationToken",
    "ProgressReporter",
    "WeightedProgress",
    "MachineRecord",
    "SoftwareRecord",
    "RecordEntry",
    "RecordSet",
    "RecordSetShape",
    "PartitionMode",
    "AssetKind",
    "PartitionParams",
    "SoftwareListParams",
    "MergeParams",
    "CopyParams",
    "PartitionReport",
    "AggregationReport",
    "MergeReport",
    "CopyReport",
]
