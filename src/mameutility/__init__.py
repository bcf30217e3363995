"""
MAMEUtility — MAME catalog toolkit with optional GUI.

Core features:
- Split a MAME catalog into per-manufacturer, per-year or per-source-file lists, or one full list
- Aggregate a folder of software lists into one list
- Merge lists of either shape into one XML plus a compact binary DAT
- Copy the ROMs or preview images named by a list (batched, cancellable, with progress)
- Optional GUI worker with PySide6 (install with [gui] extra)
- CLI interface for headless usage
"""

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("mameutility")
except Exception:
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        import tomli as tomllib  # Python < 3.11: pip install tomli

    try:
        with open("pyproject.toml", "rb") as f:
            __version__ = tomllib.load(f)["project"]["version"]
    except (OSError, KeyError):
        __version__ = "0.0.0"

# Public API — only what users should import directly
from mameutility.commands import (
    PartitionCommand, SoftwareListCommand, MergeCommand, CopyAssetsCommand, DatInfoCommand)
from mameutility.core import (
    PartitionMode, AssetKind, RecordSet, RecordEntry, MachineRecord,
    PartitionParams, SoftwareListParams, MergeParams, CopyParams, CancellationToken)
from mameutility.errors import MameUtilityError
from mameutility.services import LogService, FileService

__all__ = [
    "PartitionCommand",
    "SoftwareListCommand",
    "MergeCommand",
    "CopyAssetsCommand",
    "DatInfoCommand",
    "PartitionMode",
    "AssetKind",
    "RecordSet",
    "RecordEntry",
    "MachineRecord",
    "PartitionParams",
    "SoftwareListParams",
    "MergeParams",
    "CopyParams",
    "CancellationToken",
    "MameUtilityError",
    "LogService",
    "FileService",
    "__version__",
]
