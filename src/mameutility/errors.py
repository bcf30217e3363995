"""
MAMEUtility error hierarchy.

All exceptions inherit from MameUtilityError so callers can catch every
catalog-processing failure with a single except clause.

MameUtilityError (base)
├── DirectoryNotFound  - required input directory is absent (fatal)
├── NoInputFiles       - directory holds no catalog files (fatal)
├── ParseError         - malformed XML or unexpected document shape (recoverable)
├── MergeError         - input shape mismatch during merge (fatal, aborts merge)
├── CodecError         - DAT decode/encode failure (recoverable on read)
├── CopyError          - per-asset I/O failure (recoverable, batch continues)
└── Cancelled          - cooperative abort (not a failure)

Every error carries a `fatal` flag. Batch operations collect recoverable
errors into their report objects and keep going; fatal errors propagate to
the caller, which decides whether to halt a larger workflow.
"""
from typing import Optional


class MameUtilityError(Exception):
    """Base exception for all MAMEUtility errors."""

    fatal: bool = False

    def __init__(self, message: str, path: Optional[str] = None, fatal: Optional[bool] = None):
        super().__init__(message)
        self.message = message
        self.path = path
        if fatal is not None:
            self.fatal = fatal

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} ({self.path})"
        return self.message


class DirectoryNotFound(MameUtilityError):
    """Raised when a required directory does not exist."""
    fatal = True


class NoInputFiles(MameUtilityError):
    """Raised when a directory contains no matching catalog files."""
    fatal = True


class ParseError(MameUtilityError):
    """Raised when a document is not well-formed or has an unexpected shape."""
    fatal = False


class MergeError(MameUtilityError):
    """Raised when a merge input matches neither accepted record-set shape."""
    fatal = True


class CodecError(MameUtilityError):
    """Raised when DAT data is truncated, corrupt or structurally invalid."""
    fatal = False


class CopyError(MameUtilityError):
    """
    Raised (or collected) when copying a single asset fails.
    `record_name` identifies the catalog entry the asset belongs to.
    """
    fatal = False

    def __init__(
            self,
            message: str,
            path: Optional[str] = None,
            record_name: Optional[str] = None,
            fatal: Optional[bool] = None
    ):
        super().__init__(message, path=path, fatal=fatal)
        self.record_name = record_name


class Cancelled(MameUtilityError):
    """
    Cooperative cancellation. Not treated as a failure for reporting.
    Raised only where a partial result would be indistinguishable from a
    complete one (MergeEngine.merge); engines that return a report set
    `cancelled` on it instead.
    """
    fatal = False

    def __init__(self, message: str = "Operation cancelled", path: Optional[str] = None):
        super().__init__(message, path=path)
