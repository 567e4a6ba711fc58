"""
Exception types raised by the download tracker.

Argument problems are split into "missing" (a required value is absent or
empty) and "wrong type" so callers can tell the two apart. Audit problems
carry a short ``code`` that mirrors the errno-style codes used in the
persisted audit reports.
"""
from __future__ import annotations

from typing import Optional


class DownloadTrackerError(Exception):
    """Base class for all tracker errors."""


class MissingArgumentError(DownloadTrackerError, ValueError):
    """A required argument or field is absent or empty."""


class ArgumentTypeError(DownloadTrackerError, TypeError):
    """An argument or field has the wrong type."""


class UnrecognizedTypeError(DownloadTrackerError, ValueError):
    """A package type outside of semver/tag/git/url was given."""


class InvalidRecordError(MissingArgumentError):
    """Package metadata is missing a required field or has a malformed one."""


class RecordTypeError(ArgumentTypeError):
    """A package metadata field has the wrong type."""


class MapFileError(DownloadTrackerError):
    """The index file exists but cannot be used."""


class AuditError(DownloadTrackerError):
    """A tracked record does not match what is on disk."""

    code = "EAUDIT"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class NoDataError(AuditError):
    code = "ENODATA"


class FileMissingError(AuditError):
    code = "ENOENT"


class NotRegularFileError(AuditError):
    code = "EFNOTREG"


class ZeroLengthError(AuditError):
    code = "EFZEROLEN"


class BadExtensionError(AuditError):
    code = "EBADEXT"


class NotADirError(AuditError):
    code = "ENOTDIR"


class OrphanRefError(AuditError):
    code = "EORPHANREF"


class PackageNotFoundError(FileMissingError):
    """Raised by add() when the file named by the metadata is not present."""

    def __init__(self, filename: str, parent_dir: str):
        super().__init__(f"Package {filename} not found at {parent_dir}", path=parent_dir)
        self.filename = filename
