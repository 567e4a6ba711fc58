"""
Metadata store for downloaded package tarballs.

A DownloadTracker maps package specs (semver versions and ranges, dist-tags,
git commits and refs, remote URLs) to the tarball files kept in one
directory, and persists that mapping in the directory's dltracker.json.
"""
import logging

from dltracker.core.errors import (
    ArgumentTypeError,
    AuditError,
    DownloadTrackerError,
    MapFileError,
    MissingArgumentError,
    PackageNotFoundError,
    UnrecognizedTypeError,
)
from dltracker.domain.entities import DownloadTracker, create
from dltracker.domain.models import TYPE_MAP, AuditFailure, TrackerOptions
from dltracker.storage.reconstruct import reconstruct_map

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ArgumentTypeError",
    "AuditError",
    "AuditFailure",
    "DownloadTracker",
    "DownloadTrackerError",
    "MapFileError",
    "MissingArgumentError",
    "PackageNotFoundError",
    "TYPE_MAP",
    "TrackerOptions",
    "UnrecognizedTypeError",
    "create",
    "reconstruct_map",
]
