"""
Pydantic models and constants for the download tracker.

This module defines:
- The fixed vocabulary of package types and the key fields they use
- Tracker construction options
- The persisted index file (dltracker.json)
- Audit report entries
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Internal package types, one table each.
DL_TYPES = ("semver", "tag", "git", "url")

# Fields that identify a record; the table structure already encodes them,
# so they are not kept in stored copies.
KEY_FIELDS = frozenset(("name", "version", "spec", "repo", "commit", "refs"))

# Reserved tag strings meaning "no real tag", i.e. the highest version.
LATEST_TAGS = ("", "latest")

# Prefix of a git spec that selects a ref by semver range.
GIT_SEMVER_PREFIX = "semver:"

# Where the legacy tracker kept cloned git repositories.
GIT_REMOTES_LEGACY_DIR = "_git-remotes"

MAPFILE_NAME = "dltracker.json"
MAPFILE_VERSION = 2
MAPFILE_DESCRIPTION = "".join([
    "This file is an artifact of the command **npm download**.  ",
    "It enables **npm install --offline** to map package specs to ",
    "installation-related metadata and corresponding tarball files.  ",
    "DO NOT DELETE this file.  Ensure that it travels with the files in the ",
    "shared directory, until you have followed up with the command ",
    "**npm install --offline** and have verified a good installation.",
])

# Maps npm package-argument types onto tracker types.
TYPE_MAP = MappingProxyType({
    "version": "semver",
    "range": "semver",
    "tag": "tag",
    "remote": "url",
    "git": "git",
})


def empty_tables() -> Dict[str, Dict[str, Any]]:
    return {dl_type: {} for dl_type in DL_TYPES}


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class TrackerOptions(BaseModel):
    """
    Construction options for a DownloadTracker.

    ``log`` may be any object with callable ``error``, ``warning``, ``info``
    and ``debug`` attributes (a ``logging.Logger`` qualifies). When it is
    None or False, the package logger is used.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    log: Optional[Any] = Field(
        default=None,
        description="Logger used instead of the package logger.",
    )


# ---------------------------------------------------------------------------
# Persisted index file
# ---------------------------------------------------------------------------


class DownloadMap(BaseModel):
    """
    Contents of the index file.

    Persisted at: <tracked dir>/dltracker.json

    Unknown top-level keys are ignored on load. Each table is kept as plain
    nested dicts because records carry arbitrary caller-supplied fields.
    """

    semver: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = Field(
        default=None,
        description="package name -> version -> record",
    )
    tag: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = Field(
        default=None,
        description="package name -> tag -> {version}",
    )
    git: Optional[Dict[str, Dict[str, Any]]] = Field(
        default=None,
        description="repo -> commit or ref -> record or {commit}; legacy records sit directly under a key.",
    )
    url: Optional[Dict[str, Dict[str, Any]]] = Field(
        default=None,
        description="canonical URL (host + path) -> record",
    )
    created: Optional[str] = Field(
        default=None,
        description="Locale-formatted time of the first write.",
    )
    updated: Optional[str] = Field(
        default=None,
        description="Locale-formatted time of the latest write.",
    )
    description: Optional[str] = Field(default=None)
    version: Optional[int] = Field(default=None)

    def tables(self) -> Dict[str, Dict[str, Any]]:
        """Return the four tables, empty where the file had none."""
        result = empty_tables()
        for dl_type in DL_TYPES:
            table = getattr(self, dl_type)
            if table is not None:
                result[dl_type] = table
        return result


# ---------------------------------------------------------------------------
# Audit reports
# ---------------------------------------------------------------------------


class AuditFailure(BaseModel):
    """One problem found by an audit: the record as get_data shows it, and the error."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    data: Optional[Dict[str, Any]] = None
    error: Exception
