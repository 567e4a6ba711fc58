"""
The DownloadTracker: owner of the four lookup tables for one directory.
"""
from __future__ import annotations

import asyncio
import copy
import logging
import os
import stat
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiofiles.os

from dltracker.core.errors import FileMissingError, PackageNotFoundError
from dltracker.domain.filename_utils import canonical_url
from dltracker.domain.models import (
    KEY_FIELDS,
    LATEST_TAGS,
    AuditFailure,
    TrackerOptions,
    empty_tables,
)
from dltracker.services.audit import audit_all, audit_one
from dltracker.services.resolution import resolve
from dltracker.services.validation import (
    expect_dl_type,
    expect_options,
    expect_path,
    expect_query,
    expect_record_argument,
    validate_record,
)
from dltracker.storage.json_map_manager import JsonMapManager
from dltracker.storage.map_manager import MapManager

logger = logging.getLogger(__name__)


class DownloadTracker:
    """
    Tracks package tarballs in a single directory.

    Instances are made by ``create()``. ``add()`` and ``serialize()`` are
    serialized by an instance lock; ``get_data()`` and ``contains()`` are
    plain in-memory reads.
    """

    def __init__(self, path: str, store: MapManager, tables: Dict[str, Dict[str, Any]], log=logger):
        self._path = path
        self._store = store
        self._tables = tables
        self._log = log
        self._dirty = False
        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"DownloadTracker(path={self._path!r})"

    @property
    def path(self) -> str:
        return self._path

    @property
    def dirty(self) -> bool:
        """True when add() has changed the tables since the last serialize()."""
        return self._dirty

    async def add(self, dl_type: str, data: Dict[str, Any]) -> None:
        """
        Record package metadata for a file already present in the directory.

        Raises validation errors before touching the filesystem, and
        PackageNotFoundError if the named file is missing. The tables are
        left unchanged on any failure.
        """
        expect_dl_type(dl_type)
        expect_record_argument(data)
        validate_record(dl_type, data)

        # "latest" is not a real tag, so such data is just a version
        if dl_type == "tag" and data["spec"] in LATEST_TAGS:
            dl_type = "semver"

        async with self._lock:
            try:
                await audit_one(dl_type, data, self._path)
            except FileMissingError as err:
                parent_dir = os.path.dirname(err.path) if err.path else self._path
                raise PackageNotFoundError(data.get("filename") or data.get("repoID"), parent_dir) from err

            stored = copy.deepcopy({k: v for k, v in data.items() if k not in KEY_FIELDS})
            tables = self._tables

            if dl_type == "semver":
                tables["semver"].setdefault(data["name"], {})[data["version"]] = stored
            elif dl_type == "tag":
                # Cross-list in the semver table, but never replace what is there
                tables["semver"].setdefault(data["name"], {}).setdefault(data["version"], stored)
                tables["tag"].setdefault(data["name"], {})[data["spec"]] = {"version": data["version"]}
            elif dl_type == "git":
                entries = tables["git"].setdefault(data["repo"], {})
                entries[data["commit"]] = stored
                for ref in data.get("refs") or []:
                    entries[ref] = {"commit": data["commit"]}
            elif dl_type == "url":
                tables["url"][canonical_url(data["spec"])] = stored

            self._dirty = True

    def get_data(self, dl_type: str, name: Optional[str], spec: str) -> Optional[Dict[str, Any]]:
        """
        Return the tracked data for a package spec, or None.

        For type 'git', ``name`` is the repo and ``spec`` a commit, ref,
        "semver:<range>" or empty; an empty ``name`` looks up legacy git data
        by ``spec`` alone. For type 'url', ``name`` must be empty.
        """
        expect_query(dl_type, name, spec)
        self._log.debug(f"type: {dl_type}, name: {name}, spec: {spec}")
        return resolve(self._tables, dl_type, name, spec, self._log)

    def contains(self, dl_type: str, name: Optional[str], spec: str) -> bool:
        return self.get_data(dl_type, name, spec) is not None

    async def serialize(self) -> bool:
        """Write the index file if anything was added. Returns True when written."""
        async with self._lock:
            if not self._dirty:
                self._log.debug("Nothing new to write about")
                return False
            written = await self._store.save(self._tables)
            self._dirty = False
            return written

    async def audit(self) -> List[AuditFailure]:
        async with self._lock:
            return await audit_all(self._tables, self._path, self._log)


async def create(
    path: Union[str, os.PathLike, None] = None,
    options: Union[TrackerOptions, Dict[str, Any], None] = None,
) -> DownloadTracker:
    """
    Make a tracker for the directory at ``path`` (default: the current
    working directory).

    The index file is loaded if present, otherwise the tables are
    reconstructed from the names of the files in the directory.
    """
    expect_path(path)
    opts = expect_options(options)
    log = opts.log or logger

    pkg_dir = os.path.abspath(os.fspath(path)) if path else os.getcwd()
    st = await aiofiles.os.stat(pkg_dir)
    if not stat.S_ISDIR(st.st_mode):
        raise NotADirectoryError(f"Given path is not a directory: {path}")

    store = JsonMapManager(Path(pkg_dir), log)
    download_map = await store.load()
    if download_map is not None:
        tables = download_map.tables()
    else:
        tables = empty_tables()
        tables.update(await store.rebuild())

    return DownloadTracker(pkg_dir, store, tables, log)
