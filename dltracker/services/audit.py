"""
Consistency checks between tracked records and the files they name.
"""
from __future__ import annotations

import copy
import logging
import stat
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiofiles.os

from dltracker.core.errors import (
    AuditError,
    BadExtensionError,
    FileMissingError,
    NoDataError,
    NotADirError,
    NotRegularFileError,
    OrphanRefError,
    ZeroLengthError,
)
from dltracker.domain.filename_utils import has_tarball_extension
from dltracker.domain.models import GIT_REMOTES_LEGACY_DIR, AuditFailure
from dltracker.services.resolution import resolve

logger = logging.getLogger(__name__)

Tables = Dict[str, Dict[str, Any]]


async def _lstat(path: Path):
    try:
        return await aiofiles.os.stat(path, follow_symlinks=False)
    except FileNotFoundError as e:
        raise FileMissingError(f"No such file or directory: {path}", path=str(path)) from e


async def audit_one(dl_type: str, data: Dict[str, Any], base_dir: Union[str, Path]) -> None:
    """
    Raise an AuditError if the file (or legacy git directory) named by
    ``data`` is not usable.
    """
    base = Path(base_dir)
    filename = data.get("filename")
    if not filename:
        if dl_type != "git":
            raise NoDataError("No filename in data")
        # Legacy git downloads saved a cloned repo under an ad-hoc directory name
        repo_id = data.get("repoID")
        if not repo_id:
            raise NoDataError("No filename or repoID in data")
        repo_path = base / GIT_REMOTES_LEGACY_DIR / repo_id
        st = await _lstat(repo_path)
        if not stat.S_ISDIR(st.st_mode):
            raise NotADirError("Git repo path exists but is not a directory", path=str(repo_path))
        return

    file_path = base / filename
    st = await _lstat(file_path)
    if not stat.S_ISREG(st.st_mode):
        raise NotRegularFileError("Not a regular file", path=str(file_path))
    if not st.st_size:
        raise ZeroLengthError("File of zero length", path=str(file_path))
    if not has_tarball_extension(filename):
        raise BadExtensionError("File does not have a tarball extension", path=str(file_path))


def _is_legacy_git_record(entry: Any) -> bool:
    # Repo tables only hold dicts; a legacy record holds plain field values
    return isinstance(entry, dict) and any(not isinstance(v, dict) for v in entry.values())


def _report_data(tables: Tables, dl_type: str, name: Optional[str], key: str, entry: Dict[str, Any], log) -> Dict[str, Any]:
    result = resolve(tables, dl_type, name, key, log)
    if result is not None:
        return result
    # Keys that do not resolve (e.g. invalid version strings) are reported as stored
    result = {"type": dl_type, "spec": key}
    if name:
        result["name"] = name
    result.update(copy.deepcopy(entry))
    return result


async def audit_all(tables: Tables, base_dir: Union[str, Path], log=logger) -> List[AuditFailure]:
    """
    Check every record in every table and return one AuditFailure per
    problem found. An intact store yields an empty list.
    """
    failures: List[AuditFailure] = []

    def record(dl_type: str, name: Optional[str], key: str, entry: Dict[str, Any], err: Exception) -> None:
        log.debug(f"Audit failure for {dl_type} '{name or ''}' '{key}': {err}")
        failures.append(AuditFailure(
            data=_report_data(tables, dl_type, name, key, entry, log),
            error=err,
        ))

    async def check(dl_type: str, name: Optional[str], key: str, entry: Dict[str, Any]) -> None:
        try:
            await audit_one(dl_type, entry, base_dir)
        except (AuditError, OSError) as err:
            record(dl_type, name, key, entry, err)

    for name, versions in list(tables["semver"].items()):
        for ver, entry in list(versions.items()):
            await check("semver", name, ver, entry)

    for name, tags in list(tables["tag"].items()):
        for tag, entry in list(tags.items()):
            if "version" not in entry:
                record("tag", name, tag, entry, NoDataError("Version missing from tag record"))
            elif entry["version"] not in tables["semver"].get(name, {}):
                record("tag", name, tag, entry, OrphanRefError("Orphaned npm registry tag reference"))

    for repo, entries in list(tables["git"].items()):
        if _is_legacy_git_record(entries):
            await check("git", None, repo, entries)
            continue
        for key, entry in list(entries.items()):
            if "commit" in entry:
                if entry["commit"] not in entries:
                    record("git", repo, key, entry, OrphanRefError("Orphaned git commit reference"))
                continue
            await check("git", repo, key, entry)

    for spec, entry in list(tables["url"].items()):
        await check("url", None, spec, entry)

    return failures
