"""
Rebuild tracker tables from the names of the files in a directory.

Used when a tracked directory has no index file. Tags cannot be recovered
from filenames, so the tag table is never populated here.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Union

import aiofiles.os

from dltracker.core.errors import ArgumentTypeError, MissingArgumentError
from dltracker.domain import filename_utils

logger = logging.getLogger(__name__)


def iterate_and_add(filenames: Iterable[str], tables: Dict[str, Dict[str, Any]], log=logger) -> None:
    """Add a minimal {filename} record to ``tables`` for every parseable name."""
    for filename in filenames:
        parsed = filename_utils.parse(filename)
        if parsed is None:
            log.warning(f"failed to parse filename '{filename}'")
            continue

        if parsed.type == "semver":
            table = tables.setdefault("semver", {}).setdefault(parsed.package_name, {})
            key = parsed.version_comparable
        elif parsed.type == "git":
            table = tables.setdefault("git", {}).setdefault(parsed.repo, {})
            key = parsed.commit
        elif parsed.type == "url":
            table = tables.setdefault("url", {})
            key = parsed.url
        else:
            log.warning(f"unrecognized parsed type '{parsed.type}'")
            continue

        table[key] = {"filename": filename}


async def reconstruct_map(directory: Union[str, Path], log=logger) -> Dict[str, Dict[str, Any]]:
    """
    Scan ``directory`` and return tables keyed as the tracker keys them.

    Only tables that received entries appear in the result.
    """
    if directory is None:
        raise MissingArgumentError("No path given")
    if not isinstance(directory, (str, os.PathLike)) or not str(directory):
        raise ArgumentTypeError("path must be a non-empty string")

    entries = await aiofiles.os.listdir(directory)
    tables: Dict[str, Dict[str, Any]] = {}
    iterate_and_add(sorted(entries), tables, log)
    return tables
