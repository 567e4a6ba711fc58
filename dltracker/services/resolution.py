"""
Lookup of tracked package data by (type, name, spec).

All functions here are pure reads over the in-memory tables. Aliases (tag ->
semver version, git ref -> commit) are followed by key at query time.
"""
from __future__ import annotations

import copy
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

import semantic_version

from dltracker.domain.filename_utils import canonical_url, parse_version
from dltracker.domain.models import GIT_SEMVER_PREFIX, LATEST_TAGS

logger = logging.getLogger(__name__)

Tables = Dict[str, Dict[str, Any]]

GIT_DEFAULT_REFS = ("master", "main")
GIT_ANY_SPECS = ("", "*")
_RE_OP_SPACE = re.compile(r"([<>=~^]+)\s+")


def _parsed_versions(versions: Iterable[str]) -> List[Tuple[str, semantic_version.Version]]:
    parsed = ((v, parse_version(v)) for v in versions)
    return [(v, p) for v, p in parsed if p is not None]


def max_version(versions: Iterable[str]) -> Optional[str]:
    """Highest of the given version strings by semver ordering, ignoring invalid ones."""
    candidates = _parsed_versions(versions)
    if not candidates:
        return None
    return max(candidates, key=lambda item: item[1])[0]


def max_satisfying(versions: Iterable[str], spec: str, log=logger) -> Optional[str]:
    """Highest version satisfying the npm range ``spec``; None if none does or the range is invalid."""
    try:
        rng = semantic_version.NpmSpec(_RE_OP_SPACE.sub(r"\1", spec.strip()))
    except ValueError:
        log.error(f"invalid semver spec: {spec}")
        return None
    matching = [(v, p) for v, p in _parsed_versions(versions) if rng.match(p)]
    if not matching:
        return None
    return max(matching, key=lambda item: item[1])[0]


def _same_version(a: semantic_version.Version, b: semantic_version.Version) -> bool:
    # Build metadata does not take part in precedence
    return a.truncate("prerelease") == b.truncate("prerelease")


def _is_ref_entry(entry: Any) -> bool:
    return isinstance(entry, dict) and "commit" in entry


def _resolve_semver(tables: Tables, name: str, spec: str, log) -> Optional[Dict[str, Any]]:
    versions = tables["semver"].get(name)
    if not versions:
        return None

    wanted = parse_version(spec)
    if spec in LATEST_TAGS:
        ver = max_version(versions)
    elif wanted is not None:
        # Semantic equality, so "v1.2.3" finds "1.2.3"
        ver = next(
            (v for v, p in _parsed_versions(versions) if _same_version(p, wanted)),
            None,
        )
    else:
        ver = max_satisfying(versions.keys(), spec, log)

    if ver is None:
        return None
    result = {"name": name, "version": ver}
    result.update(copy.deepcopy(versions[ver]))
    return result


def _resolve_tag(tables: Tables, name: str, spec: str) -> Optional[Dict[str, Any]]:
    entry = tables["tag"].get(name, {}).get(spec)
    if not entry:
        return None
    ver = entry.get("version")
    result = {"name": name, "spec": spec, "version": ver}
    data = tables["semver"].get(name, {}).get(ver)
    if data:
        result.update(copy.deepcopy(data))
    return result


def _resolve_git(tables: Tables, name: Optional[str], spec: str, log) -> Optional[Dict[str, Any]]:
    if not name:
        # Legacy git data is stored directly under its spec
        data = tables["git"].get(spec)
        if data is None:
            return None
        result = {"spec": spec}
        result.update(copy.deepcopy(data))
        return result

    entries = tables["git"].get(name)
    if not entries:
        return None

    if spec in GIT_ANY_SPECS:
        key = next((ref for ref in GIT_DEFAULT_REFS if ref in entries), None)
        if key is None:
            commits = [k for k, v in entries.items() if isinstance(v, dict) and not _is_ref_entry(v)]
            if len(commits) != 1:
                return None
            key = commits[0]
    elif spec.startswith(GIT_SEMVER_PREFIX):
        tagged = [k for k, v in entries.items() if _is_ref_entry(v)]
        key = max_satisfying(tagged, spec[len(GIT_SEMVER_PREFIX):], log)
        if key is None:
            return None
    else:
        key = spec
        if key not in entries:
            return None

    data = entries[key]
    if not isinstance(data, dict):
        return None
    commit = key
    if _is_ref_entry(data):
        commit = data["commit"]
        data = entries.get(commit) or {}

    result = {"repo": name, "commit": commit}
    if spec and spec != commit:
        result["spec"] = spec
    result.update(copy.deepcopy(data))
    return result


def _resolve_url(tables: Tables, spec: str) -> Optional[Dict[str, Any]]:
    data = tables["url"].get(canonical_url(spec))
    if data is None:
        return None
    result = {"spec": spec}
    result.update(copy.deepcopy(data))
    return result


def resolve(tables: Tables, dl_type: str, name: Optional[str], spec: str, log=logger) -> Optional[Dict[str, Any]]:
    """
    Return a copy of the tracked data matching the query, stamped with the
    type of the table it came from, or None.

    A tag query for "" or "latest" is answered from the semver table.
    """
    if dl_type == "tag" and spec in LATEST_TAGS:
        dl_type, spec = "semver", ""

    if dl_type == "semver":
        result = _resolve_semver(tables, name, spec, log)
    elif dl_type == "tag":
        result = _resolve_tag(tables, name, spec)
    elif dl_type == "git":
        result = _resolve_git(tables, name, spec, log)
    elif dl_type == "url":
        result = _resolve_url(tables, spec)
    else:
        result = None

    if result is not None:
        result["type"] = dl_type
    return result


def exists(tables: Tables, dl_type: str, name: Optional[str], spec: str, log=logger) -> bool:
    return resolve(tables, dl_type, name, spec, log) is not None
