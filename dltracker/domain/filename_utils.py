"""
Tarball filename conventions for downloaded packages.

Names encode the package identity so a directory of tarballs can be indexed
again without any other metadata:

    semver   example-1.2.3.tar.gz, @scope%2Fexample-1.2.3.tar.gz
    git      github.com%2Fuser%2Fproject#<40 hex commit>.tar.gz
    url      example.net%2Fuser%2Fproject%2Farchive%2Fv1.tgz
             (with "#.tar.gz" appended when the URL has no tarball extension)
"""
from __future__ import annotations

import re
import urllib.parse
from typing import Any, Dict, Optional

import semantic_version
from pydantic import BaseModel

TARBALL_EXTENSIONS = (".tar.gz", ".tgz")
URL_SUFFIX = "#.tar.gz"

RE_HEX40 = re.compile(r"^[a-f0-9]{40}$")
_RE_GIT = re.compile(r"^(?P<repo>.+)#(?P<commit>[a-f0-9]{40})(?:\.tar\.gz|\.tgz)$")
_RE_SEMVER = re.compile(
    r"^(?P<name>.+)-(?P<version>v?\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?)$"
)
_RE_PACKAGE_NAME = re.compile(r"^(?:@[^/@\s]+/)?[^/@\s]+$")


class ParsedFilename(BaseModel):
    """Identity fields recovered from a tarball filename."""
    type: str
    package_name: Optional[str] = None
    version: Optional[str] = None
    version_comparable: Optional[str] = None
    repo: Optional[str] = None
    domain: Optional[str] = None
    path: Optional[str] = None
    commit: Optional[str] = None
    url: Optional[str] = None


def has_tarball_extension(filename: Optional[str]) -> bool:
    if not filename or not isinstance(filename, str):
        return False
    return filename.lower().endswith(TARBALL_EXTENSIONS)


def parse_version(value: Any) -> Optional[semantic_version.Version]:
    """Parse a version string, tolerating a leading "v" or "=". None if invalid."""
    if not isinstance(value, str):
        return None
    try:
        return semantic_version.Version(value.strip().lstrip("=v").strip())
    except ValueError:
        return None


def canonical_url(spec: str) -> str:
    """
    Reduce a URL to host + path (+ query), dropping scheme, credentials and
    fragment. Strings without a scheme and host are returned unchanged.
    """
    parts = urllib.parse.urlsplit(spec)
    if not parts.scheme or not parts.netloc:
        return spec
    host = parts.netloc.rpartition("@")[2].lower()
    result = host + parts.path
    if parts.query:
        result += "?" + parts.query
    return result


def _quote(value: str, safe: str = "") -> str:
    return urllib.parse.quote(value, safe=safe)


def make_tarball_name(info: Dict[str, Any]) -> str:
    """
    Build the filename for a package described by ``info``.

    ``info["type"]`` selects the form:
    * semver: ``name``, ``version``
    * git: ``repo`` or ``domain`` + ``path``, and ``commit``
    * url: ``url``
    """
    pkg_type = info.get("type")
    if pkg_type == "semver":
        name, version = info.get("name"), info.get("version")
        if not name or not version:
            raise ValueError("semver tarball name requires name and version")
        return f"{_quote(name, safe='@')}-{version}.tar.gz"

    if pkg_type == "git":
        repo = info.get("repo")
        if not repo:
            domain, path = info.get("domain"), info.get("path")
            if not domain or not path:
                raise ValueError("git tarball name requires repo, or domain and path")
            repo = f"{domain}/{path.strip('/')}"
        commit = info.get("commit") or ""
        if not RE_HEX40.match(commit):
            raise ValueError("git tarball name requires a 40-character hex commit")
        return f"{_quote(repo)}#{commit}.tar.gz"

    if pkg_type == "url":
        url = info.get("url")
        if not url:
            raise ValueError("url tarball name requires url")
        canonical = canonical_url(url)
        name = _quote(canonical)
        if not has_tarball_extension(canonical):
            name += URL_SUFFIX
        return name

    raise ValueError(f"Unrecognized package type '{pkg_type}'")


def parse(filename: str) -> Optional[ParsedFilename]:
    """
    Recover package identity from a tarball filename.

    Returns None for anything that does not follow the naming conventions.
    """
    if not has_tarball_extension(filename):
        return None

    m = _RE_GIT.match(filename)
    if m:
        repo = urllib.parse.unquote(m.group("repo"))
        domain, _, path = repo.partition("/")
        return ParsedFilename(
            type="git",
            repo=repo,
            domain=domain,
            path=path or None,
            commit=m.group("commit"),
        )

    if filename.endswith(URL_SUFFIX):
        url = urllib.parse.unquote(filename[: -len(URL_SUFFIX)])
        if "/" not in url:
            return None
        return ParsedFilename(type="url", url=url)

    decoded = urllib.parse.unquote(filename)
    if "/" in decoded and not decoded.startswith("@"):
        return ParsedFilename(type="url", url=decoded)

    lowered = decoded.lower()
    for ext in TARBALL_EXTENSIONS:
        if lowered.endswith(ext):
            stem = decoded[: -len(ext)]
            break

    m = _RE_SEMVER.match(stem)
    if not m or not _RE_PACKAGE_NAME.match(m.group("name")):
        return None
    version = m.group("version")
    parsed = parse_version(version)
    if parsed is None:
        return None
    return ParsedFilename(
        type="semver",
        package_name=m.group("name"),
        version=version,
        version_comparable=str(parsed),
    )
