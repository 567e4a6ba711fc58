"""
Shared fixtures for the download tracker tests.

Tarballs are real gzip archives built with ``tarfile`` and copied under
the names the filename conventions produce.
"""
import io
import tarfile
from pathlib import Path
from typing import Dict

import pytest

from dltracker.domain.filename_utils import make_tarball_name

DATA_KEYS = {
    "semver": {
        "name": "example",
        "version": "1.2.3",
        "ranges": ["~1", "^1.2", "<2.0"],
        "not_ranges": ["~1.1", "<0.1 || >=1.5", "^2"],
    },
    "tag": {"name": "example", "version": "0.1.2", "spec": "next.big.thing"},
    "git": {
        "domain": "github.com",
        "path": "someUser/example",
        "commit": "0123456789abcdef0123456789abcdef01234567",
        "refs": ["v2.3.4", "main"],
    },
    "url": "https://example.net/someuser/example/archive/76543210.tgz",
}
DATA_KEYS["git"]["repo"] = f"{DATA_KEYS['git']['domain']}/{DATA_KEYS['git']['path']}"

TARBALL_NAMES = {
    "semver": make_tarball_name({
        "type": "semver", "name": DATA_KEYS["semver"]["name"], "version": DATA_KEYS["semver"]["version"],
    }),
    "tag": make_tarball_name({
        "type": "semver", "name": DATA_KEYS["tag"]["name"], "version": DATA_KEYS["tag"]["version"],
    }),
    "git": make_tarball_name({
        "type": "git",
        "domain": DATA_KEYS["git"]["domain"],
        "path": DATA_KEYS["git"]["path"],
        "commit": DATA_KEYS["git"]["commit"],
    }),
    "url": make_tarball_name({"type": "url", "url": DATA_KEYS["url"]}),
}


def good_data() -> Dict[str, dict]:
    return {
        "semver": {
            "name": DATA_KEYS["semver"]["name"],
            "version": DATA_KEYS["semver"]["version"],
            "filename": TARBALL_NAMES["semver"],
            "extra": "extra semver item data",
        },
        "tag": {
            "spec": DATA_KEYS["tag"]["spec"],
            "name": DATA_KEYS["tag"]["name"],
            "version": DATA_KEYS["tag"]["version"],
            "filename": TARBALL_NAMES["tag"],
        },
        "git": {
            "repo": DATA_KEYS["git"]["repo"],
            "commit": DATA_KEYS["git"]["commit"],
            "filename": TARBALL_NAMES["git"],
            "extra": "extra git item data",
        },
        "url": {
            "spec": DATA_KEYS["url"],
            "filename": TARBALL_NAMES["url"],
            "extra": "extra url item data",
        },
    }


@pytest.fixture(scope="session")
def tarball_bytes() -> bytes:
    content = b'{"name": "example", "version": "1.2.3"}\n'
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        info = tarfile.TarInfo("package/package.json")
        info.size = len(content)
        tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()


@pytest.fixture
def write_tarball(tarball_bytes):
    def _write(directory: Path, filename: str) -> Path:
        target = directory / filename
        target.write_bytes(tarball_bytes)
        return target
    return _write


@pytest.fixture
def pkg_dir(tmp_path) -> Path:
    d = tmp_path / "pkgs"
    d.mkdir()
    return d


@pytest.fixture
def populated_dir(pkg_dir, write_tarball) -> Path:
    for filename in TARBALL_NAMES.values():
        write_tarball(pkg_dir, filename)
    return pkg_dir
