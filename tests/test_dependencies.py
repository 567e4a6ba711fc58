import pytest

from dltracker.core import dependencies

@pytest.fixture(autouse=True)
def _reset():
    dependencies.reset_trackers()
    yield
    dependencies.reset_trackers()


def test_tracker_dir_from_env(pkg_dir, monkeypatch):
    monkeypatch.setenv(dependencies.DIR_ENV_VAR, str(pkg_dir))
    assert dependencies.get_tracker_dir() == pkg_dir.resolve()


def test_tracker_dir_defaults_to_cwd(pkg_dir, monkeypatch):
    monkeypatch.delenv(dependencies.DIR_ENV_VAR, raising=False)
    monkeypatch.chdir(pkg_dir)
    assert dependencies.get_tracker_dir() == pkg_dir.resolve()


@pytest.mark.asyncio
async def test_get_tracker_is_shared(pkg_dir, monkeypatch):
    monkeypatch.setenv(dependencies.DIR_ENV_VAR, str(pkg_dir))
    first = await dependencies.get_tracker()
    second = await dependencies.get_tracker()
    assert first is second
    assert first.path == str(pkg_dir.resolve())
