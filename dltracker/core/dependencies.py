from pathlib import Path
from typing import Dict
import os

from dltracker.domain.entities import DownloadTracker, create

DIR_ENV_VAR = "DLTRACKER_DIR"

_trackers: Dict[str, DownloadTracker] = {}


def get_tracker_dir() -> Path:
    env_path = os.environ.get(DIR_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser().resolve()
    return Path.cwd()


async def get_tracker(options=None) -> DownloadTracker:
    """Shared tracker for the configured directory, created on first use."""
    pkg_dir = get_tracker_dir()
    key = str(pkg_dir)
    tracker = _trackers.get(key)
    if tracker is None:
        tracker = await create(pkg_dir, options)
        _trackers[key] = tracker
    return tracker


def reset_trackers() -> None:
    _trackers.clear()
