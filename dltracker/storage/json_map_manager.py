import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles
from pydantic import ValidationError

from dltracker.core.errors import MapFileError
from dltracker.domain.models import (
    DL_TYPES,
    MAPFILE_DESCRIPTION,
    MAPFILE_NAME,
    MAPFILE_VERSION,
    DownloadMap,
)
from dltracker.storage.map_manager import MapManager
from dltracker.storage.reconstruct import reconstruct_map

logger = logging.getLogger(__name__)

BOM = "\ufeff"


class JsonMapManager(MapManager):
    def __init__(self, pkg_dir: Path, log=logger):
        self._pkg_dir = Path(pkg_dir)
        self._log = log
        self._created: Optional[str] = None

    @property
    def map_path(self) -> Path:
        return self._pkg_dir / MAPFILE_NAME

    @property
    def created(self) -> Optional[str]:
        return self._created

    async def load(self) -> Optional[DownloadMap]:
        try:
            async with aiofiles.open(self.map_path, "r", encoding="utf-8") as f:
                text = await f.read()
        except FileNotFoundError:
            self._log.warning("Could not find a map file; trying to reconstruct...")
            return None
        except OSError as e:
            self._log.error(f"Unusable map file, error code {e.errno}")
            raise

        if text.startswith(BOM):
            text = text[1:]
        try:
            raw = json.loads(text)
            if not isinstance(raw, dict):
                raise ValueError("map file content is not a JSON object")
            download_map = DownloadMap(**raw)
        except (ValueError, ValidationError) as e:
            self._log.error("Failed to parse map file")
            raise MapFileError(f"Failed to parse map file {self.map_path}: {e}") from e

        if download_map.created:
            self._created = download_map.created
        return download_map

    async def rebuild(self) -> Dict[str, Dict[str, Any]]:
        return await reconstruct_map(self._pkg_dir, self._log)

    async def save(self, tables: Dict[str, Dict[str, Any]]) -> bool:
        # Only include tables that have something in them
        content: Dict[str, Any] = {
            dl_type: tables[dl_type] for dl_type in DL_TYPES if tables.get(dl_type)
        }

        now = datetime.now().strftime("%c")
        if self._created:
            content["created"] = self._created
            content["updated"] = now
        else:
            content["created"] = now

        content["description"] = MAPFILE_DESCRIPTION
        content["version"] = MAPFILE_VERSION

        download_map = DownloadMap(**content)
        self._log.debug(f"writing to {self.map_path}")
        try:
            async with aiofiles.open(self.map_path, "w", encoding="utf-8") as f:
                await f.write(download_map.model_dump_json(indent=2, exclude_none=True))
        except OSError:
            self._log.warning("Failed to write map file")
            raise

        self._created = content["created"]
        self._log.debug("Map file written successfully.")
        return True
