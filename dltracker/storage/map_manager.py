from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from dltracker.domain.models import DownloadMap


class MapManager(ABC):
    """
    Abstract base class for persisting a tracked directory's index.
    """

    @abstractmethod
    async def load(self) -> Optional[DownloadMap]:
        """Read the persisted index; None if there is none."""
        pass

    @abstractmethod
    async def rebuild(self) -> Dict[str, Dict[str, Any]]:
        """Derive tables from the directory contents."""
        pass

    @abstractmethod
    async def save(self, tables: Dict[str, Dict[str, Any]]) -> bool:
        """Persist the given tables. Returns True when something was written."""
        pass
