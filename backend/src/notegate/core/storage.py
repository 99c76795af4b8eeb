"""
File storage for note attachments.

Only deletion is consumed by the core; uploads happen elsewhere.
"""

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..config import settings
from .logging import get_logger

logger = get_logger("storage")


class FileStorage(ABC):
    """Storage backend for attachment bytes."""

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Delete a stored file. Deleting a missing file is not an error."""
        pass


class LocalFileStorage(FileStorage):
    """Files on local disk under a root directory."""

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root or settings.upload_dir)

    def _resolve(self, path: str) -> Optional[Path]:
        """Absolute location of a key, or None when it points outside the root."""
        target = (self.root / path).resolve()
        if self.root.resolve() not in target.parents:
            return None
        return target

    async def delete(self, path: str) -> None:
        target = self._resolve(path)
        if target is None:
            # nothing of ours lives there, so there is nothing to remove
            logger.warning(f"Skipping attachment key outside storage root: {path}")
            return
        await asyncio.to_thread(target.unlink, missing_ok=True)
        logger.debug(f"Deleted attachment file {path}")


_file_storage: Optional[FileStorage] = None


def get_file_storage() -> FileStorage:
    """FastAPI dependency for the configured file storage."""
    global _file_storage
    if _file_storage is None:
        _file_storage = LocalFileStorage()
    return _file_storage
