"""Storage service for uploaded poem images.

Uses local disk behind the StorageBackend interface.
All media is organized by user_id: users/{user_id}/{type}/{filename}
"""
import logging
import uuid
from pathlib import Path
from typing import Protocol

from inkwell.core.config import settings

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    def save(self, user_id: str, media_type: str, data: bytes, ext: str) -> str:
        """Save file and return public URL."""
        ...

    def delete(self, url: str) -> bool:
        """Delete file by URL. Returns True if deleted."""
        ...


class LocalStorage:
    """Store files on local disk. Path: uploads/users/{user_id}/{type}/{uuid}.{ext}"""

    def __init__(self, base_dir: str | None = None, base_url: str | None = None):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR).resolve()
        self.base_url = (settings.MEDIA_BASE_URL if base_url is None else base_url).rstrip("/")

    def _user_path(self, user_id: str, media_type: str) -> Path:
        path = self.base_dir / "users" / str(user_id) / media_type
        path.mkdir(parents=True, exist_ok=True)
        return path

    def save(self, user_id: str, media_type: str, data: bytes, ext: str) -> str:
        path = self._user_path(user_id, media_type)
        filename = f"{uuid.uuid4().hex}{ext}"
        filepath = path / filename
        filepath.write_bytes(data)
        rel = f"users/{user_id}/{media_type}/{filename}"
        return f"{self.base_url}/uploads/{rel}"

    def delete(self, url: str) -> bool:
        if "/uploads/" not in url:
            return False
        rel = url.split("/uploads/", 1)[1]
        filepath = (self.base_dir / rel).resolve()
        if self.base_dir not in filepath.parents:
            return False
        try:
            filepath.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("[Storage] Could not delete %s: %s", filepath, e)
            return False
        return True


_storage: StorageBackend | None = None


def get_storage() -> StorageBackend:
    global _storage
    if _storage is None:
        _storage = LocalStorage()
    return _storage
