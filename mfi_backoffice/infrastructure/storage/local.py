"""Local filesystem store for uploaded documents"""

import logging
import re
import secrets
import time
from pathlib import Path
from typing import Optional
from mfi_backoffice.domain.models import StoredFile
from mfi_backoffice.domain.exceptions import StorageError
from mfi_backoffice.config import settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")


def unique_file_name(original_name: str) -> str:
    """Sanitized stem + millisecond timestamp + random suffix + original extension"""
    original = Path(original_name or "file")
    stem = _UNSAFE_CHARS.sub("_", original.stem) or "file"
    return f"{stem}_{int(time.time() * 1000)}_{secrets.token_hex(6)}{original.suffix}"


class LocalFileStore:
    """Writes uploads under a base directory and serves them from a URL prefix"""

    def __init__(self, base_dir: Optional[str] = None, url_prefix: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.upload_dir).resolve()
        self.url_prefix = (url_prefix or settings.upload_url_prefix).rstrip("/")

    def save(self, original_name: str, content: bytes, mime_type: str) -> StoredFile:
        """
        Write file bytes to disk under a collision-free name.

        Raises:
            StorageError: if the directory cannot be created or the write fails
        """
        file_name = unique_file_name(original_name)
        file_path = self.base_dir / file_name

        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(content)
        except OSError as e:
            raise StorageError(f"Failed to save file {original_name}") from e

        return StoredFile(
            file_name=file_name,
            original_name=original_name,
            file_path=str(file_path),
            file_url=f"{self.url_prefix}/{file_name}",
            file_size=len(content),
            mime_type=mime_type,
        )

    def delete(self, file_path: str) -> bool:
        """
        Remove a stored file. Returns False instead of raising on failure;
        a file that is already gone counts as removed.

        Paths outside the base directory are refused.
        """
        try:
            target = Path(file_path).resolve()
            if self.base_dir != target.parent and self.base_dir not in target.parents:
                logger.error("Refusing to delete file outside upload directory", extra={"file_path": file_path})
                return False
            target.unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.warning(f"Failed to delete stored file: {e}", extra={"file_path": file_path})
            return False
