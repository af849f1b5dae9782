"""Local filesystem attachment storage."""
import logging
import re
import time
from pathlib import Path
from typing import Optional

from printdesk.core.errors import DependencyError, ValidationError
from printdesk.services.storage.base import AttachmentStorage, UploadResult

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class LocalAttachmentStorage(AttachmentStorage):
    """Stores uploads under ``root/<folder>/<owner>/<timestamp>_<name>``."""

    def __init__(self, root: str, base_url: str, max_bytes: int):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.max_bytes = max_bytes

    async def upload(
        self,
        data: bytes,
        filename: str,
        media_type: Optional[str],
        folder: str,
        owner_id: str,
    ) -> UploadResult:
        if not data:
            raise ValidationError("No file provided")
        if len(data) > self.max_bytes:
            raise ValidationError(
                f"File is too large ({len(data)} bytes, limit {self.max_bytes})"
            )

        safe_name = _UNSAFE.sub("_", Path(filename).name) or "file"
        relative = f"{_UNSAFE.sub('_', folder)}/{_UNSAFE.sub('_', owner_id)}/{int(time.time() * 1000)}_{safe_name}"
        target = self.root / relative
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            logger.error(f"[STORAGE] Failed to write {relative}: {e}", exc_info=True)
            raise DependencyError("Attachment storage is unavailable") from e

        logger.info(f"[STORAGE] Stored {relative} ({len(data)} bytes)")
        return UploadResult(
            url=f"{self.base_url}/{relative}",
            path=relative,
            name=Path(filename).name,
            media_type=media_type,
            size=len(data),
        )
