"""Attachment storage interface."""
from abc import ABC, abstractmethod
from typing import Optional
from pydantic import BaseModel

from printdesk.services.ordering.models import Attachment


class UploadResult(BaseModel):
    """Where an uploaded file ended up."""

    url: str
    path: str
    name: str
    media_type: Optional[str] = None
    size: int

    def as_attachment(self) -> Attachment:
        return Attachment(url=self.url, name=self.name, media_type=self.media_type)


class AttachmentStorage(ABC):
    """Abstract base class for binary attachment storage."""

    @abstractmethod
    async def upload(
        self,
        data: bytes,
        filename: str,
        media_type: Optional[str],
        folder: str,
        owner_id: str,
    ) -> UploadResult:
        """Store ``data`` and return its reference."""
        pass
