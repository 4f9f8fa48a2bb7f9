"""
Thumbnail hand-off

Producer side of the thumbnail pipeline:
- ThumbnailSize: the fixed set of widths and their filename suffixes
- ThumbnailJob: the {fileId, userId} message published per image upload
- ThumbnailDispatcher: fire-and-forget enqueue and variant resolution on read
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from config import settings
from models import File, FileType
from storage.blob_store import BlobStore
from storage.errors import FileValidationError

logger = logging.getLogger(__name__)

THUMBNAIL_TASK_NAME = "tasks.thumbnails.generate_thumbnails"


class ThumbnailSize(int, Enum):
    W500 = 500
    W250 = 250
    W100 = 100

    @property
    def suffix(self) -> str:
        return f"_{self.value}"

    @classmethod
    def from_query(cls, raw: Any) -> Optional["ThumbnailSize"]:
        """Parse a ``size`` query value; absent or 0 means the original."""
        if raw is None or raw == "" or raw == 0 or raw == "0":
            return None
        try:
            return cls(int(raw))
        except (TypeError, ValueError):
            raise FileValidationError(FileValidationError.INVALID_SIZE, "Invalid size")


@dataclass(frozen=True)
class ThumbnailJob:
    file_id: str
    user_id: str

    def as_message(self) -> Dict[str, str]:
        return {"fileId": self.file_id, "userId": self.user_id}


class CeleryThumbnailQueue:
    """Publishes thumbnail jobs to the named Celery queue."""

    def __init__(self, celery_app=None, queue_name: Optional[str] = None) -> None:
        if celery_app is None:
            from celery_app import app as celery_app
        self.app = celery_app
        self.queue_name = queue_name or settings.THUMBNAIL_QUEUE

    def enqueue(self, job: ThumbnailJob) -> None:
        self.app.send_task(THUMBNAIL_TASK_NAME, args=[job.as_message()], queue=self.queue_name)


class ThumbnailDispatcher:
    def __init__(self, queue, blob_store: Optional[BlobStore] = None) -> None:
        self.queue = queue
        self.blob_store = blob_store or BlobStore()

    def job_for(self, file: File) -> Optional[ThumbnailJob]:
        if file.type != FileType.IMAGE.value:
            return None
        return ThumbnailJob(file_id=str(file.id), user_id=str(file.user_id))

    def enqueue(self, job: ThumbnailJob) -> bool:
        """Publish ``job``; a broken queue is logged, never raised to the caller."""
        try:
            self.queue.enqueue(job)
        except Exception:
            logger.exception(f"Thumbnail enqueue failed for file {job.file_id} (user {job.user_id})")
            return False
        logger.info(f"Queued thumbnails for file {job.file_id}")
        return True

    async def resolve(self, local_path: str, size: Any = None) -> bytes:
        variant = ThumbnailSize.from_query(size)
        return await self.blob_store.read(local_path, variant)
