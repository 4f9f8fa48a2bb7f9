import asyncio
import logging
import mimetypes
from functools import lru_cache, partial
from typing import Any, List, Optional, Tuple

from fastapi import Depends
from sqlalchemy.orm import Session

from database import get_db
from models import File, FileType, FileUploadRequest, ROOT_PARENT_ID
from storage.access import can_read, is_owner
from storage.blob_store import BlobStore
from storage.errors import FileValidationError, NotFound, UnsupportedOperation
from storage.metadata import MetadataStore
from storage.pagination import list_page
from storage.thumbnails import CeleryThumbnailQueue, ThumbnailDispatcher
from storage.validation import FileValidator, is_root, parse_file_id

logger = logging.getLogger(__name__)


async def _run_blocking(func, *args, **kwargs):
    """Run a synchronous database call off the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args, **kwargs))


def content_type_for(name: str) -> str:
    mime, _ = mimetypes.guess_type(name)
    if not mime:
        return "application/octet-stream"
    if mime.startswith("text/"):
        return f"{mime}; charset=utf-8"
    return mime


class FileService:
    """Per-operation orchestration of validation, persistence and access control.

    Raises ``storage.errors`` exceptions; translating them to HTTP is the
    router's job.
    """

    def __init__(self, metadata: MetadataStore, blob_store: BlobStore, thumbnails: ThumbnailDispatcher) -> None:
        self.metadata = metadata
        self.blob_store = blob_store
        self.thumbnails = thumbnails
        self.validator = FileValidator(metadata)

    async def upload(self, user_id: int, payload: FileUploadRequest) -> File:
        params = await _run_blocking(self.validator.validate, payload)

        if params.type == FileType.FOLDER.value:
            return await _run_blocking(
                self.metadata.insert,
                user_id=user_id,
                name=params.name,
                type=params.type,
                parent_id=params.parent_id,
                is_public=params.is_public,
            )

        # Blob first: a failed write leaves no record behind
        local_path = await self.blob_store.write(params.data)
        try:
            return await _run_blocking(
                self.metadata.insert,
                user_id=user_id,
                name=params.name,
                type=params.type,
                parent_id=params.parent_id,
                is_public=params.is_public,
                local_path=local_path,
            )
        except Exception:
            self.blob_store.remove(local_path)
            raise

    def _get_existing(self, raw_file_id: Any) -> File:
        file_id = parse_file_id(raw_file_id)
        if file_id is None:
            raise NotFound()
        record = self.metadata.get(file_id)
        if record is None:
            raise NotFound()
        return record

    def show(self, raw_file_id: Any, requester_id: int) -> File:
        record = self._get_existing(raw_file_id)
        # Hidden files look exactly like missing ones
        if not can_read(record, requester_id):
            raise NotFound()
        return record

    def index(self, requester_id: int, raw_parent_id: Any = None, page: Any = 0) -> List[File]:
        if is_root(raw_parent_id):
            parent_id = ROOT_PARENT_ID
        else:
            parent_id = parse_file_id(raw_parent_id)
            if parent_id is None:
                raise FileValidationError(FileValidationError.INVALID_PARENT_ID, "Invalid parentId")
        return list_page(self.metadata, parent_id, page, requester_id=requester_id)

    def set_visibility(self, raw_file_id: Any, requester_id: int, is_public: bool) -> File:
        record = self._get_existing(raw_file_id)
        if not is_owner(record, requester_id):
            raise NotFound()
        return self.metadata.set_public(record, is_public)

    async def fetch_content(self, raw_file_id: Any, requester_id: Optional[int], size: Any = None) -> Tuple[bytes, str]:
        record = await _run_blocking(self._get_existing, raw_file_id)
        if not can_read(record, requester_id):
            raise NotFound()
        if record.type == FileType.FOLDER.value:
            raise UnsupportedOperation()
        if not record.local_path:
            raise NotFound()

        data = await self.thumbnails.resolve(record.local_path, size)
        return data, content_type_for(record.name)


@lru_cache()
def get_blob_store() -> BlobStore:
    return BlobStore()


@lru_cache()
def get_thumbnail_queue() -> CeleryThumbnailQueue:
    return CeleryThumbnailQueue()


def get_thumbnail_dispatcher(
    queue=Depends(get_thumbnail_queue),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ThumbnailDispatcher:
    return ThumbnailDispatcher(queue, blob_store)


def get_file_service(
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
    thumbnails: ThumbnailDispatcher = Depends(get_thumbnail_dispatcher),
) -> FileService:
    return FileService(MetadataStore(db), blob_store, thumbnails)
