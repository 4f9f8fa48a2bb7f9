"""
Celery tasks for image thumbnails
"""

import logging
from typing import Any, Dict, List

from PIL import Image
from sqlalchemy.orm import Session

from .base import ThumbnailTask
from models import File, FileType
from storage.blob_store import BlobStore
from storage.thumbnails import THUMBNAIL_TASK_NAME, ThumbnailSize
from storage.validation import parse_file_id

logger = logging.getLogger(__name__)


def _render_variant(img: Image.Image, width: int) -> Image.Image:
    src_width, src_height = img.size
    height = max(int(round(src_height * width / src_width)), 1)
    return img.resize((width, height), Image.Resampling.LANCZOS)


def render_thumbnails(message: Dict[str, Any], db: Session, blob_store: BlobStore) -> List[str]:
    """
    Render every ThumbnailSize for the image named in ``message``.

    Args:
        message: {"fileId": str, "userId": str} as published on upload
        db: SQLAlchemy session
        blob_store: store whose variant naming the reads rely on

    Returns:
        Paths of the written variants
    """
    file_id = parse_file_id((message or {}).get("fileId"))
    if file_id is None:
        raise ValueError("Missing fileId")
    user_id = parse_file_id((message or {}).get("userId"))
    if user_id is None:
        raise ValueError("Missing userId")

    record = db.query(File).filter(File.id == file_id, File.user_id == user_id).first()
    if record is None:
        raise LookupError("File not found")
    if record.type != FileType.IMAGE.value or not record.local_path:
        logger.warning(f"⚠️ File {file_id} is not a stored image, skipping thumbnails")
        return []

    written: List[str] = []
    with Image.open(record.local_path) as img:
        fmt = img.format or "PNG"
        for size in ThumbnailSize:
            variant = _render_variant(img, size.value)
            if fmt == "JPEG" and variant.mode not in ("RGB", "L"):
                variant = variant.convert("RGB")
            target = blob_store.variant_path(record.local_path, size)
            variant.save(target, format=fmt)
            written.append(target)

    logger.info(f"🖼️ Rendered {len(written)} thumbnails for file {file_id}")
    return written


# Create Celery task
from celery_app import app

@app.task(
    name=THUMBNAIL_TASK_NAME,
    base=ThumbnailTask,
    bind=True,
)
def generate_thumbnails(self, message: Dict[str, Any]) -> List[str]:
    """
    Celery task for thumbnail rendering

    Args:
        message: {"fileId": str, "userId": str}

    Returns:
        list: Written variant paths
    """
    return render_thumbnails(message, self.db, BlobStore())
