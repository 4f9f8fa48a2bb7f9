import logging
import uuid
from pathlib import Path
from typing import Optional, Union

import aiofiles
import aiofiles.os

from config import settings
from storage.errors import NotFound

logger = logging.getLogger(__name__)


class BlobStore:
    """Stores file content under a root directory using generated unique names.

    Thumbnail variants live next to the original as ``<local_path>_<width>``;
    ``variant_path`` is the only place that naming is computed, both for reads
    here and for the worker that renders them.
    """

    def __init__(self, root: Optional[Union[str, Path]] = None) -> None:
        self.root = Path(root or settings.FOLDER_PATH)

    def _ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def _create_filename(self) -> str:
        return str(uuid.uuid4())

    @staticmethod
    def variant_path(local_path: str, variant) -> str:
        """Sibling path of ``local_path`` for a ThumbnailSize (or raw width)."""
        width = getattr(variant, "value", variant)
        return f"{local_path}_{int(width)}"

    async def write(self, data: bytes) -> str:
        self._ensure_root()
        file_path = self.root / self._create_filename()
        async with aiofiles.open(file_path, "wb") as f:
            await f.write(data)
        return str(file_path)

    async def read(self, local_path: str, variant=None, require_variant: bool = False) -> bytes:
        path = Path(local_path)
        if variant is not None:
            candidate = Path(self.variant_path(local_path, variant))
            if await aiofiles.os.path.exists(candidate):
                path = candidate
            elif require_variant:
                raise NotFound()
            else:
                # Thumbnail not rendered yet: serve the original
                logger.debug(f"Variant {candidate.name} missing, falling back to original")

        if not await aiofiles.os.path.exists(path):
            raise NotFound()
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    def remove(self, local_path: str) -> None:
        try:
            Path(local_path).unlink(missing_ok=True)
        except OSError as exc:
            logger.error(f"Could not remove blob {local_path}: {exc}")
