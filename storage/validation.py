import base64
import binascii
from dataclasses import dataclass
from typing import Any, Optional

from config import settings
from models import FileType, FileUploadRequest, MAX_ROW_ID, ROOT_PARENT_ID
from storage.errors import FileValidationError
from storage.metadata import MetadataStore

_FILE_TYPES = {t.value for t in FileType}


def parse_file_id(raw: Any) -> Optional[int]:
    """Return ``raw`` as a positive file id, or None when it is malformed.

    Only ASCII digits count; values past the column range can never match a
    row and are treated as malformed too.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not (raw.isascii() and raw.isdecimal()) or len(raw) > len(str(MAX_ROW_ID)):
            return None
        raw = int(raw)
    if not isinstance(raw, int):
        return None
    return raw if 0 < raw <= MAX_ROW_ID else None


def is_root(raw: Any) -> bool:
    """None, 0, "0" and "" all name the top level."""
    if isinstance(raw, str):
        raw = raw.strip()
        return raw in ("", str(ROOT_PARENT_ID))
    return raw is None or raw == ROOT_PARENT_ID


@dataclass
class FileParams:
    name: str
    type: str
    parent_id: int
    is_public: bool
    data: Optional[bytes]


class FileValidator:
    def __init__(self, metadata: MetadataStore) -> None:
        self.metadata = metadata

    def validate(self, payload: FileUploadRequest) -> FileParams:
        """Check an upload payload; the first failing rule raises FileValidationError."""
        if not payload.name:
            raise FileValidationError(FileValidationError.MISSING_NAME, "Missing name")

        if payload.type not in _FILE_TYPES:
            raise FileValidationError(FileValidationError.INVALID_TYPE, "Missing type")

        data = None
        if payload.type != FileType.FOLDER.value:
            if not payload.data:
                raise FileValidationError(FileValidationError.MISSING_DATA, "Missing data")
            data = self._decode(payload.data)

        parent_id = self._check_parent(payload.parent_id)

        return FileParams(
            name=payload.name,
            type=payload.type,
            parent_id=parent_id,
            is_public=bool(payload.is_public),
            data=data,
        )

    def _decode(self, encoded: str) -> bytes:
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            raise FileValidationError(FileValidationError.INVALID_DATA, "Invalid data")
        if len(data) > settings.MAX_FILE_SIZE:
            raise FileValidationError(FileValidationError.FILE_TOO_LARGE, "File too large")
        return data

    def _check_parent(self, raw_parent_id: Any) -> int:
        if is_root(raw_parent_id):
            return ROOT_PARENT_ID

        parent_id = parse_file_id(raw_parent_id)
        parent = self.metadata.get(parent_id) if parent_id is not None else None
        if parent is None:
            raise FileValidationError(FileValidationError.PARENT_NOT_FOUND, "Parent not found")
        if parent.type != FileType.FOLDER.value:
            raise FileValidationError(FileValidationError.PARENT_NOT_FOUND, "Parent is not a folder")
        return parent_id
