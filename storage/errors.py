"""Error taxonomy shared by the storage core and its routes."""

from typing import Optional

from fastapi import HTTPException


class FileServiceError(Exception):
    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(FileServiceError):
    status_code = 401
    default_message = "Unauthorized"


class FileValidationError(FileServiceError):
    """Malformed input: bad payload, bad parent reference or malformed identifier."""

    status_code = 400
    default_message = "Invalid request"

    MISSING_NAME = "MissingName"
    INVALID_TYPE = "InvalidType"
    MISSING_DATA = "MissingData"
    INVALID_DATA = "InvalidData"
    FILE_TOO_LARGE = "FileTooLarge"
    PARENT_NOT_FOUND = "ParentNotFound"
    INVALID_PARENT_ID = "InvalidParentId"
    INVALID_SIZE = "InvalidSize"

    def __init__(self, code: str, message: Optional[str] = None) -> None:
        self.code = code
        super().__init__(message)


class NotFound(FileServiceError):
    status_code = 404
    default_message = "Not found"


class UnsupportedOperation(FileServiceError):
    status_code = 400
    default_message = "A folder doesn't have content"


class InternalError(FileServiceError):
    pass


def to_http_exception(exc: FileServiceError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)
