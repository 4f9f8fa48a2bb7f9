from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Query
from fastapi.responses import Response
from typing import List, Optional
import logging

from auth import get_current_user, get_current_user_optional
from models import FileRecordResponse, FileUploadRequest, User
from storage.errors import FileServiceError, InternalError, to_http_exception
from storage.service import FileService, get_file_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _internal_error() -> HTTPException:
    return to_http_exception(InternalError())


@router.post("", response_model=FileRecordResponse, status_code=201)
async def upload_file(
    background_tasks: BackgroundTasks,
    payload: FileUploadRequest = Body(...),
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    try:
        record = await service.upload(current_user.id, payload)
        response_obj = FileRecordResponse.model_validate(record)
        job = service.thumbnails.job_for(record)
    except FileServiceError as exc:
        raise to_http_exception(exc)
    except Exception:
        logger.exception(f"Upload failed for user {current_user.id}")
        raise _internal_error()

    if job is not None:
        # Runs after the response is sent; failures are logged by the dispatcher
        background_tasks.add_task(service.thumbnails.enqueue, job)

    return response_obj


@router.get("/{file_id}", response_model=FileRecordResponse)
def get_file(
    file_id: str,
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    try:
        record = service.show(file_id, current_user.id)
        return FileRecordResponse.model_validate(record)
    except FileServiceError as exc:
        raise to_http_exception(exc)
    except Exception:
        logger.exception(f"Show failed for file {file_id} (user {current_user.id})")
        raise _internal_error()


@router.get("", response_model=List[FileRecordResponse])
def list_files(
    parent_id: Optional[str] = Query(None, alias="parentId"),
    page: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    try:
        records = service.index(current_user.id, parent_id, page)
        return [FileRecordResponse.model_validate(r) for r in records]
    except FileServiceError as exc:
        raise to_http_exception(exc)
    except Exception:
        logger.exception(f"Listing failed for parent {parent_id} (user {current_user.id})")
        raise _internal_error()


def _set_visibility(file_id: str, user: User, service: FileService, is_public: bool) -> FileRecordResponse:
    action = "publish" if is_public else "unpublish"
    try:
        record = service.set_visibility(file_id, user.id, is_public)
        return FileRecordResponse.model_validate(record)
    except FileServiceError as exc:
        raise to_http_exception(exc)
    except Exception:
        logger.exception(f"Failed to {action} file {file_id} (user {user.id})")
        raise _internal_error()


@router.put("/{file_id}/publish", response_model=FileRecordResponse)
def publish_file(
    file_id: str,
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    return _set_visibility(file_id, current_user, service, True)


@router.put("/{file_id}/unpublish", response_model=FileRecordResponse)
def unpublish_file(
    file_id: str,
    current_user: User = Depends(get_current_user),
    service: FileService = Depends(get_file_service),
):
    return _set_visibility(file_id, current_user, service, False)


@router.get("/{file_id}/data")
async def get_file_data(
    file_id: str,
    size: Optional[str] = Query(None),
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: FileService = Depends(get_file_service),
):
    requester_id = current_user.id if current_user else None
    try:
        data, content_type = await service.fetch_content(file_id, requester_id, size)
    except FileServiceError as exc:
        raise to_http_exception(exc)
    except Exception:
        logger.exception(f"Content fetch failed for file {file_id} (user {requester_id})")
        raise _internal_error()

    return Response(content=data, media_type=content_type)
