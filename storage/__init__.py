"""
Storage Module

File storage and access-control engine.

Components:
- blob_store: BlobStore for file content on local disk
- metadata: MetadataStore over the files table
- validation: FileValidator for upload payloads
- access: visibility and ownership checks
- pagination: parent-scoped, fixed-size pages
- thumbnails: ThumbnailDispatcher for the Celery thumbnail queue
- service: FileService orchestrating the above
- routes: API endpoints under /files
"""

from .service import FileService, get_file_service

__all__ = [
    "FileService",
    "get_file_service",
]
