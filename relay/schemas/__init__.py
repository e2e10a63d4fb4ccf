"""Pydantic schemas for API requests and responses."""

from relay.schemas.auth import LoginRequest
from relay.schemas.files import (
    DeleteRequest,
    DeleteResponse,
    FileMetadataResponse,
    ListFilesResponse,
    SearchRequest,
    UploadFailureResponse,
    UploadResponse,
)
from relay.schemas.common import ErrorResponse

__all__ = [
    "LoginRequest",
    "DeleteRequest",
    "DeleteResponse",
    "FileMetadataResponse",
    "ListFilesResponse",
    "SearchRequest",
    "UploadFailureResponse",
    "UploadResponse",
    "ErrorResponse",
]
