"""Pydantic schemas for file operation endpoints."""

from typing import Any, List, Optional

from pydantic import BaseModel

from relay.types import FileRecord
from relay.utils import format_size, preview_kind


class UploadResponse(BaseModel):
    """Response model for a successful upload."""
    status: int = 1
    msg: str = "✔ 上传成功"
    url: str


class UploadFailureResponse(BaseModel):
    """Response model for a failed upload."""
    status: int = 0
    msg: str = "✘ 上传失败"
    error: str


class FileMetadataResponse(BaseModel):
    """Response model for file metadata."""
    url: str
    file_id: str
    message_id: int
    created_at: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    formatted_size: str
    preview: str

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileMetadataResponse":
        return cls(
            url=record.url,
            file_id=record.handle.object_id,
            message_id=record.handle.message_ref,
            created_at=record.created_at,
            file_name=record.file_name,
            file_size=record.file_size,
            mime_type=record.mime_type,
            formatted_size=format_size(record.file_size),
            preview=preview_kind(record.url),
        )


class ListFilesResponse(BaseModel):
    """Response model for file listing and search."""
    files: List[FileMetadataResponse]


class SearchRequest(BaseModel):
    """Request model for file search."""
    query: str = ""


class DeleteRequest(BaseModel):
    """Request model for file deletion; url is validated by the delete flow."""
    url: Any = None


class DeleteResponse(BaseModel):
    """Response model for file deletion."""
    success: bool = True
    message: str
