"""Relay data type definitions."""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Handle:
    """
    Everything needed to fetch or delete an object from the blob backend.
    """
    object_id: str
    message_ref: int


@dataclass(frozen=True)
class FileRecord:
    """
    One row of the metadata index.
    """
    url: str
    handle: Handle
    created_at: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class Classification:
    mime_type: str
    upload_method: str
    field_name: str


@dataclass(frozen=True)
class PhotoResult:
    object_id: str


@dataclass(frozen=True)
class VideoResult:
    object_id: str


@dataclass(frozen=True)
class AudioResult:
    object_id: str


@dataclass(frozen=True)
class DocumentResult:
    object_id: str


UploadResult = Union[PhotoResult, VideoResult, AudioResult, DocumentResult]


@dataclass(frozen=True)
class CachedResponse:
    """
    A stored copy of a served file response.
    """
    status_code: int
    headers: dict
    body: bytes
