"""Relay flows: upload, retrieve, delete, search and listing."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from common.constants import FILE_CACHE_CONTROL
from common.logging_config import get_logger
from relay.blob_backend import RemovalOutcome, TelegramBlobBackend
from relay.classifier import classify, content_type_for
from relay.config import RelayConfig
from relay.edge_cache import EdgeCache
from relay.exceptions import BackendError, DuplicateKeyError, NotFoundError, ValidationError
from relay.repositories.file_repository import FileRepository
from relay.types import CachedResponse, FileRecord
from relay.utils import (
    build_file_url,
    content_disposition,
    current_millis,
    extension_of,
    offset_timestamp,
)

logger = get_logger(__name__)


class DeleteOutcome(str, Enum):
    REMOVED = "removed"
    BACKEND_FAILED = "backend_failed"
    ALREADY_REMOVED = "already_removed"


@dataclass(frozen=True)
class DeleteResult:
    url: str
    outcome: DeleteOutcome
    backend_error: Optional[str] = None

    @property
    def message(self) -> str:
        if self.outcome == DeleteOutcome.BACKEND_FAILED:
            return f"文件已从数据库删除，但Telegram消息删除失败: {self.backend_error}"
        if self.outcome == DeleteOutcome.ALREADY_REMOVED:
            return "文件已从频道移除"
        return "文件删除成功"


class RelayService:
    def __init__(self, backend: TelegramBlobBackend, cache: EdgeCache):
        self.backend = backend
        self.cache = cache
        self.file_repo = FileRepository()

    async def upload_file(
        self,
        relay_config: RelayConfig,
        file_name: Optional[str],
        data: Optional[bytes],
        content_type: Optional[str] = None,
    ) -> FileRecord:
        """
        Store a payload in the blob backend and index it under a new URL.

        The index is only written after the backend returned a complete
        handle, so a failed upload never leaves metadata behind.

        Raises:
            ValidationError: No file in the request
            BackendError: Backend rejected or lost the upload
            DuplicateKeyError: Generated URL already indexed
        """
        if data is None or file_name is None:
            raise ValidationError("未找到文件")

        extension = extension_of(file_name)
        classification = classify(extension)

        handle = await self.backend.store(
            data=data,
            file_name=file_name,
            upload_method=classification.upload_method,
            field_name=classification.field_name,
            chat_ref=relay_config.chat_id,
        )

        record = FileRecord(
            url=build_file_url(relay_config.origin, current_millis(), extension),
            handle=handle,
            created_at=offset_timestamp(relay_config.created_at_offset_hours),
            file_name=file_name,
            file_size=len(data),
            mime_type=content_type or classification.mime_type,
        )

        try:
            self.file_repo.insert(record)
        except DuplicateKeyError:
            # the stored message is left in the channel
            logger.error(
                f"Backend object stored but not indexed [url={record.url}] "
                f"[message_id={handle.message_ref}]"
            )
            raise

        logger.info(f"Uploaded file [url={record.url}] [size={record.file_size}] [mime={record.mime_type}]")
        return record

    async def retrieve_file(self, request_url: str) -> CachedResponse:
        """
        Serve a file by its public URL, consulting the edge cache first.

        A cache hit is returned as-is without checking the index.

        Raises:
            NotFoundError: No record for the URL
            BackendError: NOT_FOUND or FETCH_FAILED from the backend
        """
        cached = self.cache.match(request_url)
        if cached is not None:
            logger.debug(f"Edge cache hit [url={request_url}]")
            return cached

        record = self.file_repo.get_by_url(request_url)
        if record is None:
            raise NotFoundError("文件不存在")

        transient_url = await self.backend.resolve(record.handle.object_id)
        body = await self.backend.fetch(transient_url)

        content_type = record.mime_type or content_type_for(extension_of(request_url))
        response = CachedResponse(
            status_code=200,
            headers={
                "Content-Type": content_type,
                "Cache-Control": FILE_CACHE_CONTROL,
                "X-Content-Type-Options": "nosniff",
                "Access-Control-Allow-Origin": "*",
                "Content-Disposition": content_disposition(record.file_name),
            },
            body=body,
        )

        self.cache.put(request_url, response)
        logger.info(f"Served file from backend [url={request_url}] [bytes={len(body)}]")
        return response

    async def delete_file(self, relay_config: RelayConfig, url) -> DeleteResult:
        """
        Delete a file; the index deletion happens whatever the backend says.

        Raises:
            ValidationError: URL missing or not a string
            NotFoundError: No record for the URL
        """
        if not url or not isinstance(url, str):
            raise ValidationError("无效的URL")

        record = self.file_repo.get_by_url(url)
        if record is None:
            raise NotFoundError("文件不存在")

        outcome = DeleteOutcome.REMOVED
        backend_error = None
        try:
            removal = await self.backend.remove(relay_config.chat_id, record.handle.message_ref)
            if removal == RemovalOutcome.ALREADY_REMOVED:
                outcome = DeleteOutcome.ALREADY_REMOVED
        except BackendError as e:
            outcome = DeleteOutcome.BACKEND_FAILED
            backend_error = str(e)
            logger.warning(f"Backend delete failed, removing index entry anyway [url={url}]: {e}")

        self.file_repo.delete_by_url(url)
        logger.info(f"Deleted file [url={url}] [backend={outcome.value}]")

        return DeleteResult(url=url, outcome=outcome, backend_error=backend_error)

    def search_files(self, query: str) -> List[FileRecord]:
        return self.file_repo.search(query or "")

    def list_files(self) -> List[FileRecord]:
        return self.file_repo.list_all()
