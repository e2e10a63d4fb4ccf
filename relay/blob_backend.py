"""HTTP client that uses the Telegram Bot API as blob storage."""

from enum import Enum
from typing import Optional

import httpx

from common.constants import BACKEND_TIMEOUT_SECONDS, TELEGRAM_API_BASE
from common.logging_config import get_logger
from relay.exceptions import BackendError, BackendErrorKind
from relay.types import (
    AudioResult,
    DocumentResult,
    Handle,
    PhotoResult,
    UploadResult,
    VideoResult,
)

logger = get_logger(__name__)

ALREADY_REMOVED_MARKER = "message to delete not found"


class RemovalOutcome(str, Enum):
    REMOVED = "removed"
    ALREADY_REMOVED = "already_removed"


def decode_upload_result(method: str, result: dict) -> Optional[UploadResult]:
    """
    Decode the object id out of a send* result for the method that was used.

    Args:
        method: Upload method that produced the result (e.g. 'sendPhoto')
        result: The 'result' object of the API response

    Returns:
        Tagged upload result, or None when the expected object is absent
    """
    if method == "sendPhoto":
        sizes = result.get("photo") or []
        # Telegram lists photo sizes smallest first
        file_id = sizes[-1].get("file_id") if sizes else None
        return PhotoResult(file_id) if file_id else None

    variants = {
        "sendVideo": ("video", VideoResult),
        "sendAudio": ("audio", AudioResult),
        "sendDocument": ("document", DocumentResult),
    }
    if method not in variants:
        return None

    field, result_type = variants[method]
    file_id = (result.get(field) or {}).get("file_id")
    return result_type(file_id) if file_id else None


class TelegramBlobBackend:
    """
    Blob backend adapter over the Telegram Bot API.

    Objects are stored as chat messages; the message id is kept so the
    object can be deleted again.
    """

    def __init__(
        self,
        bot_token: str,
        api_base: str = TELEGRAM_API_BASE,
        timeout: float = BACKEND_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize backend client.

        Args:
            bot_token: Bot API token
            api_base: Bot API base URL
            timeout: Timeout in seconds for every backend call
            client: Pre-built AsyncClient (tests inject a mock transport)
        """
        self._bot_token = bot_token
        self._api_base = api_base.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self):
        await self._client.aclose()

    def _method_url(self, method: str) -> str:
        return f"{self._api_base}/bot{self._bot_token}/{method}"

    def _file_url(self, file_path: str) -> str:
        return f"{self._api_base}/file/bot{self._bot_token}/{file_path}"

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            raise BackendError(BackendErrorKind.UNREACHABLE, f"Blob backend unreachable: {e}")

    async def store(
        self,
        data: bytes,
        file_name: str,
        upload_method: str,
        field_name: str,
        chat_ref: str,
    ) -> Handle:
        """
        Upload a payload and return its durable handle.

        Args:
            data: File bytes
            file_name: Original file name sent along with the payload
            upload_method: Bot API method (sendPhoto, sendDocument, ...)
            field_name: Multipart field the method expects
            chat_ref: Chat the message is posted to

        Returns:
            Handle of the stored object

        Raises:
            BackendError: UPSTREAM, UNREACHABLE, MISSING_ID or MISSING_REF
        """
        response = await self._send(
            "POST",
            self._method_url(upload_method),
            data={"chat_id": chat_ref},
            files={field_name: (file_name, data)},
        )

        if not response.is_success:
            logger.error(f"Upload rejected by backend: status={response.status_code} method={upload_method}")
            raise BackendError(BackendErrorKind.UPSTREAM, "Telegram参数配置错误")

        result = response.json().get("result") or {}
        decoded = decode_upload_result(upload_method, result)
        if decoded is None:
            raise BackendError(BackendErrorKind.MISSING_ID, "未获取到文件ID")

        message_ref = result.get("message_id")
        if not message_ref:
            raise BackendError(BackendErrorKind.MISSING_REF, "未获取到tg消息ID")

        logger.info(f"Stored {type(decoded).__name__} in backend [message_id={message_ref}]")
        return Handle(object_id=decoded.object_id, message_ref=int(message_ref))

    async def resolve(self, object_id: str) -> str:
        """
        Ask the backend for a transient download URL for an object.

        Raises:
            BackendError: FETCH_FAILED if the lookup fails, NOT_FOUND if no path is returned
        """
        response = await self._send("GET", self._method_url("getFile"), params={"file_id": object_id})
        if not response.is_success:
            raise BackendError(BackendErrorKind.FETCH_FAILED, "获取文件失败")

        file_path = (response.json().get("result") or {}).get("file_path")
        if not file_path:
            raise BackendError(BackendErrorKind.NOT_FOUND, "文件路径无效")

        return self._file_url(file_path)

    async def fetch(self, transient_url: str) -> bytes:
        """
        Download bytes from a transient URL returned by resolve().

        Raises:
            BackendError: FETCH_FAILED if the download fails
        """
        response = await self._send("GET", transient_url)
        if not response.is_success:
            raise BackendError(BackendErrorKind.FETCH_FAILED, "下载文件失败")
        return response.content

    async def remove(self, chat_ref: str, message_ref: int) -> RemovalOutcome:
        """
        Delete the message holding an object.

        Returns:
            REMOVED, or ALREADY_REMOVED when the backend no longer has the message

        Raises:
            BackendError: UPSTREAM with the backend's description, or UNREACHABLE
        """
        response = await self._send(
            "GET",
            self._method_url("deleteMessage"),
            params={"chat_id": chat_ref, "message_id": message_ref},
        )
        if response.is_success:
            return RemovalOutcome.REMOVED

        try:
            description = response.json().get("description") or ""
        except ValueError:
            description = response.text

        if ALREADY_REMOVED_MARKER in description.lower():
            logger.info(f"Backend message already removed [message_id={message_ref}]")
            return RemovalOutcome.ALREADY_REMOVED

        raise BackendError(BackendErrorKind.UPSTREAM, f"Telegram 消息删除失败: {description}")
