"""Shared pytest fixtures for all tests."""

import tempfile
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from relay.blob_backend import TelegramBlobBackend
from relay.config import RelayConfig
from relay.database import init_database
from relay.edge_cache import MemoryEdgeCache

BOT_TOKEN = "123456:test-token"
API_BASE = "https://tg.test"


def parse_multipart(request: httpx.Request) -> dict:
    """
    Split a multipart request body into {field_name: bytes}.
    """
    content_type = request.headers["content-type"]
    boundary = content_type.split("boundary=", 1)[1].encode()
    fields = {}
    for part in request.content.split(b"--" + boundary):
        if b"\r\n\r\n" not in part:
            continue
        head, _, body = part.partition(b"\r\n\r\n")
        marker = b'name="'
        if marker not in head:
            continue
        name = head.split(marker, 1)[1].split(b'"', 1)[0].decode()
        fields[name] = body[:-2] if body.endswith(b"\r\n") else body
    return fields


class FakeTelegram:
    """
    In-memory stand-in for the Bot API, served through httpx.MockTransport.
    """

    def __init__(self):
        self.objects = {}
        self.messages = {}
        self.next_message_id = 100
        self.upload_status = 200
        self.omit_file_id = False
        self.omit_message_id = False
        self.omit_file_path = False
        self.download_status = 200
        self.delete_error = None
        self.unreachable = False
        self.file_fetches = 0
        self.calls = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        self.calls.append(path)

        if path.startswith(f"/file/bot{BOT_TOKEN}/"):
            self.file_fetches += 1
            if self.download_status != 200:
                return httpx.Response(self.download_status)
            file_id = path.rsplit("/", 1)[-1]
            return httpx.Response(200, content=self.objects[file_id])

        method = path.rsplit("/", 1)[-1]
        if method.startswith("send"):
            return self._send(method, request)
        if method == "getFile":
            file_id = request.url.params["file_id"]
            if self.omit_file_path or file_id not in self.objects:
                return httpx.Response(200, json={"ok": True, "result": {"file_id": file_id}})
            return httpx.Response(200, json={"ok": True, "result": {"file_path": f"docs/{file_id}"}})
        if method == "deleteMessage":
            if self.delete_error:
                return httpx.Response(400, json={"ok": False, "description": self.delete_error})
            message_id = int(request.url.params["message_id"])
            if message_id not in self.messages:
                return httpx.Response(400, json={
                    "ok": False,
                    "description": "Bad Request: message to delete not found",
                })
            file_id = self.messages.pop(message_id)
            self.objects.pop(file_id, None)
            return httpx.Response(200, json={"ok": True, "result": True})
        return httpx.Response(404)

    def _send(self, method: str, request: httpx.Request) -> httpx.Response:
        if self.upload_status != 200:
            return httpx.Response(self.upload_status, json={"ok": False, "description": "Bad Request: chat not found"})

        fields = parse_multipart(request)
        field = {"sendPhoto": "photo", "sendVideo": "video", "sendAudio": "audio"}.get(method, "document")
        message_id = self.next_message_id
        self.next_message_id += 1
        file_id = f"file-{message_id}"
        self.objects[file_id] = fields[field]
        self.messages[message_id] = file_id

        result = {}
        if not self.omit_message_id:
            result["message_id"] = message_id
        if not self.omit_file_id:
            if field == "photo":
                result["photo"] = [{"file_id": f"thumb-{message_id}"}, {"file_id": file_id}]
            else:
                result[field] = {"file_id": file_id}
        return httpx.Response(200, json={"ok": True, "result": result})


@pytest.fixture
def test_db(monkeypatch):
    """
    Create a temporary test database for each test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        monkeypatch.setattr("relay.database.DATABASE_PATH", str(db_path))
        monkeypatch.setattr("relay.config.DATABASE_PATH", str(db_path))
        init_database()
        yield db_path


@pytest.fixture
def fake_telegram():
    return FakeTelegram()


@pytest.fixture
def backend(fake_telegram):
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_telegram.handler))
    return TelegramBlobBackend(bot_token=BOT_TOKEN, api_base=API_BASE, client=client)


@pytest.fixture
def edge_cache():
    return MemoryEdgeCache(max_entries=16)


@pytest.fixture
def relay_config():
    return RelayConfig(
        origin="https://host",
        chat_id="-1001",
        enable_auth=False,
        created_at_offset_hours=8,
    )


@pytest.fixture
def client(test_db, backend, edge_cache, monkeypatch):
    """
    FastAPI test client wired to the fake Bot API and a fresh cache.
    """
    from relay.dependencies import get_blob_backend, get_edge_cache
    from relay.main import app

    monkeypatch.setattr("relay.config.ENABLE_AUTH", False)
    monkeypatch.setattr("relay.config.TG_CHAT_ID", "-1001")
    app.dependency_overrides[get_blob_backend] = lambda: backend
    app.dependency_overrides[get_edge_cache] = lambda: edge_cache
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
