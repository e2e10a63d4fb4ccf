"""Tests for relay API endpoints."""

import pytest

from relay.auth import AuthGate, get_auth_gate
from relay.main import app

PNG_BYTES = b"\x89PNG" + b"p" * 1020


def upload(client, name="photo.png", data=PNG_BYTES, content_type="image/png"):
    return client.post("/upload", files={"file": (name, data, content_type)})


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "running"
    assert "X-Request-ID" in response.headers


def test_upload_then_retrieve(client, monkeypatch):
    monkeypatch.setattr("relay.services.relay_service.current_millis", lambda: 169000000)

    response = upload(client)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == 1
    assert body["url"] == "http://testserver/169000000.png"

    served = client.get(body["url"])
    assert served.status_code == 200
    assert served.headers["content-type"] == "image/png"
    assert served.headers["cache-control"] == "public, max-age=31536000"
    assert served.headers["x-content-type-options"] == "nosniff"
    assert served.headers["access-control-allow-origin"] == "*"
    assert served.headers["content-disposition"] == "inline; filename*=UTF-8''photo.png"
    assert served.content == PNG_BYTES


def test_second_retrieve_hits_cache(client, fake_telegram):
    url = upload(client).json()["url"]

    first = client.get(url)
    second = client.get(url)

    assert first.content == second.content
    assert fake_telegram.file_fetches == 1


def test_upload_without_file(client):
    response = client.post("/upload", data={"other": "x"})
    assert response.status_code == 400
    assert response.json()["status"] == 0
    assert response.json()["error"] == "未找到文件"


def test_upload_upstream_rejection(client, fake_telegram):
    fake_telegram.upload_status = 400

    response = upload(client)

    assert response.status_code == 502
    assert response.json() == {"status": 0, "msg": "✘ 上传失败", "error": "Telegram参数配置错误"}


def test_upload_backend_unreachable(client, fake_telegram):
    fake_telegram.unreachable = True
    assert upload(client).status_code == 504


def test_upload_missing_file_id(client, fake_telegram):
    fake_telegram.omit_file_id = True

    response = upload(client)

    assert response.status_code == 500
    assert response.json()["error"] == "未获取到文件ID"


def test_retrieve_unknown_url(client):
    response = client.get("/does-not-exist.png")
    assert response.status_code == 404
    assert response.text == "文件不存在"


def test_retrieve_hides_backend_detail(client, fake_telegram):
    url = upload(client).json()["url"]
    fake_telegram.unreachable = True

    response = client.get(url)

    assert response.status_code == 500
    assert response.text == "服务器内部错误"


def test_retrieve_missing_transient_path(client, fake_telegram):
    url = upload(client).json()["url"]
    fake_telegram.omit_file_path = True

    response = client.get(url)

    assert response.status_code == 404
    assert response.text == "文件路径无效"


def test_delete_flow(client):
    url = upload(client).json()["url"]

    response = client.post("/delete", json={"url": url})
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "文件删除成功"}

    again = client.post("/delete", json={"url": url})
    assert again.status_code == 404
    assert again.json() == {"error": "文件不存在"}

    assert client.get(url).status_code == 404


def test_delete_with_backend_failure(client, fake_telegram):
    url = upload(client).json()["url"]
    fake_telegram.delete_error = "Bad Request: message can't be deleted"

    response = client.post("/delete", json={"url": url})

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert "Telegram消息删除失败" in response.json()["message"]
    assert client.get(url).status_code == 404


@pytest.mark.parametrize("payload", [{}, {"url": ""}, {"url": 5}])
def test_delete_invalid_url(client, payload):
    response = client.post("/delete", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "无效的URL"}


@pytest.mark.parametrize("payload", [["x"], "x", None])
def test_delete_non_object_body(client, payload):
    response = client.post("/delete", json=payload)
    assert response.status_code == 400
    assert response.json() == {"error": "无效的URL"}


def test_delete_malformed_json(client):
    response = client.post("/delete", content=b"{not json", headers={"Content-Type": "application/json"})
    assert response.status_code == 400
    assert response.json() == {"error": "无效的URL"}


def test_search_and_admin_listing(client):
    upload(client, name="report.pdf", data=b"%PDF", content_type="application/pdf")
    upload(client, name="image.png")

    response = client.post("/search", json={"query": "report"})
    assert response.status_code == 200
    files = response.json()["files"]
    assert [f["file_name"] for f in files] == ["report.pdf"]
    assert files[0]["preview"] == "file"
    assert files[0]["formatted_size"] == "4.00 B"

    assert client.post("/search", json={"query": "nothing"}).json() == {"files": []}

    listing = client.get("/admin").json()["files"]
    assert {f["file_name"] for f in listing} == {"report.pdf", "image.png"}


class TestAuthGate:
    @pytest.fixture
    def gate(self, client, monkeypatch):
        monkeypatch.setattr("relay.config.ENABLE_AUTH", True)
        gate = AuthGate(username="admin", password="s3cret", secret="signing-key", cookie_days=7)
        app.dependency_overrides[get_auth_gate] = lambda: gate
        return gate

    @pytest.mark.parametrize("method,path", [
        ("post", "/upload"),
        ("post", "/delete"),
        ("post", "/search"),
        ("get", "/admin"),
        ("get", "/"),
    ])
    def test_gated_routes_redirect_to_login(self, client, gate, method, path):
        response = getattr(client, method)(path, follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/login"

    def test_read_path_is_public(self, client, gate, fake_telegram):
        token, _ = gate.issue_token()
        anonymous = client.post(
            "/upload",
            files={"file": ("a.png", PNG_BYTES, "image/png")},
            follow_redirects=False,
        )
        assert anonymous.status_code == 302
        assert fake_telegram.calls == []

        authed = client.post(
            "/upload",
            files={"file": ("a.png", PNG_BYTES, "image/png")},
            headers={"Cookie": f"auth_token={token}"},
        )
        assert authed.status_code == 200
        assert client.get(authed.json()["url"]).status_code == 200

    def test_login_sets_cookie(self, client, gate):
        response = client.post("/login", json={"username": "admin", "password": "s3cret"})

        assert response.status_code == 200
        assert response.text == "OK"
        cookie = response.headers["set-cookie"]
        assert cookie.startswith("auth_token=")
        assert "HttpOnly" in cookie

        token = cookie.split(";", 1)[0].split("=", 1)[1]
        listing = client.get("/admin", headers={"Cookie": f"auth_token={token}"})
        assert listing.status_code == 200

    def test_login_rejects_bad_password(self, client, gate):
        response = client.post("/login", json={"username": "admin", "password": "wrong"})
        assert response.status_code == 401

    def test_tampered_token_rejected(self, client, gate):
        token, _ = gate.issue_token()
        forged = token[:-1] + ("0" if token[-1] != "0" else "1")
        response = client.get("/admin", headers={"Cookie": f"auth_token={forged}"}, follow_redirects=False)
        assert response.status_code == 302
