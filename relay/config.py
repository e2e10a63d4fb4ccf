"""Configuration settings for the relay server."""

import os
from dataclasses import dataclass

from fastapi import Request

from common.constants import (
    BACKEND_TIMEOUT_SECONDS as DEFAULT_BACKEND_TIMEOUT,
    CREATED_AT_OFFSET_HOURS as DEFAULT_CREATED_AT_OFFSET,
    EDGE_CACHE_MAX_BYTES as DEFAULT_EDGE_CACHE_MAX_BYTES,
    EDGE_CACHE_MAX_ENTRIES as DEFAULT_EDGE_CACHE_MAX_ENTRIES,
    EDGE_CACHE_MAX_ENTRY_BYTES as DEFAULT_EDGE_CACHE_MAX_ENTRY_BYTES,
    TELEGRAM_API_BASE,
)


DATABASE_PATH = os.environ.get("RELAY_DATABASE_PATH", "/app/data/files.db")

RELAY_HOST = os.environ.get("RELAY_HOST", "0.0.0.0")

RELAY_PORT = int(os.environ.get("RELAY_PORT", "8000"))

TG_BOT_TOKEN = os.environ.get("TG_BOT_TOKEN", "")

TG_CHAT_ID = os.environ.get("TG_CHAT_ID", "")

TG_API_BASE = os.environ.get("TG_API_BASE", TELEGRAM_API_BASE)

ENABLE_AUTH = os.environ.get("ENABLE_AUTH", "false").lower() == "true"

RELAY_USERNAME = os.environ.get("RELAY_USERNAME", "")

RELAY_PASSWORD = os.environ.get("RELAY_PASSWORD", "")

RELAY_SECRET = os.environ.get("RELAY_SECRET", "")

COOKIE_DAYS = int(os.environ.get("COOKIE_DAYS", "7") or 7)

BACKEND_TIMEOUT_SECONDS = float(os.environ.get("BACKEND_TIMEOUT_SECONDS", DEFAULT_BACKEND_TIMEOUT))

CREATED_AT_OFFSET_HOURS = int(os.environ.get("CREATED_AT_OFFSET_HOURS", DEFAULT_CREATED_AT_OFFSET))

EDGE_CACHE_MAX_ENTRIES = int(os.environ.get("EDGE_CACHE_MAX_ENTRIES", DEFAULT_EDGE_CACHE_MAX_ENTRIES))

EDGE_CACHE_MAX_BYTES = int(os.environ.get("EDGE_CACHE_MAX_BYTES", DEFAULT_EDGE_CACHE_MAX_BYTES))

EDGE_CACHE_MAX_ENTRY_BYTES = int(os.environ.get("EDGE_CACHE_MAX_ENTRY_BYTES", DEFAULT_EDGE_CACHE_MAX_ENTRY_BYTES))


@dataclass(frozen=True)
class RelayConfig:
    """
    Settings for a single request.

    The public origin is taken from the incoming request, so links are
    always issued for the host the client actually reached.
    """
    origin: str
    chat_id: str
    enable_auth: bool
    created_at_offset_hours: int


def build_request_config(request: Request) -> RelayConfig:
    """
    FastAPI dependency building the per-request configuration.

    Args:
        request: Incoming request

    Returns:
        RelayConfig for this request
    """
    url = request.url
    origin = f"{url.scheme}://{url.netloc}"
    return RelayConfig(
        origin=origin,
        chat_id=TG_CHAT_ID,
        enable_auth=ENABLE_AUTH,
        created_at_offset_hours=CREATED_AT_OFFSET_HOURS,
    )
