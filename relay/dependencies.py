"""Shared collaborators handed to routes through FastAPI dependencies."""

from typing import Optional

from fastapi import Depends

from relay import config
from relay.blob_backend import TelegramBlobBackend
from relay.edge_cache import EdgeCache, MemoryEdgeCache
from relay.services.relay_service import RelayService

_blob_backend: Optional[TelegramBlobBackend] = None
_edge_cache: Optional[EdgeCache] = None


def get_blob_backend() -> TelegramBlobBackend:
    global _blob_backend
    if _blob_backend is None:
        _blob_backend = TelegramBlobBackend(
            bot_token=config.TG_BOT_TOKEN,
            api_base=config.TG_API_BASE,
            timeout=config.BACKEND_TIMEOUT_SECONDS,
        )
    return _blob_backend


def get_edge_cache() -> EdgeCache:
    global _edge_cache
    if _edge_cache is None:
        _edge_cache = MemoryEdgeCache(
            max_entries=config.EDGE_CACHE_MAX_ENTRIES,
            max_bytes=config.EDGE_CACHE_MAX_BYTES,
            max_entry_bytes=config.EDGE_CACHE_MAX_ENTRY_BYTES,
        )
    return _edge_cache


def get_relay_service(
    backend: TelegramBlobBackend = Depends(get_blob_backend),
    cache: EdgeCache = Depends(get_edge_cache),
) -> RelayService:
    return RelayService(backend=backend, cache=cache)


async def close_blob_backend() -> None:
    global _blob_backend
    if _blob_backend is not None:
        await _blob_backend.close()
        _blob_backend = None
