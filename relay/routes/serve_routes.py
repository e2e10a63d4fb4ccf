"""Public read path serving stored files by URL."""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse, Response

from common.logging_config import get_logger
from relay.dependencies import get_relay_service
from relay.exceptions import BackendError, BackendErrorKind, NotFoundError
from relay.services.relay_service import RelayService

logger = get_logger(__name__)

router = APIRouter(tags=["Serve"])

RETRIEVE_STATUS = {
    BackendErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BackendErrorKind.FETCH_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

GENERIC_ERROR = (status.HTTP_500_INTERNAL_SERVER_ERROR, "服务器内部错误")


def _text(status_code: int, body: str) -> PlainTextResponse:
    return PlainTextResponse(body, status_code=status_code, media_type="text/plain; charset=UTF-8")


@router.get("/{url_tail:path}")
async def serve_file(
    url_tail: str,
    request: Request,
    relay_service: RelayService = Depends(get_relay_service),
):
    """
    Serve a stored file by its public URL.

    Backend details never reach the client on this path.
    """
    request_url = str(request.url)
    try:
        cached = await relay_service.retrieve_file(request_url)
    except NotFoundError:
        return _text(status.HTTP_404_NOT_FOUND, "文件不存在")
    except BackendError as e:
        if e.kind in RETRIEVE_STATUS:
            status_code, body = RETRIEVE_STATUS[e.kind], str(e)
        else:
            status_code, body = GENERIC_ERROR
        logger.warning(f"Retrieve failed kind={e.kind.value} url={request_url}: {e}")
        return _text(status_code, body)
    except Exception as e:
        logger.error(f"Retrieve failed url={request_url}: {e}", exc_info=True)
        return _text(*GENERIC_ERROR)

    return Response(
        content=cached.body,
        status_code=cached.status_code,
        headers=dict(cached.headers),
    )
