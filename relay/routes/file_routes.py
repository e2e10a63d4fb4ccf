"""Upload, delete, search and listing API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.responses import JSONResponse

from common.logging_config import get_logger
from relay.auth import require_auth
from relay.config import RelayConfig, build_request_config
from relay.dependencies import get_relay_service
from relay.exceptions import (
    BackendError,
    BackendErrorKind,
    NotFoundError,
    ValidationError,
)
from relay.schemas.common import ErrorResponse
from relay.schemas.files import (
    DeleteRequest,
    DeleteResponse,
    FileMetadataResponse,
    ListFilesResponse,
    SearchRequest,
    UploadFailureResponse,
    UploadResponse,
)
from relay.services.relay_service import RelayService

logger = get_logger(__name__)

router = APIRouter(tags=["Files"], dependencies=[Depends(require_auth)])


async def read_json_object(request: Request) -> dict:
    """
    Read a JSON request body, treating anything but an object as empty.
    """
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def upload_status_for(exc: Exception) -> int:
    """
    Pick the HTTP status for a failed upload from the error kind.
    """
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, BackendError):
        if exc.kind == BackendErrorKind.UPSTREAM:
            return status.HTTP_502_BAD_GATEWAY
        if exc.kind == BackendErrorKind.UNREACHABLE:
            return status.HTTP_504_GATEWAY_TIMEOUT
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    relay_config: RelayConfig = Depends(build_request_config),
    relay_service: RelayService = Depends(get_relay_service),
):
    """
    Upload a file to the blob backend.

    Parameters:
        - file: File to upload (multipart/form-data field 'file')

    Returns:
        - status: 1
        - url: Public URL of the stored file

    Raises:
        - 400: No file in the request
        - 502: Backend rejected the upload
        - 504: Backend unreachable
        - 500: Any other failure
    """
    try:
        data = await file.read() if file is not None else None
        record = await relay_service.upload_file(
            relay_config,
            file_name=file.filename if file is not None else None,
            data=data,
            content_type=file.content_type if file is not None else None,
        )
    except Exception as e:
        status_code = upload_status_for(e)
        log = logger.warning if status_code < 500 else logger.error
        log(f"Upload failed status={status_code}: {e}", exc_info=status_code >= 500)
        return JSONResponse(
            status_code=status_code,
            content=UploadFailureResponse(error=str(e)).model_dump(),
        )

    return UploadResponse(url=record.url)


@router.post("/delete", response_model=DeleteResponse)
async def delete_file(
    request: Request,
    relay_config: RelayConfig = Depends(build_request_config),
    relay_service: RelayService = Depends(get_relay_service),
):
    """
    Delete a file by its public URL.

    Parameters:
        - url: Public URL (JSON body)

    Returns:
        - success: true once the index entry is gone
        - message: Whether the backend copy was also removed

    Raises:
        - 400: Missing or invalid url
        - 404: Unknown url
        - 500: Failure before the index entry was removed
    """
    try:
        payload = DeleteRequest.model_validate(await read_json_object(request))
        result = await relay_service.delete_file(relay_config, payload.url)
    except ValidationError as e:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=ErrorResponse(error=str(e)).model_dump())
    except NotFoundError as e:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=ErrorResponse(error=str(e)).model_dump())
    except Exception as e:
        logger.error(f"Delete failed: {e}", exc_info=True)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=ErrorResponse(error=str(e)).model_dump())

    return DeleteResponse(message=result.message)


@router.post("/search", response_model=ListFilesResponse)
async def search_files(
    request: Request,
    relay_service: RelayService = Depends(get_relay_service),
):
    """
    Search files by name (case-insensitive substring).

    Parameters:
        - query: Free-text query (JSON body), empty matches everything

    Returns:
        - files: Matching records, newest first
    """
    try:
        payload = SearchRequest.model_validate(await read_json_object(request))
        files = relay_service.search_files(payload.query)
    except Exception as e:
        logger.error(f"Search failed: {e}", exc_info=True)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=ErrorResponse(error=str(e)).model_dump())

    return ListFilesResponse(files=[FileMetadataResponse.from_record(f) for f in files])


@router.get("/admin", response_model=ListFilesResponse)
async def list_files(relay_service: RelayService = Depends(get_relay_service)):
    """
    List every stored file, newest first.
    """
    files = relay_service.list_files()
    return ListFilesResponse(files=[FileMetadataResponse.from_record(f) for f in files])
