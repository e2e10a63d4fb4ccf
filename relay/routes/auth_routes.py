"""Authentication API routes."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse

from common.logging_config import get_logger
from relay.auth import AuthGate, get_auth_gate
from relay.schemas.auth import LoginRequest

logger = get_logger(__name__)

router = APIRouter(tags=["Authentication"])


@router.get("/login")
async def login_page():
    """
    Describe how to log in; page rendering is left to a front end.
    """
    return PlainTextResponse("POST /login with JSON {\"username\": ..., \"password\": ...}")


@router.post("/login")
async def login(request: LoginRequest, gate: AuthGate = Depends(get_auth_gate)):
    """
    Authenticate and set the session cookie.

    Parameters:
        - username: Configured username
        - password: Configured password

    Returns:
        - 200 'OK' with Set-Cookie on success

    Raises:
        - 401: Invalid credentials
    """
    if not gate.check_credentials(request.username, request.password):
        logger.warning(f"Login failed for username '{request.username}'")
        return PlainTextResponse("Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)

    token, expiration = gate.issue_token()
    logger.info(f"User logged in: {request.username}")
    return PlainTextResponse(
        "OK",
        headers={"Set-Cookie": gate.session_cookie(token, expiration)},
    )
