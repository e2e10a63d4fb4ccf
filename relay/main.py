"""Entry point for the relay service."""

import time
import uuid

import uvicorn
from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import RedirectResponse

from common.logging_config import setup_logging
from relay.auth import AuthGate, get_auth_gate
from relay.config import RELAY_HOST, RELAY_PORT, RelayConfig, build_request_config
from relay.database import init_database
from relay.dependencies import close_blob_backend
from relay.exceptions import AuthRequired
from relay.routes.auth_routes import router as auth_router
from relay.routes.file_routes import router as file_router
from relay.routes.serve_routes import router as serve_router

logger = setup_logging('relay')

app = FastAPI(
    title="Telegram File Relay",
    description="File hosting relay using Telegram as blob storage",
    version="1.0.0"
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Initialize database on application startup.
    """
    logger.info("Relay service starting up...")
    init_database()
    logger.info("Database initialized")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Relay service shutting down...")
    await close_blob_backend()


@app.exception_handler(AuthRequired)
async def auth_required_handler(request: Request, exc: AuthRequired):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.info(f"Redirecting to login [request_id={request_id}] path={request.url.path}")
    return RedirectResponse(url="/login", status_code=status.HTTP_302_FOUND)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for Docker healthcheck.
    """
    return {"status": "healthy", "service": "relay"}


@app.get("/")
async def root(
    request: Request,
    relay_config: RelayConfig = Depends(build_request_config),
    gate: AuthGate = Depends(get_auth_gate),
):
    """
    Landing endpoint; sends unauthenticated visitors to the login page.
    """
    if not gate.is_authorized(request, relay_config.enable_auth):
        return RedirectResponse(url="/login", status_code=status.HTTP_302_FOUND)
    return {"message": "Telegram File Relay API", "status": "running", "origin": relay_config.origin}


app.include_router(auth_router)
app.include_router(file_router)
# catch-all read path, must stay last
app.include_router(serve_router)


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "relay.main:app",
        host=RELAY_HOST,
        port=RELAY_PORT,
    )


if __name__ == "__main__":
    main()
