"""API routes package."""

from relay.routes.auth_routes import router as auth_router
from relay.routes.file_routes import router as file_router
from relay.routes.serve_routes import router as serve_router

__all__ = ["auth_router", "file_router", "serve_router"]
