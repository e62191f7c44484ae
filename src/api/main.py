"""FastAPI application entry point."""

import os
import sys
import logging
import tomllib
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables from .env file
# Must be called before importing modules that read env vars (like the Mongo adapter)
load_dotenv()

# main.py is at src/api/main.py, so src is 2 levels up
_src_path = Path(__file__).parent.parent
sys.path.insert(0, str(_src_path))

from adapter.mongodb.connection import reset_client
from api.errors import register_error_handlers
from api.middleware.request_id import RequestIdMiddleware
from api.routes import health, users
from services.context import ServiceContext, build_context
from utils.logging import setup_structured_logging

setup_structured_logging()

logger = logging.getLogger(__name__)

_project_root = _src_path.parent
DISTRIBUTION_NAME = "user-progress-api"


def read_version() -> str:
    """Installed distribution version, or pyproject.toml when running from a checkout."""
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        with open(_project_root / "pyproject.toml", "rb") as f:
            return tomllib.load(f)["project"]["version"]


VERSION = read_version()

SERVICE_NAME = "Speak Greek Now User API"


def parse_cors_origins(value: str) -> tuple[list[str], bool]:
    """Return (origins, allow_credentials) for a CORS_ORIGINS value.

    Browsers don't support credentials with a wildcard origin.
    """
    if value.strip() == "*":
        return ["*"], False
    return [origin.strip() for origin in value.split(",") if origin.strip()], True


def create_app(context: ServiceContext | None = None) -> FastAPI:
    """Build the application.

    The ServiceContext is built once in the lifespan unless one is passed in.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "context", None) is None:
            app.state.context = build_context()
        yield
        # Shutdown: close the cached MongoDB client, if one was opened
        reset_client()

    app = FastAPI(
        title=SERVICE_NAME,
        description="User profile and lesson progress API",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.context = context

    cors_origins, allow_credentials = parse_cors_origins(os.getenv("CORS_ORIGINS", "*"))
    if not allow_credentials:
        logger.warning(
            "CORS configured with wildcard origin ('*'). "
            "For production, set CORS_ORIGINS to specific domains"
        )
    else:
        logger.info(f"CORS configured with specific origins: {cors_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "x-api-key", "x-request-id"],
    )
    app.add_middleware(RequestIdMiddleware)

    register_error_handlers(app)

    app.include_router(users.router)
    app.include_router(health.router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": SERVICE_NAME,
            "version": VERSION,
            "status": "running"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    # Application logs go through structured logging; uvicorn's access log would duplicate them
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        access_log=False
    )
