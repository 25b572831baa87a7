"""
Citro API - FastAPI Application

Serves the voice assistant endpoint used by the fest website.

Usage:
    uvicorn citro.api.main:app --host 127.0.0.1 --port 8080 --reload

    Or run directly:
    python -m citro.api.main
"""

import os
from contextlib import asynccontextmanager

# Load .env file before anything else
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from citro.api.models import HealthCheck
from citro.api.routes import api_router
from citro.logging_config import get_logger, setup_logging
from citro.services import Services, create_default_services
from citro.services.database import get_db_connection, get_db_path, init_db

# Configure structured logging
setup_logging()
logger = get_logger(__name__)

DEFAULT_ALLOWED_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("citro_api_starting")

    if getattr(app.state, "services", None) is None:
        init_db()
        app.state.services = create_default_services()
        logger.info("database_initialized", db_path=str(get_db_path()))

    yield

    logger.info("citro_api_stopped")


def create_app(services: Services | None = None) -> FastAPI:
    """Build the FastAPI app. Pass ``services`` to use other collaborators."""
    app = FastAPI(
        title="Citro API",
        description="Voice assistant for the Citro college fest",
        version="0.1.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.services = services

    allowed_origins = os.environ.get("CITRO_ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS).split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in allowed_origins if origin.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.get("/api/health", response_model=HealthCheck, tags=["health"])
    async def health_check():
        """Check system health status."""
        checks = {}

        # Injected collaborators are checked by whoever supplied them
        if services is None:
            try:
                conn = get_db_connection()
                conn.execute("SELECT 1")
                conn.close()
                checks["database"] = "healthy"
            except Exception as e:
                logger.error("database_health_check_failed", error=str(e))
                checks["database"] = "unhealthy"

        overall = "healthy" if all(v == "healthy" for v in checks.values()) else "degraded"
        return HealthCheck(status=overall, services=checks)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "citro.api.main:app",
        host=os.environ.get("CITRO_HOST", "127.0.0.1"),
        port=int(os.environ.get("CITRO_PORT", "8080")),
    )
