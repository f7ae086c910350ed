"""
CVBooster API - Main Application Entry Point

This file configures and initializes the FastAPI application, including:
- Setting up the application lifecycle (startup/shutdown events).
- Configuring CORS and request logging middleware.
- Including the API routers.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.v1 import router as v1_router
from cvbooster_core import __version__
from cvbooster_core.server import CVBoosterServer
from cvbooster_core.utils import read_config, setup_logging


def create_app(server: Optional[CVBoosterServer] = None, configure_logging: bool = True) -> FastAPI:
    """Build the FastAPI application around a CVBooster server instance."""
    server = server or CVBoosterServer(read_config())
    config = server.config
    slow_request_ms = config.get("logging", {}).get("slow_request_ms", 2000)

    # --- Application Lifecycle ---
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if configure_logging:
            setup_logging(config)
        logger.info("--- Starting CVBooster API ---")
        await server.initialize()
        logger.info("Application startup tasks complete.")

        yield

        logger.info("--- Shutting Down CVBooster API ---")
        await server.close()

    app = FastAPI(
        title="CVBooster API",
        description="API for CV and cover letter management, ATS export and the affiliate program.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.server = server

    # --- Middleware Configuration ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get("server", {}).get("cors_origins", ["*"]),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        if request.url.path.startswith("/api"):
            logger.info(
                f"{request.method} {request.url.path} {response.status_code} in {duration_ms:.0f}ms"
            )
            if duration_ms > slow_request_ms:
                logger.warning(f"Slow request: {request.method} {request.url.path} took {duration_ms:.0f}ms")
        return response

    # --- API Router Inclusion ---
    # All endpoints are available under /api (e.g., /api/cvs).
    app.include_router(v1_router, prefix="/api")

    # --- Health Check Endpoint ---
    @app.get("/health", tags=["Monitoring"])
    async def health_check():
        try:
            details = await server.health_check()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            details = {"status": "degraded", "database": "unavailable"}
        return {"status": "ok", "message": "API is running.", "data": details}

    return app


app = create_app()


def main() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    settings = app.state.server.config.get("server", {})
    # Example: uvicorn app.main:app --host 0.0.0.0 --port 5000 --reload
    uvicorn.run(app, host=settings.get("host", "0.0.0.0"), port=settings.get("port", 5000))


if __name__ == "__main__":
    main()
