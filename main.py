"""
main.py
-------
FastAPI application factory and entry point.

Application lifecycle:
  1. App is created by create_application().
  2. lifespan context manager runs on startup / shutdown.
  3. Routers are registered.
  4. Exception handlers turn domain errors into {"detail": ...} responses
     and normalise unexpected errors.

Run with:
    uvicorn main:app --reload              # development
    uvicorn main:app --workers 4           # production (no --reload)
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lexcorp.api.routes import agreements, ai, auth, invites, organizations, projects, templates, vendors
from lexcorp.core.config import settings
from lexcorp.core.exceptions import LexCorpError
from lexcorp.core.logging import configure_logging, get_logger, start_request_context
from lexcorp.db.session import engine, init_models
from lexcorp.services.mlflow_service import setup_mlflow

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Startup:
      - Configure structured logging
      - Create tables when DB_AUTO_CREATE is set (local development)
      - Initialise MLflow tracking when a real LLM is configured

    Shutdown:
      - Dispose the async engine (graceful connection pool drain)
    """
    configure_logging()
    logger.info(
        "Starting up",
        app=settings.APP_NAME,
        env=settings.APP_ENV,
        debug=settings.DEBUG,
    )
    if settings.DB_AUTO_CREATE:
        await init_models()
        logger.info("Database tables created")
    if settings.OPENAI_API_KEY:
        setup_mlflow()
    yield
    logger.info("Shutting down, disposing DB engine")
    await engine.dispose()


def create_application() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Multi-tenant contract lifecycle management backend with "
            "organization / branch scoped access, invitations and AI drafting."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Request log context ───────────────────────────────────────────────────

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next):
        start_request_context(path=request.url.path, method=request.method)
        return await call_next(request)

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(organizations.router)
    app.include_router(invites.router)
    app.include_router(agreements.router)
    app.include_router(templates.router)
    app.include_router(vendors.router)
    app.include_router(projects.router)
    app.include_router(ai.router)

    # ── Exception Handlers ────────────────────────────────────────────────────

    @app.exception_handler(LexCorpError)
    async def domain_exception_handler(request: Request, exc: LexCorpError) -> JSONResponse:
        logger.info(
            "Request rejected",
            path=request.url.path,
            error=type(exc).__name__,
            status_code=exc.status_code,
        )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    # ── Health Check ──────────────────────────────────────────────────────────

    @app.get("/health", tags=["Health"], summary="Service health check")
    async def health() -> dict:
        return {"status": "ok", "app": settings.APP_NAME, "env": settings.APP_ENV}

    return app


app = create_application()
