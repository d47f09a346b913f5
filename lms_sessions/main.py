"""
FastAPI application factory.

Assembles the app, registers all routers and error handlers, and wires
up lifecycle events.  Database schema is managed by Alembic — NOT
create_all.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from lms_sessions.controllers.account_controller import router as account_router
from lms_sessions.controllers.admin_controller import router as admin_router
from lms_sessions.controllers.auth_controller import router as auth_router
from lms_sessions.core.config import settings
from lms_sessions.core.database import engine
from lms_sessions.models import Base  # noqa: F401  registers every model
from lms_sessions.services.session_transitions import InvalidSessionTransition

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ── Register routers ─────────────────────────────────────────────
    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(account_router)

    # ── Error handlers ───────────────────────────────────────────────
    # The dashboard reads a single `message` string from error bodies.
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(InvalidSessionTransition)
    async def transition_error(request: Request, exc: InvalidSessionTransition) -> JSONResponse:
        logger.info("Rejected status change on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"message": str(exc)})

    # ── Shutdown ─────────────────────────────────────────────────────
    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await engine.dispose()
        logger.info("Database engine disposed.")

    # ── Health check ─────────────────────────────────────────────────
    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
