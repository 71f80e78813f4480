"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from club_scheduler.api.models import LoginRequest
from club_scheduler.api.sessions import router as sessions_router
from club_scheduler.app_logging import configure_logging
from club_scheduler.containers import AppContainer
from club_scheduler.domain.errors import (
    RepositoryError,
    RepositoryUnavailable,
    SessionNotFound,
    TruncationRisk,
    ValidationFailure,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(sessions_router)

    @app.exception_handler(RepositoryUnavailable)
    async def repository_unavailable(
        request: Request, exc: RepositoryUnavailable
    ) -> JSONResponse:
        logger.error("Record store unreachable: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "detail": (
                    "Could not reach the match list. "
                    "Please check your connection and try again."
                )
            },
        )

    @app.exception_handler(RepositoryError)
    async def repository_error(request: Request, exc: RepositoryError) -> JSONResponse:
        logger.error("Record store rejected %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={
                "detail": "The match list rejected the change. Please try again.",
                "store_status": exc.status,
            },
        )

    @app.exception_handler(TruncationRisk)
    async def truncation_risk(request: Request, exc: TruncationRisk) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "detail": str(exc),
                "encoded_length": exc.encoded_length,
                "limit": exc.limit,
                "confirm_required": True,
            },
        )

    @app.exception_handler(ValidationFailure)
    async def validation_failure(
        request: Request, exc: ValidationFailure
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc)},
        )

    @app.exception_handler(SessionNotFound)
    async def session_not_found(request: Request, exc: SessionNotFound) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/login")
    async def login(payload: LoginRequest, request: Request) -> dict[str, str]:
        """Check the shared passphrase."""
        state_container: AppContainer = request.app.state.container
        if not state_container.access_gate.allows(payload.passphrase):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect password"
            )
        return {"status": "ok"}

    return app
