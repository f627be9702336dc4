"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RankingServiceError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class InvalidRequestError(RankingServiceError):
    def __init__(self, message: str = "Invalid request"):
        super().__init__(message, status_code=400)


class UpstreamUnavailableError(RankingServiceError):
    """Network or HTTP failure while calling the upstream API."""

    def __init__(self, message: str):
        super().__init__(message, status_code=502)


class AuthFailureError(UpstreamUnavailableError):
    """No bearer token could be obtained for an upstream call."""


class MalformedUpstreamShapeError(UpstreamUnavailableError):
    """Upstream answered, but without the fields we need."""


class PersistenceError(RankingServiceError):
    """A snapshot could not be read or written."""


class RefreshFailedError(RankingServiceError):
    def __init__(self, slot: str):
        super().__init__(f"Failed to refresh {slot}", status_code=500)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(RankingServiceError)
    async def handle_ranking_error(_request: Request, exc: RankingServiceError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
