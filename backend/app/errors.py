"""Application error taxonomy and FastAPI exception handlers."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors surfaced to HTTP clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(AppError):
    """Requested record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class UnknownProductError(AppError):
    """Product type has no configured price."""

    status_code = status.HTTP_400_BAD_REQUEST


class DraftingError(AppError):
    """LLM drafting failed (credential, network, rate limit or invalid output)."""


class PaymentProviderError(AppError):
    """Payment provider rejected or failed a request."""


class PaymentsNotConfiguredError(PaymentProviderError):
    """No payment provider secret key is configured."""

    def __init__(self, message: str = "Payment processing is not configured") -> None:
        super().__init__(message)


class WebhookSignatureError(AppError):
    """Webhook payload signature is missing, stale or invalid."""

    status_code = status.HTTP_400_BAD_REQUEST


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError as a JSON error body."""
    if exc.status_code >= 500:
        logger.error(
            f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}"
        )
    else:
        logger.info(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the AppError handler to an application."""
    app.add_exception_handler(AppError, app_error_handler)
