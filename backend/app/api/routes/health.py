"""Health check endpoints.

- /health: liveness, always 200
- /healthz: database connectivity plus which optional integrations are configured
"""

import logging
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from backend.app.config import Settings, get_settings
from backend.app.db.engine import get_async_engine, ping

logger = logging.getLogger(__name__)

router = APIRouter()

# Integration name -> environment variable that enables it
INTEGRATIONS = {
    "payments": "STRIPE_SECRET_KEY",
    "drafting": "OPENAI_API_KEY",
    "email": "SENDGRID_API_KEY",
    "sessions": "SESSION_SECRET",
}


async def check_db(settings: Settings) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    if not settings.database_url:
        return (False, "not_configured")
    try:
        await ping(get_async_engine())
        return (True, "ok")
    except Exception as e:
        logger.warning(f"Database health check failed: {type(e).__name__}")
        return (False, f"error: {type(e).__name__}")


def integration_status(settings: Settings) -> dict[str, str]:
    """Report each optional integration as configured or missing."""
    missing = set(settings.missing_integrations())
    statuses = {
        name: "missing" if env_var in missing else "configured"
        for name, env_var in INTEGRATIONS.items()
    }
    if statuses["drafting"] == "missing" and settings.llm_stub_mode:
        statuses["drafting"] = "stub"
    return statuses


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | JSONResponse:
    """Health check endpoint.

    Returns:
        200 with component status if the database is reachable
        503 if it is not
    """
    settings = get_settings()
    db_ok, db_status = await check_db(settings)

    response_body = {
        "status": "ok" if db_ok else "degraded",
        "components": {"db": db_status},
        "integrations": integration_status(settings),
    }

    if not db_ok:
        return JSONResponse(content=response_body, status_code=503)
    return response_body
