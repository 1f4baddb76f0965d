"""FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from backend.app.api.routes.destinations import router as destinations_router
from backend.app.api.routes.documents import router as documents_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.payments import router as payments_router
from backend.app.api.routes.performance import router as performance_router
from backend.app.config import get_settings, warn_missing_integrations
from backend.app.errors import register_exception_handlers
from backend.app.utils.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    warn_missing_integrations(get_settings())
    yield


settings = get_settings()

app = FastAPI(title="Travel Guides API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ui_origin],
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(destinations_router)
app.include_router(documents_router)
app.include_router(payments_router)
app.include_router(performance_router)

# Cached PDFs are also reachable as static files
app.mount(
    "/downloads",
    StaticFiles(directory=settings.downloads_dir, check_dir=False),
    name="downloads",
)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Travel Guides API", "version": "0.1.0"}
