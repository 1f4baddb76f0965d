"""Web vitals telemetry endpoints - POST /performance/web-vitals, GET /performance/metrics."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from backend.app.config import Settings, get_settings
from backend.app.models.vitals import MetricsSummary, WebVital
from backend.app.services.vitals import record_web_vital, summarize_metrics

router = APIRouter(prefix="/performance", tags=["performance"])


@router.post("/web-vitals")
async def report_web_vital(
    vital: WebVital,
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict[str, bool]:
    """Store a metric reported by the browser.

    Raises:
        HTTPException: 400 if the metric has no name
    """
    if not vital.name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid metrics data")
    record_web_vital(vital, settings.metrics_dir)
    return {"success": True}


@router.get("/metrics", response_model=MetricsSummary)
async def performance_metrics(
    settings: Annotated[Settings, Depends(get_settings)],
    start: Annotated[date | None, Query()] = None,
    end: Annotated[date | None, Query()] = None,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
) -> MetricsSummary:
    """Recorded metrics with averages and budget pass rates."""
    return summarize_metrics(settings.metrics_dir, start=start, end=end, limit=limit)
