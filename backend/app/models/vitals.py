"""Web vitals telemetry models."""

from typing import Any

from pydantic import ConfigDict

from backend.app.models.common import ApiModel

# Core web vitals tracked in summaries
VITAL_NAMES = ("CLS", "FID", "FCP", "LCP", "TTFB")

# Good-experience thresholds (CLS unitless, others in milliseconds)
VITAL_BUDGETS: dict[str, float] = {
    "LCP": 2500,
    "FID": 100,
    "CLS": 0.1,
    "FCP": 1800,
    "TTFB": 800,
}


class WebVital(ApiModel):
    """Single metric reported by a browser; unknown fields are kept."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    value: float | None = None
    rating: str | None = None
    delta: float | None = None
    id: str | None = None
    navigation_type: str | None = None
    url: str | None = None
    timestamp: str | None = None


class MetricsSummary(ApiModel):
    """Response for GET /performance/metrics."""

    total: int
    averages: dict[str, float]
    pass_rates: dict[str, float]
    budgets: dict[str, float]
    metrics: list[dict[str, Any]]
