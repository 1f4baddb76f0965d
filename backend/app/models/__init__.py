"""Models package - re-exports for convenience."""

from backend.app.models.catalog import (
    Day,
    Destination,
    Experience,
    Itinerary,
    ItineraryBundle,
    SnowbirdProfile,
)
from backend.app.models.common import ApiModel, Money, payload_digest, slugify
from backend.app.models.drafting import DraftedDay, DraftedItinerary, GuideKind, GuideRequest
from backend.app.models.pricing import Polling, PriceQuote, PricingConfig, ProductPrice, Promotion
from backend.app.models.purchase import (
    IN_FLIGHT_STATUSES,
    TERMINAL_STATUSES,
    NewPurchase,
    Purchase,
    PurchaseStatus,
    PurchaseSummary,
    StatusReport,
)
from backend.app.models.vitals import VITAL_BUDGETS, VITAL_NAMES, MetricsSummary, WebVital

__all__ = [
    # Common
    "ApiModel",
    "Money",
    "payload_digest",
    "slugify",
    # Catalog
    "Destination",
    "SnowbirdProfile",
    "Itinerary",
    "Day",
    "Experience",
    "ItineraryBundle",
    # Drafting
    "DraftedDay",
    "DraftedItinerary",
    "GuideKind",
    "GuideRequest",
    # Pricing
    "PricingConfig",
    "Polling",
    "ProductPrice",
    "Promotion",
    "PriceQuote",
    # Purchases
    "Purchase",
    "NewPurchase",
    "PurchaseStatus",
    "PurchaseSummary",
    "StatusReport",
    "TERMINAL_STATUSES",
    "IN_FLIGHT_STATUSES",
    # Web vitals
    "WebVital",
    "MetricsSummary",
    "VITAL_NAMES",
    "VITAL_BUDGETS",
]
