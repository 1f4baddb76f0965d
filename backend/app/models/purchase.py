"""Purchase models - checkout records and the status polling contract."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

from backend.app.models.common import ApiModel, Money


class PurchaseStatus(str, Enum):
    """Lifecycle of a purchase from payment to delivered document."""

    pending = "pending"
    processing = "processing"
    generating = "generating"
    completed = "completed"
    failed = "failed"


# Statuses after which a purchase never changes again
TERMINAL_STATUSES = frozenset({PurchaseStatus.completed, PurchaseStatus.failed})

# Statuses during which fulfillment is queued or running
IN_FLIGHT_STATUSES = frozenset({PurchaseStatus.processing, PurchaseStatus.generating})


class Purchase(BaseModel):
    """Stored purchase record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    product_type: str
    destination_id: int | None = None
    product_id: str | None = None
    amount_cents: int
    currency: str = "usd"
    payment_intent_id: str
    status: PurchaseStatus = PurchaseStatus.pending
    progress: int = 0
    pdf_url: str | None = None
    job_id: str | None = None
    email_sent: bool = False
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None


class NewPurchase(BaseModel):
    """Fields needed to insert a purchase."""

    email: str
    product_type: str
    amount_cents: int
    payment_intent_id: str
    currency: str = "usd"
    destination_id: int | None = None
    product_id: str | None = None
    status: PurchaseStatus = PurchaseStatus.pending


class PurchaseSummary(ApiModel):
    """Purchase fields echoed back to the polling client."""

    email: str
    product_type: str
    destination_id: int | None = None
    amount: Money
    created_at: datetime


class StatusReport(ApiModel):
    """Response for GET /payments/status/{session_id}."""

    success: bool = True
    status: str
    stage: str
    message: str
    progress: int
    download_url: str | None = None
    job_id: str | None = None
    purchase: PurchaseSummary | None = None
