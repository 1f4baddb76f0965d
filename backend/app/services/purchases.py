"""Purchase lifecycle: confirmation, background fulfillment and status reports."""

import logging
import uuid
from decimal import Decimal

from backend.app.adapters.sendgrid import build_delivery_email, send_email
from backend.app.config import Settings
from backend.app.db.repositories import PurchaseRepository, RepositoryProvider
from backend.app.errors import AppError, NotFoundError
from backend.app.models.purchase import (
    IN_FLIGHT_STATUSES,
    TERMINAL_STATUSES,
    Purchase,
    PurchaseStatus,
    PurchaseSummary,
    StatusReport,
)
from backend.app.services.generation import (
    DocumentGenerator,
    GeneratedDocument,
    ProgressCallback,
    build_document_generator,
)
from backend.app.utils.logging import StructuredPurchaseLogger
from backend.app.utils.metrics import PrometheusDocumentMetrics

logger = logging.getLogger(__name__)

purchase_logger = StructuredPurchaseLogger()
metrics = PrometheusDocumentMetrics()

# Fixed stage, message and progress for every status except generating
STATUS_STAGES: dict[PurchaseStatus, tuple[str, str, int]] = {
    PurchaseStatus.pending: ("payment", "Waiting for payment confirmation", 10),
    PurchaseStatus.processing: ("preparation", "Preparing your premium itinerary", 30),
    PurchaseStatus.completed: ("completed", "Your itinerary is ready to download", 100),
    PurchaseStatus.failed: ("failed", "We encountered a problem generating your itinerary", 0),
}

# Products fulfilled with a generated document
DOCUMENT_PRODUCTS = frozenset({"premium_itinerary", "snowbird_toolkit"})


def generating_message(progress: int) -> str:
    """Status message for a purchase whose document is being generated."""
    if progress < 30:
        return "Preparing your itinerary"
    if progress < 60:
        return "Creating your travel experience"
    if progress < 90:
        return "Adding personalized recommendations"
    return "Finalizing your itinerary"


def download_path(payment_intent_id: str) -> str:
    return f"/payments/download/{payment_intent_id}"


def build_status_report(purchase: Purchase) -> StatusReport:
    """Map a stored purchase to the polling response.

    Args:
        purchase: Stored purchase

    Returns:
        StatusReport; completed purchases carry a download URL
    """
    summary = PurchaseSummary(
        email=purchase.email,
        product_type=purchase.product_type,
        destination_id=purchase.destination_id,
        amount=Decimal(purchase.amount_cents) / 100,
        created_at=purchase.created_at,
    )

    status = PurchaseStatus(purchase.status)
    if status == PurchaseStatus.generating:
        stage, progress = "generation", purchase.progress
        message = generating_message(progress)
    elif status in STATUS_STAGES:
        stage, message, progress = STATUS_STAGES[status]
    else:
        stage, message, progress = "unknown", "Checking your order status", 0

    download_url = None
    if status == PurchaseStatus.completed:
        download_url = purchase.pdf_url or download_path(purchase.payment_intent_id)

    return StatusReport(
        status=status.value,
        stage=stage,
        message=message,
        progress=progress,
        download_url=download_url,
        job_id=purchase.job_id,
        purchase=summary,
    )


async def transition(
    purchases: PurchaseRepository,
    payment_intent_id: str,
    status: PurchaseStatus,
    progress: int,
    **fields: str | bool | None,
) -> Purchase | None:
    """Move a purchase to a new status, logging and counting the transition."""
    purchase = await purchases.update(
        payment_intent_id, status=status, progress=progress, **fields
    )
    if purchase is not None:
        metrics.inc_transition(status.value)
        purchase_logger.log_transition(
            payment_intent_id,
            status.value,
            progress,
            error_reason=fields.get("error_message") or None,
        )
    return purchase


async def mark_paid(purchases: PurchaseRepository, payment_intent_id: str) -> bool:
    """Mark a paid purchase as processing.

    Returns:
        True if fulfillment should be scheduled (first confirmation only)
    """
    purchase = await purchases.get_by_payment_intent(payment_intent_id)
    if purchase is None:
        logger.warning(f"Payment confirmed for unknown purchase {payment_intent_id}")
        return False
    if purchase.status in TERMINAL_STATUSES or purchase.status in IN_FLIGHT_STATUSES:
        logger.info(f"Purchase {payment_intent_id} already {purchase.status.value}, skipping")
        return False
    await transition(purchases, payment_intent_id, PurchaseStatus.processing, 30)
    return True


async def mark_failed(
    purchases: PurchaseRepository, payment_intent_id: str, message: str
) -> Purchase | None:
    """Mark a purchase failed unless it already finished."""
    purchase = await purchases.get_by_payment_intent(payment_intent_id)
    if purchase is None or purchase.status in TERMINAL_STATUSES:
        return purchase
    return await transition(
        purchases, payment_intent_id, PurchaseStatus.failed, 0, error_message=message
    )


async def generate_for_purchase(
    purchase: Purchase,
    generator: DocumentGenerator,
    *,
    progress: ProgressCallback | None = None,
) -> GeneratedDocument | None:
    """Produce the document a purchase pays for.

    Returns:
        GeneratedDocument, or None for products without a document

    Raises:
        NotFoundError: If a document product has no destination
    """
    if purchase.product_type not in DOCUMENT_PRODUCTS:
        return None
    if purchase.destination_id is None:
        raise NotFoundError("No destination selected for this purchase")
    if purchase.product_type == "snowbird_toolkit":
        return await generator.snowbird_guide(purchase.destination_id)
    return await generator.premium_itinerary(purchase.destination_id, progress=progress)


async def fulfill_purchase(
    payment_intent_id: str, provider: RepositoryProvider, settings: Settings
) -> None:
    """Background task: generate the purchased document and email the buyer.

    Progress runs processing(30) -> generating(50/70/90) -> completed(100).
    Any error marks the purchase failed with the error message.

    Args:
        payment_intent_id: Purchase to fulfill
        provider: Opens this task's own repository session
        settings: Application settings
    """
    async with provider.session() as repos:
        purchase = await repos.purchases.get_by_payment_intent(payment_intent_id)
        if purchase is None:
            logger.warning(f"Fulfillment requested for unknown purchase {payment_intent_id}")
            return
        if purchase.status in TERMINAL_STATUSES:
            return

        job_id = f"job_{uuid.uuid4().hex[:12]}"

        async def report(progress: int) -> None:
            await transition(
                repos.purchases,
                payment_intent_id,
                PurchaseStatus.generating,
                progress,
                job_id=job_id,
            )

        try:
            generator = build_document_generator(repos.catalog, settings)
            await report(50)
            document = await generate_for_purchase(purchase, generator, progress=report)
            pdf_url = document.public_url if document else None
            purchase = await transition(
                repos.purchases,
                payment_intent_id,
                PurchaseStatus.completed,
                100,
                pdf_url=pdf_url,
            )
        except Exception as e:
            message = e.message if isinstance(e, AppError) else str(e)
            logger.error(f"Fulfillment of {payment_intent_id} failed: {message}")
            await transition(
                repos.purchases,
                payment_intent_id,
                PurchaseStatus.failed,
                0,
                error_message=message or type(e).__name__,
            )
            return

        if purchase is not None:
            sent = await send_delivery_email(purchase, settings)
            if sent:
                await repos.purchases.update(payment_intent_id, email_sent=True)


async def send_delivery_email(purchase: Purchase, settings: Settings) -> bool:
    """Email the buyer a link to their download (best effort)."""
    link = f"{settings.public_base_url.rstrip('/')}{download_path(purchase.payment_intent_id)}"
    subject, body = build_delivery_email(
        product_type=purchase.product_type,
        amount=f"{purchase.amount_cents / 100:.2f}",
        order_number=purchase.payment_intent_id,
        download_url=link if purchase.product_type in DOCUMENT_PRODUCTS else None,
        company_name=settings.company_name,
    )
    return await send_email(purchase.email, subject, body, settings)
