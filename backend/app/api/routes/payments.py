"""Checkout and purchase endpoints - pricing, payment intents, webhook, status polling."""

import json
import logging
import re
from decimal import Decimal
from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from backend.app.adapters.stripe import get_stripe_client, verify_webhook_signature
from backend.app.api.deps import get_document_generator, get_repositories, get_repository_provider
from backend.app.api.routes.documents import pdf_response
from backend.app.config import Settings, get_settings
from backend.app.db.repositories import Repositories, RepositoryProvider
from backend.app.errors import NotFoundError, PaymentsNotConfiguredError
from backend.app.models.common import ApiModel
from backend.app.models.pricing import PriceQuote, PricingConfig
from backend.app.models.purchase import (
    IN_FLIGHT_STATUSES,
    NewPurchase,
    PurchaseStatus,
    StatusReport,
)
from backend.app.services.generation import DocumentGenerator
from backend.app.services.pricing import CENT, quote, resolve_pricing
from backend.app.services.purchases import (
    build_status_report,
    fulfill_purchase,
    generate_for_purchase,
    mark_failed,
    mark_paid,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class QuoteRequest(ApiModel):
    """Request body for POST /payments/quote."""

    product_type: str = "premium_itinerary"
    promo_code: str | None = None


class CreatePaymentIntentRequest(ApiModel):
    """Request body for POST /payments/create-payment-intent."""

    amount: Decimal | None = None
    email: str | None = None
    product_type: str = "premium_itinerary"
    destination_id: int | None = None
    product_id: str | None = None
    promo_code: str | None = None


class CreatePaymentIntentResponse(ApiModel):
    """Response for POST /payments/create-payment-intent."""

    client_secret: str
    payment_intent_id: str


class RecordPaymentRequest(ApiModel):
    """Request body for POST /payments/record-payment."""

    payment_intent_id: str


@router.get("/pricing", response_model=PricingConfig)
async def get_pricing(settings: Annotated[Settings, Depends(get_settings)]) -> PricingConfig:
    """Product prices and the active promotion."""
    return resolve_pricing(settings)


@router.post("/quote", response_model=PriceQuote)
async def quote_price(
    request: QuoteRequest,
    settings: Annotated[Settings, Depends(get_settings)],
) -> PriceQuote:
    """Price a product, applying a promo code if it matches."""
    return quote(settings, request.product_type, request.promo_code)


@router.post("/create-payment-intent", response_model=CreatePaymentIntentResponse)
async def create_payment_intent(
    request: CreatePaymentIntentRequest,
    repos: Annotated[Repositories, Depends(get_repositories)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> CreatePaymentIntentResponse:
    """Create a payment intent for a server-quoted price and record a pending purchase.

    Args:
        request: Checkout details entered by the buyer
        repos: Repositories for this request
        settings: Application settings

    Returns:
        Client secret for the payment form and the payment intent ID

    Raises:
        HTTPException: 400 for a missing/invalid email or a mismatched amount
        UnknownProductError: If the product has no price (400)
        PaymentProviderError: If payments are not configured or Stripe fails (500)
    """
    email = (request.email or "").strip()
    if not email or not EMAIL_RE.match(email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Valid email required")

    price = quote(settings, request.product_type, request.promo_code)
    if request.amount is None or request.amount.quantize(CENT) != price.amount:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Amount does not match the current price of {price.amount}",
        )

    stripe = get_stripe_client(settings)
    metadata = {
        "email": email,
        "product_type": request.product_type,
        "destination_id": str(request.destination_id) if request.destination_id else None,
        "product_id": request.product_id,
        "promo_code": settings.promo_code if price.promo_applied else None,
    }
    intent = await stripe.create_payment_intent(
        amount_cents=price.amount_cents,
        currency=price.currency,
        receipt_email=email,
        metadata={key: value for key, value in metadata.items() if value},
    )
    if not intent.client_secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Payment provider returned no client secret",
        )

    await repos.purchases.create(
        NewPurchase(
            email=email,
            product_type=request.product_type,
            amount_cents=price.amount_cents,
            currency=price.currency,
            payment_intent_id=intent.id,
            destination_id=request.destination_id,
            product_id=request.product_id,
        )
    )
    logger.info(f"Created payment intent {intent.id} for {request.product_type}")
    return CreatePaymentIntentResponse(
        client_secret=intent.client_secret, payment_intent_id=intent.id
    )


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    repos: Annotated[Repositories, Depends(get_repositories)],
    provider: Annotated[RepositoryProvider, Depends(get_repository_provider)],
    settings: Annotated[Settings, Depends(get_settings)],
    stripe_signature: Annotated[str | None, Header()] = None,
) -> dict[str, bool]:
    """Handle Stripe payment intent events.

    payment_intent.succeeded schedules fulfillment; payment_intent.payment_failed
    marks the purchase failed. Other events are acknowledged and ignored.

    Raises:
        WebhookSignatureError: If the signature does not verify (400)
        PaymentsNotConfiguredError: If no webhook secret is set in production
    """
    payload = await request.body()
    secret = settings.stripe_webhook_secret
    if secret and secret.get_secret_value():
        verify_webhook_signature(
            payload, stripe_signature, secret.get_secret_value(), settings.webhook_tolerance_sec
        )
    elif settings.is_production:
        raise PaymentsNotConfiguredError("Webhook secret is not configured")
    else:
        logger.warning("STRIPE_WEBHOOK_SECRET not set, accepting unverified webhook")

    try:
        event: dict[str, Any] = json.loads(payload)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid webhook payload"
        ) from None

    event_type = event.get("type")
    intent = (event.get("data") or {}).get("object") or {}
    payment_intent_id = intent.get("id")

    if event_type == "payment_intent.succeeded" and payment_intent_id:
        if await mark_paid(repos.purchases, payment_intent_id):
            background_tasks.add_task(fulfill_purchase, payment_intent_id, provider, settings)
    elif event_type == "payment_intent.payment_failed" and payment_intent_id:
        error = intent.get("last_payment_error") or {}
        message = error.get("message") or "Payment failed"
        await mark_failed(repos.purchases, payment_intent_id, message)
    else:
        logger.info(f"Ignoring webhook event {event_type}")

    return {"received": True}


@router.post("/record-payment", response_model=StatusReport)
async def record_payment(
    request: RecordPaymentRequest,
    background_tasks: BackgroundTasks,
    repos: Annotated[Repositories, Depends(get_repositories)],
    provider: Annotated[RepositoryProvider, Depends(get_repository_provider)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> StatusReport:
    """Confirm a payment from the client after Stripe reports success.

    Creates the purchase from intent metadata if the intent was made elsewhere,
    then schedules fulfillment unless it already started.

    Raises:
        HTTPException: 400 if the payment has not succeeded
    """
    stripe = get_stripe_client(settings)
    intent = await stripe.retrieve_payment_intent(request.payment_intent_id)
    if intent.status != "succeeded":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Payment has not succeeded (status: {intent.status})",
        )

    purchase = await repos.purchases.get_by_payment_intent(intent.id)
    if purchase is None:
        metadata = intent.metadata
        destination_id = metadata.get("destination_id", "")
        await repos.purchases.create(
            NewPurchase(
                email=intent.receipt_email or metadata.get("email", ""),
                product_type=metadata.get("product_type", "premium_itinerary"),
                amount_cents=intent.amount,
                currency=intent.currency,
                payment_intent_id=intent.id,
                destination_id=int(destination_id) if destination_id.isdigit() else None,
                product_id=metadata.get("product_id"),
            )
        )

    if await mark_paid(repos.purchases, intent.id):
        background_tasks.add_task(fulfill_purchase, intent.id, provider, settings)

    purchase = await repos.purchases.get_by_payment_intent(intent.id)
    if purchase is None:
        raise NotFoundError(f"Purchase {intent.id} not found")
    return build_status_report(purchase)


@router.get("/status/{session_id}", response_model=StatusReport)
async def purchase_status(
    session_id: str,
    repos: Annotated[Repositories, Depends(get_repositories)],
) -> StatusReport:
    """Poll the fulfillment status of a purchase.

    Raises:
        NotFoundError: If no purchase has this session ID
    """
    purchase = await repos.purchases.get_by_payment_intent(session_id)
    if purchase is None:
        raise NotFoundError("Purchase not found")
    return build_status_report(purchase)


@router.get("/download/{session_id}", response_model=None)
async def download_purchase(
    session_id: str,
    repos: Annotated[Repositories, Depends(get_repositories)],
    generator: Annotated[DocumentGenerator, Depends(get_document_generator)],
) -> Response:
    """Download the document a purchase paid for.

    Returns:
        202 while the document is being prepared, the PDF once completed

    Raises:
        NotFoundError: If the purchase is unknown or has no document
        HTTPException: 500 if fulfillment failed
    """
    purchase = await repos.purchases.get_by_payment_intent(session_id)
    if purchase is None:
        raise NotFoundError("Purchase not found")

    if purchase.status == PurchaseStatus.pending or purchase.status in IN_FLIGHT_STATUSES:
        report = build_status_report(purchase)
        return JSONResponse(
            status_code=status.HTTP_202_ACCEPTED,
            content=report.model_dump(mode="json", by_alias=True, exclude={"purchase"}),
        )
    if purchase.status == PurchaseStatus.failed:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=purchase.error_message or "Document generation failed",
        )

    document = await generate_for_purchase(purchase, generator)
    if document is None:
        raise NotFoundError("This purchase has no downloadable document")
    return pdf_response(document)
