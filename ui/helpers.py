"""Helper functions for UI - checkout flow and purchase status polling."""

import re
from collections.abc import Callable
from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

import httpx

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

TERMINAL_STATUSES = frozenset({"completed", "failed", "error"})

# Cosmetic checklist shown while a document is generated: (key, label, progress threshold)
CHECKLIST = [
    ("preparation", "Preparing your itinerary", 10),
    ("dayPlans", "Creating day-by-day plans", 30),
    ("localExperiences", "Adding local experiences", 50),
    ("recommendations", "Personalized recommendations", 70),
    ("formatting", "Formatting your PDF", 90),
]


class CheckoutStep(str, Enum):
    """Checkout page states."""

    collecting_email = "collecting_email"
    awaiting_client_secret = "awaiting_client_secret"
    rendering_payment_form = "rendering_payment_form"
    succeeded = "succeeded"
    failed = "failed"


@dataclass(frozen=True)
class CheckoutState:
    """Where the buyer is in checkout."""

    step: CheckoutStep = CheckoutStep.collecting_email
    email: str = ""
    error: str | None = None
    client_secret: str | None = None
    payment_intent_id: str | None = None


@dataclass(frozen=True)
class PriceDisplay:
    """Price line shown on the checkout page."""

    amount: Decimal
    label: str
    original_label: str | None = None
    message: str | None = None
    promo_applied: bool = False


def validate_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email.strip()))


def format_price(amount: Decimal) -> str:
    return f"${amount:.2f}"


def submit_email(
    state: CheckoutState,
    email: str,
    create_intent: Callable[[str], dict[str, Any]],
) -> CheckoutState:
    """Advance checkout after the buyer enters an email.

    An invalid email keeps the buyer on the email step without calling
    create_intent.

    Args:
        state: Current checkout state
        email: Email as typed
        create_intent: Creates the payment intent for an email (network call)

    Returns:
        New checkout state
    """
    email = email.strip()
    if not validate_email(email):
        return replace(
            state,
            step=CheckoutStep.collecting_email,
            email=email,
            error="Please enter a valid email address",
        )

    state = replace(state, step=CheckoutStep.awaiting_client_secret, email=email, error=None)
    try:
        result = create_intent(email)
    except httpx.HTTPError as e:
        return replace(state, step=CheckoutStep.failed, error=_error_detail(e))

    client_secret = result.get("clientSecret")
    if not client_secret:
        return replace(state, step=CheckoutStep.failed, error="Payment could not be started")
    return replace(
        state,
        step=CheckoutStep.rendering_payment_form,
        client_secret=client_secret,
        payment_intent_id=result.get("paymentIntentId"),
    )


def finish_payment(
    state: CheckoutState, succeeded: bool, error: str | None = None
) -> CheckoutState:
    """Record the payment form outcome."""
    if succeeded:
        return replace(state, step=CheckoutStep.succeeded, error=None)
    return replace(state, step=CheckoutStep.failed, error=error or "Payment failed")


def _error_detail(error: httpx.HTTPError) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        try:
            detail = error.response.json().get("detail")
        except ValueError:
            detail = None
        if detail:
            return str(detail)
    return "Could not reach the payment service. Please try again."


def product_price(pricing: dict[str, Any], product_type: str) -> Decimal:
    """List price of a product from the /payments/pricing response."""
    for product in pricing.get("products", []):
        if product.get("productType") == product_type:
            return Decimal(str(product["price"]))
    raise KeyError(f"Unknown product type: {product_type}")


def apply_promo_code(
    pricing: dict[str, Any], product_type: str, promo_code: str | None
) -> PriceDisplay:
    """Price shown after the buyer enters a promo code.

    Args:
        pricing: Response of GET /payments/pricing
        product_type: Product being bought
        promo_code: Code as typed (may be empty)

    Returns:
        PriceDisplay; a valid code strikes through the original price
    """
    original = product_price(pricing, product_type)
    plain = PriceDisplay(amount=original, label=format_price(original))
    if not promo_code or not promo_code.strip():
        return plain

    promotion = pricing.get("promotion") or {}
    code = str(promotion.get("code", ""))
    if not promotion.get("active") or promo_code != code:
        return replace(plain, message="Invalid promo code")

    percent = Decimal(promotion.get("discountPercent", 0))
    discounted = (original - original * percent / 100).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )
    return PriceDisplay(
        amount=discounted,
        label=format_price(discounted),
        original_label=f"~~{format_price(original)}~~",
        message=f"{percent}% discount applied!",
        promo_applied=True,
    )


def fetch_pricing(backend_url: str, client: httpx.Client | None = None) -> dict[str, Any]:
    """GET /payments/pricing.

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    http = client or httpx
    response = http.get(f"{backend_url}/payments/pricing", timeout=10.0)
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def create_payment_intent(
    backend_url: str,
    email: str,
    amount: Decimal,
    product_type: str,
    destination_id: int | None = None,
    promo_code: str | None = None,
    client: httpx.Client | None = None,
) -> dict[str, Any]:
    """POST /payments/create-payment-intent.

    Returns:
        Dict with clientSecret and paymentIntentId

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    http = client or httpx
    response = http.post(
        f"{backend_url}/payments/create-payment-intent",
        json={
            "amount": float(amount),
            "email": email,
            "productType": product_type,
            "destinationId": destination_id,
            "promoCode": promo_code or None,
        },
        timeout=30.0,
    )
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def fetch_status(
    backend_url: str, session_id: str, client: httpx.Client | None = None
) -> dict[str, Any]:
    """GET /payments/status/{session_id}.

    Raises:
        httpx.HTTPStatusError: If request fails (404 for unknown sessions)
    """
    http = client or httpx
    response = http.get(f"{backend_url}/payments/status/{session_id}", timeout=10.0)
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def build_status_view(status: dict[str, Any]) -> dict[str, Any]:
    """Build the status page view from a /payments/status response.

    Args:
        status: Status response dict

    Returns:
        Dict with message, progress, show_progress, show_download,
        download_url and checklist [(label, done)]
    """
    state = status.get("status", "unknown")
    progress = int(status.get("progress") or 0)
    download_url = status.get("downloadUrl")
    completed = state == "completed"

    return {
        "status": state,
        "message": status.get("message", ""),
        "progress": progress,
        "show_progress": state not in TERMINAL_STATUSES,
        "show_download": completed and bool(download_url),
        "download_url": download_url if completed else None,
        "failed": state in ("failed", "error"),
        "checklist": [(label, progress >= threshold) for _, label, threshold in CHECKLIST],
    }


def polling_window(pricing: dict[str, Any]) -> tuple[int, int]:
    """Poll interval and timeout (seconds) from the /payments/pricing response."""
    polling = pricing["polling"]
    return int(polling["intervalSec"]), int(polling["timeoutSec"])


def should_keep_polling(status: str | None, elapsed_sec: float, timeout_sec: float) -> bool:
    """Whether the status page should poll again."""
    if status in TERMINAL_STATUSES:
        return False
    return elapsed_sec < timeout_sec
