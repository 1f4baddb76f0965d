"""Stripe adapter over the REST API (form-encoded requests, JSON responses)."""

import hashlib
import hmac
import logging
import time
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict

from backend.app.config import Settings, get_settings
from backend.app.errors import (
    PaymentProviderError,
    PaymentsNotConfiguredError,
    WebhookSignatureError,
)

logger = logging.getLogger(__name__)


class PaymentIntent(BaseModel):
    """Subset of the Stripe PaymentIntent object used by checkout."""

    model_config = ConfigDict(extra="ignore")

    id: str
    amount: int
    currency: str
    status: str
    client_secret: str | None = None
    receipt_email: str | None = None
    metadata: dict[str, str] = {}


class StripeClient:
    """Minimal Stripe client for payment intents."""

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.stripe.com/v1",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize Stripe client.

        Args:
            secret_key: Stripe secret API key (read from environment)
            base_url: Stripe API base URL
            timeout: Request timeout in seconds
            client: Optional httpx client (for testing with mocks)
        """
        self._secret_key = secret_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    async def _request(
        self, method: str, path: str, data: dict[str, str] | None = None
    ) -> dict[str, Any]:
        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout)
            close_client = True

        try:
            response = await client.request(
                method,
                f"{self._base_url}{path}",
                data=data,
                auth=(self._secret_key, ""),
            )
        except httpx.HTTPError as e:
            logger.error(f"Stripe request {method} {path} failed: {e}")
            raise PaymentProviderError(f"Payment provider unavailable: {type(e).__name__}") from e
        finally:
            if close_client:
                await client.aclose()

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(f"Stripe returned {response.status_code} for {path}: {message}")
            raise PaymentProviderError(message)
        return response.json()

    async def create_payment_intent(
        self,
        amount_cents: int,
        currency: str,
        receipt_email: str,
        metadata: dict[str, str] | None = None,
    ) -> PaymentIntent:
        """Create a payment intent with automatic payment methods.

        Args:
            amount_cents: Amount in the smallest currency unit
            currency: ISO currency code (lowercase)
            receipt_email: Where Stripe sends the receipt
            metadata: String key/value pairs stored on the intent

        Returns:
            Created PaymentIntent including its client secret

        Raises:
            PaymentProviderError: On network errors or Stripe error responses
        """
        form = {
            "amount": str(amount_cents),
            "currency": currency,
            "receipt_email": receipt_email,
            "automatic_payment_methods[enabled]": "true",
        }
        for key, value in (metadata or {}).items():
            form[f"metadata[{key}]"] = value

        data = await self._request("POST", "/payment_intents", data=form)
        return PaymentIntent.model_validate(data)

    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        """Fetch a payment intent by ID.

        Raises:
            PaymentProviderError: On network errors or Stripe error responses
        """
        data = await self._request("GET", f"/payment_intents/{payment_intent_id}")
        return PaymentIntent.model_validate(data)


def _error_message(response: httpx.Response) -> str:
    try:
        error = response.json().get("error", {})
    except ValueError:
        error = {}
    return error.get("message") or f"Payment provider error ({response.status_code})"


def verify_webhook_signature(
    payload: bytes,
    signature_header: str | None,
    secret: str,
    tolerance_sec: int = 300,
    now: float | None = None,
) -> None:
    """Verify a Stripe-Signature header against the raw request body.

    The header looks like ``t=1700000000,v1=<hex>[,v1=<hex>]``; the signed
    string is ``"<t>.<payload>"`` under HMAC-SHA256 with the endpoint secret.

    Raises:
        WebhookSignatureError: If the header is missing, malformed, stale or
            no v1 signature matches
    """
    if not signature_header:
        raise WebhookSignatureError("Missing Stripe-Signature header")

    timestamp: int | None = None
    signatures: list[str] = []
    for item in signature_header.split(","):
        key, _, value = item.strip().partition("=")
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError:
                raise WebhookSignatureError("Malformed signature timestamp") from None
        elif key == "v1":
            signatures.append(value)

    if timestamp is None or not signatures:
        raise WebhookSignatureError("Malformed Stripe-Signature header")

    current = time.time() if now is None else now
    if abs(current - timestamp) > tolerance_sec:
        raise WebhookSignatureError("Webhook timestamp outside the tolerance window")

    signed = f"{timestamp}.".encode() + payload
    expected = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
        raise WebhookSignatureError("Webhook signature mismatch")


def sign_webhook_payload(payload: bytes, secret: str, timestamp: int) -> str:
    """Build a Stripe-Signature header value (used by local tooling and tests)."""
    signed = f"{timestamp}.".encode() + payload
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def get_stripe_client(settings: Settings | None = None) -> StripeClient:
    """Factory function to get a Stripe client from settings.

    Raises:
        PaymentsNotConfiguredError: If STRIPE_SECRET_KEY is unset
    """
    settings = settings or get_settings()
    key = settings.stripe_secret_key
    if not key or not key.get_secret_value():
        raise PaymentsNotConfiguredError()
    return StripeClient(
        secret_key=key.get_secret_value(),
        base_url=settings.stripe_api_base,
        timeout=settings.stripe_timeout_sec,
    )
