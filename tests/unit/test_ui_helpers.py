"""Unit tests for UI helper functions."""

from decimal import Decimal
from unittest.mock import MagicMock

import httpx
import pytest

from ui.helpers import (
    CheckoutState,
    CheckoutStep,
    apply_promo_code,
    build_status_view,
    create_payment_intent,
    fetch_status,
    finish_payment,
    format_price,
    polling_window,
    should_keep_polling,
    submit_email,
    validate_email,
)

PRICING = {
    "currency": "usd",
    "products": [
        {"productType": "premium_itinerary", "name": "Premium Travel Guide", "price": 19.99},
        {"productType": "snowbird_toolkit", "name": "Snowbird Guide", "price": 9.99},
    ],
    "promotion": {"code": "SALE20", "discountPercent": 20, "active": True},
    "polling": {"intervalSec": 5, "timeoutSec": 300},
}


@pytest.mark.parametrize(
    ("email", "valid"),
    [
        ("ana@example.com", True),
        ("  ana@example.com ", True),
        ("not-an-email", False),
        ("ana@example", False),
        ("ana @example.com", False),
        ("", False),
    ],
)
def test_validate_email(email: str, valid: bool) -> None:
    """Test the email check used before starting checkout."""
    assert validate_email(email) is valid


def test_format_price() -> None:
    """Test currency formatting."""
    assert format_price(Decimal("19.9")) == "$19.90"


def test_invalid_email_makes_no_call() -> None:
    """Test that an invalid email never reaches the backend."""
    create_intent = MagicMock()

    state = submit_email(CheckoutState(), "not-an-email", create_intent)

    assert state.step == CheckoutStep.collecting_email
    assert state.error == "Please enter a valid email address"
    create_intent.assert_not_called()


def test_valid_email_renders_payment_form() -> None:
    """Test the happy path to the payment form."""
    create_intent = MagicMock(
        return_value={"clientSecret": "pi_1_secret_x", "paymentIntentId": "pi_1"}
    )

    state = submit_email(CheckoutState(), " ana@example.com ", create_intent)

    create_intent.assert_called_once_with("ana@example.com")
    assert state.step == CheckoutStep.rendering_payment_form
    assert state.client_secret == "pi_1_secret_x"
    assert state.payment_intent_id == "pi_1"
    assert state.error is None


def test_backend_error_detail_is_shown() -> None:
    """Test that the API's error detail reaches the buyer."""
    request = httpx.Request("POST", "http://backend/payments/create-payment-intent")
    response = httpx.Response(
        400, json={"detail": "Amount does not match the current price of 15.99"}, request=request
    )
    error = httpx.HTTPStatusError("bad request", request=request, response=response)

    state = submit_email(CheckoutState(), "ana@example.com", MagicMock(side_effect=error))

    assert state.step == CheckoutStep.failed
    assert state.error == "Amount does not match the current price of 15.99"


def test_unreachable_backend() -> None:
    """Test the generic message for network errors."""
    error = httpx.ConnectError("refused")

    state = submit_email(CheckoutState(), "ana@example.com", MagicMock(side_effect=error))

    assert state.step == CheckoutStep.failed
    assert state.error == "Could not reach the payment service. Please try again."


def test_missing_client_secret() -> None:
    """Test that a response without a client secret fails checkout."""
    state = submit_email(CheckoutState(), "ana@example.com", MagicMock(return_value={}))

    assert state.step == CheckoutStep.failed
    assert state.error == "Payment could not be started"


def test_finish_payment() -> None:
    """Test the payment form outcome."""
    state = CheckoutState(step=CheckoutStep.rendering_payment_form, email="ana@example.com")

    assert finish_payment(state, True).step == CheckoutStep.succeeded
    failed = finish_payment(state, False, "Your card was declined.")
    assert failed.step == CheckoutStep.failed
    assert failed.error == "Your card was declined."
    assert finish_payment(state, False).error == "Payment failed"


class TestApplyPromoCode:
    """Test promo code display."""

    def test_no_code(self) -> None:
        """Test the list price without a code."""
        display = apply_promo_code(PRICING, "premium_itinerary", "")

        assert display.label == "$19.99"
        assert display.original_label is None
        assert display.message is None

    def test_valid_code_strikes_through_original(self) -> None:
        """Test the discounted price display."""
        display = apply_promo_code(PRICING, "premium_itinerary", "SALE20")

        assert display.amount == Decimal("15.99")
        assert display.label == "$15.99"
        assert display.original_label == "~~$19.99~~"
        assert display.message == "20% discount applied!"
        assert display.promo_applied is True

    def test_invalid_code(self) -> None:
        """Test that a wrong code keeps the list price with a message."""
        display = apply_promo_code(PRICING, "snowbird_toolkit", "BOGUS")

        assert display.label == "$9.99"
        assert display.message == "Invalid promo code"
        assert display.promo_applied is False

    @pytest.mark.parametrize("code", ["sale20", " SALE20"])
    def test_code_must_match_exactly(self, code: str) -> None:
        """Test that a lowercase or padded code is rejected."""
        display = apply_promo_code(PRICING, "premium_itinerary", code)

        assert display.amount == Decimal("19.99")
        assert display.message == "Invalid promo code"
        assert display.promo_applied is False

    def test_inactive_promotion(self) -> None:
        """Test that the code is rejected while the promotion is off."""
        pricing = {**PRICING, "promotion": {**PRICING["promotion"], "active": False}}

        assert apply_promo_code(pricing, "premium_itinerary", "SALE20").message == (
            "Invalid promo code"
        )

    def test_unknown_product(self) -> None:
        """Test that products missing from the pricing response raise."""
        with pytest.raises(KeyError):
            apply_promo_code(PRICING, "mystery_box", None)


class TestBuildStatusView:
    """Test the status page view."""

    def test_generating(self) -> None:
        """Test progress bar and checklist while generating."""
        view = build_status_view(
            {"status": "generating", "message": "Creating your itinerary...", "progress": 50}
        )

        assert view["show_progress"] is True
        assert view["show_download"] is False
        assert view["checklist"] == [
            ("Preparing your itinerary", True),
            ("Creating day-by-day plans", True),
            ("Adding local experiences", True),
            ("Personalized recommendations", False),
            ("Formatting your PDF", False),
        ]

    def test_completed_shows_download_without_progress(self) -> None:
        """Test that a completed purchase shows the download button only."""
        view = build_status_view(
            {
                "status": "completed",
                "message": "Your itinerary is ready for download!",
                "progress": 100,
                "downloadUrl": "/payments/download/pi_1",
            }
        )

        assert view["show_progress"] is False
        assert view["show_download"] is True
        assert view["download_url"] == "/payments/download/pi_1"
        assert all(done for _, done in view["checklist"])

    def test_failed(self) -> None:
        """Test the failed view."""
        view = build_status_view(
            {"status": "failed", "message": "Generation failed", "progress": 0}
        )

        assert view["failed"] is True
        assert view["show_progress"] is False
        assert view["download_url"] is None

    def test_missing_fields(self) -> None:
        """Test defaults for an empty response."""
        view = build_status_view({})

        assert view["status"] == "unknown"
        assert view["progress"] == 0
        assert view["show_progress"] is True


@pytest.mark.parametrize(
    ("status", "elapsed", "expected"),
    [
        ("pending", 0, True),
        ("generating", 299, True),
        ("generating", 300, False),
        ("completed", 10, False),
        ("failed", 10, False),
        ("error", 10, False),
        (None, 10, True),
    ],
)
def test_should_keep_polling(status: str | None, elapsed: float, expected: bool) -> None:
    """Test that polling stops on terminal states or after the timeout."""
    assert should_keep_polling(status, elapsed, 300) is expected


def test_polling_window_comes_from_pricing() -> None:
    """Test reading the poll interval and timeout served by the backend."""
    assert polling_window(PRICING) == (5, 300)
    assert polling_window({"polling": {"intervalSec": 2, "timeoutSec": 60}}) == (2, 60)


def test_create_payment_intent_request() -> None:
    """Test the checkout request body sent to the backend."""
    bodies: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(request.content)
        return httpx.Response(200, json={"clientSecret": "s", "paymentIntentId": "pi_1"})

    client = httpx.Client(transport=httpx.MockTransport(handler))

    result = create_payment_intent(
        "http://backend",
        "ana@example.com",
        Decimal("15.99"),
        "premium_itinerary",
        destination_id=1,
        promo_code="SALE20",
        client=client,
    )

    assert result["paymentIntentId"] == "pi_1"
    assert b'"amount":15.99' in bodies[0].replace(b" ", b"")
    assert b'"promoCode":"SALE20"' in bodies[0].replace(b" ", b"")


def test_fetch_status_unknown_session() -> None:
    """Test that a 404 from the backend raises."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "Purchase not found"})

    client = httpx.Client(transport=httpx.MockTransport(handler))

    with pytest.raises(httpx.HTTPStatusError):
        fetch_status("http://backend", "pi_missing", client=client)
