"""Tests for server-resolved pricing."""

from decimal import Decimal

import pytest

from backend.app.config import Settings
from backend.app.errors import UnknownProductError
from backend.app.services.pricing import apply_discount, quote, resolve_pricing


@pytest.fixture
def settings() -> Settings:
    return Settings(promo_code="SALE20", promo_discount_percent=20, promo_active=True)


class TestQuote:
    """Test product quotes."""

    def test_list_price(self, settings: Settings) -> None:
        """Test a quote without a promo code."""
        result = quote(settings, "premium_itinerary")

        assert result.amount == Decimal("19.99")
        assert result.original_amount == Decimal("19.99")
        assert result.promo_applied is False
        assert result.amount_cents == 1999
        assert result.name == "Premium Travel Guide"

    @pytest.mark.parametrize(
        ("product_type", "expected"),
        [
            ("premium_itinerary", Decimal("15.99")),
            ("snowbird_toolkit", Decimal("7.99")),
            ("digital_nomad_package", Decimal("39.99")),
        ],
    )
    def test_promo_takes_exactly_twenty_percent(
        self, settings: Settings, product_type: str, expected: Decimal
    ) -> None:
        """Test the discounted price rounded to cents."""
        result = quote(settings, product_type, "SALE20")

        assert result.amount == expected
        assert result.discount_percent == 20
        assert result.promo_applied is True

    @pytest.mark.parametrize("code", ["sale20", "Sale20", " SALE20 "])
    def test_promo_code_must_match_exactly(self, settings: Settings, code: str) -> None:
        """Test that a code differing in case or spacing is rejected."""
        result = quote(settings, "premium_itinerary", code)

        assert result.promo_applied is False
        assert result.amount == Decimal("19.99")

    def test_wrong_code_keeps_list_price(self, settings: Settings) -> None:
        """Test that an unknown code is ignored."""
        result = quote(settings, "premium_itinerary", "FREE100")

        assert result.amount == Decimal("19.99")
        assert result.promo_applied is False

    def test_inactive_promotion(self) -> None:
        """Test that the code does nothing while the promotion is off."""
        settings = Settings(promo_active=False)

        assert quote(settings, "premium_itinerary", "SALE20").promo_applied is False

    def test_unknown_product(self, settings: Settings) -> None:
        """Test that unpriced products are rejected."""
        with pytest.raises(UnknownProductError, match="Unknown product type: mystery_box"):
            quote(settings, "mystery_box")


def test_discount_rounds_half_up() -> None:
    """Test that half cents round up rather than to even."""
    assert apply_discount(Decimal("10.05"), 10) == Decimal("9.05")
    assert apply_discount(Decimal("19.99"), 0) == Decimal("19.99")


def test_resolve_pricing_serves_polling_window() -> None:
    """Test that the status polling window comes from settings."""
    settings = Settings(status_poll_interval_sec=2, status_poll_timeout_sec=60)

    polling = resolve_pricing(settings).polling

    assert (polling.interval_sec, polling.timeout_sec) == (2, 60)


def test_resolve_pricing_lists_every_product(settings: Settings) -> None:
    """Test the pricing configuration served to clients."""
    pricing = resolve_pricing(settings)

    types = [product.product_type for product in pricing.products]
    assert types == list(settings.product_prices)
    assert pricing.promotion.code == "SALE20"
    dumped = pricing.model_dump(mode="json", by_alias=True)
    assert dumped["promotion"] == {"code": "SALE20", "discountPercent": 20, "active": True}
    assert dumped["polling"] == {"intervalSec": 5, "timeoutSec": 300}
    assert dumped["products"][0] == {
        "productType": "premium_itinerary",
        "name": "Premium Travel Guide",
        "price": 19.99,
    }
