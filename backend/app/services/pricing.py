"""Server-resolved product pricing and promo code quotes."""

from decimal import ROUND_HALF_UP, Decimal

from backend.app.config import Settings
from backend.app.errors import UnknownProductError
from backend.app.models.pricing import (
    Polling,
    PriceQuote,
    PricingConfig,
    ProductPrice,
    Promotion,
)

CENT = Decimal("0.01")

PRODUCT_NAMES = {
    "premium_itinerary": "Premium Travel Guide",
    "premium_consultation": "Premium Travel Consultation",
    "premium_subscription": "Premium Annual Subscription",
    "snowbird_toolkit": "The Ultimate Snowbird Escape Guide",
    "pet_travel_guide": "Pet Travel Guide",
    "digital_nomad_package": "Digital Nomad Transition Package",
    "digital_nomad_premium": "Digital Nomad Premium Package",
}


def product_name(product_type: str) -> str:
    return PRODUCT_NAMES.get(product_type, product_type.replace("_", " ").title())


def resolve_pricing(settings: Settings) -> PricingConfig:
    """Build the pricing configuration served to clients."""
    products = [
        ProductPrice(product_type=key, name=product_name(key), price=price)
        for key, price in settings.product_prices.items()
    ]
    return PricingConfig(
        currency=settings.currency,
        products=products,
        promotion=Promotion(
            code=settings.promo_code,
            discount_percent=settings.promo_discount_percent,
            active=settings.promo_active,
        ),
        polling=Polling(
            interval_sec=settings.status_poll_interval_sec,
            timeout_sec=settings.status_poll_timeout_sec,
        ),
    )


def apply_discount(original: Decimal, percent: int) -> Decimal:
    """Price after a percentage discount, rounded half-up to cents."""
    discounted = original - original * Decimal(percent) / Decimal(100)
    return discounted.quantize(CENT, rounding=ROUND_HALF_UP)


def promo_matches(settings: Settings, promo_code: str | None) -> bool:
    """Whether a submitted code is the active promotion (exact match)."""
    if not promo_code or not settings.promo_active:
        return False
    return promo_code == settings.promo_code


def quote(settings: Settings, product_type: str, promo_code: str | None = None) -> PriceQuote:
    """Quote a product, applying the promotion when the code matches.

    Args:
        settings: Settings holding prices and the promotion
        product_type: Product key, e.g. "premium_itinerary"
        promo_code: Code entered at checkout, if any

    Returns:
        PriceQuote with original and final amounts

    Raises:
        UnknownProductError: If the product has no configured price
    """
    original = settings.product_prices.get(product_type)
    if original is None:
        raise UnknownProductError(f"Unknown product type: {product_type}")

    original = original.quantize(CENT, rounding=ROUND_HALF_UP)
    applied = promo_matches(settings, promo_code)
    percent = settings.promo_discount_percent if applied else 0
    return PriceQuote(
        product_type=product_type,
        name=product_name(product_type),
        currency=settings.currency,
        original_amount=original,
        amount=apply_discount(original, percent) if applied else original,
        discount_percent=percent,
        promo_applied=applied,
    )
