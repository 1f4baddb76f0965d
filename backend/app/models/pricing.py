"""Pricing models - server-resolved product prices and promotion."""

from backend.app.models.common import ApiModel, Money


class ProductPrice(ApiModel):
    """Sellable product and its list price."""

    product_type: str
    name: str
    price: Money


class Promotion(ApiModel):
    """Promo code discount applied as a percentage of the list price."""

    code: str
    discount_percent: int
    active: bool


class Polling(ApiModel):
    """How often and how long the client polls a purchase status."""

    interval_sec: int
    timeout_sec: int


class PricingConfig(ApiModel):
    """Response for GET /payments/pricing."""

    currency: str
    products: list[ProductPrice]
    promotion: Promotion
    polling: Polling


class PriceQuote(ApiModel):
    """Price for one product after an optional promo code."""

    product_type: str
    name: str
    currency: str
    original_amount: Money
    amount: Money
    discount_percent: int = 0
    promo_applied: bool = False

    @property
    def amount_cents(self) -> int:
        return int((self.amount * 100).to_integral_value())
