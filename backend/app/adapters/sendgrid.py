"""SendGrid adapter for purchase delivery emails."""

import logging

import httpx

from backend.app.config import Settings

logger = logging.getLogger(__name__)

# Display names used in email subjects
PRODUCT_NAMES = {
    "premium_itinerary": "Premium Travel Itinerary",
    "snowbird_toolkit": "Canadian Snowbird Toolkit",
    "pet_travel_guide": "Pet Travel Guide",
    "digital_nomad_package": "Digital Nomad Transition Package",
}


def build_delivery_email(
    product_type: str,
    amount: str,
    order_number: str,
    download_url: str | None,
    company_name: str,
) -> tuple[str, str]:
    """Build subject and plain-text body for a delivery email.

    Args:
        product_type: Purchased product key
        amount: Formatted amount, e.g. "19.99"
        order_number: Reference shown to the customer
        download_url: Absolute download link, if the document is ready
        company_name: Sender brand

    Returns:
        Tuple of (subject, body)
    """
    product_name = PRODUCT_NAMES.get(product_type, "Travel Product")
    subject = f"Your {company_name} Purchase: {product_name}"
    lines = [
        "Thank You for Your Purchase!",
        "",
        f"Thank you for purchasing {product_name} from {company_name}. "
        "Your order has been successfully processed.",
        "",
        f"Order Number: {order_number}",
        f"Product: {product_name}",
        f"Amount: ${amount}",
    ]
    if download_url:
        lines += ["", f"You can download your purchase at: {download_url}"]
    lines += ["", "Happy travels!"]
    return subject, "\n".join(lines)


async def send_email(
    to: str,
    subject: str,
    body: str,
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """Send a plain-text email through SendGrid.

    Delivery is best effort: a missing key or a failed request is logged and
    reported as False, never raised.

    Args:
        to: Recipient address
        subject: Subject line
        body: Plain-text body
        settings: Settings with the SendGrid key and sender
        client: Optional httpx client (for testing with mocks)

    Returns:
        True if SendGrid accepted the message
    """
    key = settings.sendgrid_api_key
    if not key or not key.get_secret_value():
        logger.warning(f"SENDGRID_API_KEY not set, email to {to} not sent: {subject}")
        return False

    payload = {
        "personalizations": [{"to": [{"email": to}]}],
        "from": {"email": settings.email_from},
        "subject": subject,
        "content": [{"type": "text/plain", "value": body}],
    }

    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=10.0)
        close_client = True

    try:
        response = await client.post(
            f"{settings.sendgrid_api_base.rstrip('/')}/mail/send",
            json=payload,
            headers={"Authorization": f"Bearer {key.get_secret_value()}"},
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Email delivery to {to} failed: {e}")
        return False
    finally:
        if close_client:
            await client.aclose()

    logger.info(f"Email sent to {to}: {subject}")
    return True
