"""Tests for the purchase lifecycle."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from backend.app.config import Settings
from backend.app.db.inmemory import InMemoryPurchaseRepository, InMemoryRepositoryProvider
from backend.app.models.purchase import NewPurchase, Purchase, PurchaseStatus
from backend.app.services.purchases import (
    build_status_report,
    fulfill_purchase,
    generating_message,
    mark_failed,
    mark_paid,
)

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_purchase(status: PurchaseStatus, progress: int = 0, **fields: object) -> Purchase:
    values: dict[str, object] = {
        "id": 1,
        "email": "ana@example.com",
        "product_type": "premium_itinerary",
        "destination_id": 1,
        "amount_cents": 1599,
        "payment_intent_id": "pi_1",
        "status": status,
        "progress": progress,
        "created_at": NOW,
        "updated_at": NOW,
    }
    values.update(fields)
    return Purchase.model_validate(values)


async def create_pending(
    purchases: InMemoryPurchaseRepository, product_type: str = "premium_itinerary", **fields: object
) -> Purchase:
    return await purchases.create(
        NewPurchase.model_validate(
            {
                "email": "ana@example.com",
                "product_type": product_type,
                "amount_cents": 1599,
                "payment_intent_id": "pi_1",
                "destination_id": 1,
                **fields,
            }
        )
    )


class TestBuildStatusReport:
    """Test the status polling response."""

    @pytest.mark.parametrize(
        ("status", "stage", "progress"),
        [
            (PurchaseStatus.pending, "payment", 10),
            (PurchaseStatus.processing, "preparation", 30),
            (PurchaseStatus.failed, "failed", 0),
        ],
    )
    def test_fixed_stages(self, status: PurchaseStatus, stage: str, progress: int) -> None:
        """Test stage and progress for statuses with fixed values."""
        report = build_status_report(make_purchase(status, progress=55))

        assert report.stage == stage
        assert report.progress == progress
        assert report.download_url is None

    @pytest.mark.parametrize(
        ("progress", "message"),
        [
            (50, "Creating your travel experience"),
            (70, "Adding personalized recommendations"),
            (90, "Finalizing your itinerary"),
        ],
    )
    def test_generating_uses_stored_progress(self, progress: int, message: str) -> None:
        """Test that generating reports the stored progress."""
        report = build_status_report(make_purchase(PurchaseStatus.generating, progress))

        assert report.stage == "generation"
        assert report.progress == progress
        assert report.message == message

    def test_completed_has_download_url(self) -> None:
        """Test the download link on completion."""
        report = build_status_report(make_purchase(PurchaseStatus.completed, 100))

        assert report.progress == 100
        assert report.download_url == "/payments/download/pi_1"

    def test_wire_format(self) -> None:
        """Test camelCase keys and the amount in dollars."""
        report = build_status_report(
            make_purchase(PurchaseStatus.completed, 100, pdf_url="/downloads/x.pdf", job_id="j1")
        )

        data = report.model_dump(mode="json", by_alias=True)
        assert data["downloadUrl"] == "/downloads/x.pdf"
        assert data["jobId"] == "j1"
        assert data["purchase"]["amount"] == 15.99
        assert data["purchase"]["productType"] == "premium_itinerary"


def test_generating_message_below_thirty() -> None:
    assert generating_message(10) == "Preparing your itinerary"


class TestMarkPaid:
    """Test payment confirmation."""

    @pytest.mark.asyncio
    async def test_first_confirmation_schedules_fulfillment(self) -> None:
        """Test pending -> processing."""
        purchases = InMemoryPurchaseRepository()
        await create_pending(purchases)

        assert await mark_paid(purchases, "pi_1") is True

        purchase = await purchases.get_by_payment_intent("pi_1")
        assert purchase is not None
        assert purchase.status == PurchaseStatus.processing
        assert purchase.progress == 30

    @pytest.mark.asyncio
    async def test_repeat_confirmation_is_ignored(self) -> None:
        """Test that webhook retries do not start a second fulfillment."""
        purchases = InMemoryPurchaseRepository()
        await create_pending(purchases)

        assert await mark_paid(purchases, "pi_1") is True
        assert await mark_paid(purchases, "pi_1") is False

    @pytest.mark.asyncio
    async def test_unknown_purchase(self) -> None:
        """Test confirmation for a payment intent never seen."""
        assert await mark_paid(InMemoryPurchaseRepository(), "pi_unknown") is False


@pytest.mark.asyncio
async def test_mark_failed_keeps_completed_purchases() -> None:
    """Test that a late failure event cannot undo a completed purchase."""
    purchases = InMemoryPurchaseRepository()
    await create_pending(purchases)
    await purchases.update("pi_1", status=PurchaseStatus.completed, progress=100)

    purchase = await mark_failed(purchases, "pi_1", "Card declined")

    assert purchase is not None
    assert purchase.status == PurchaseStatus.completed


class TestFulfillPurchase:
    """Test background fulfillment."""

    @pytest.mark.asyncio
    async def test_completes_and_emails(
        self, catalog_provider: InMemoryRepositoryProvider, test_settings: Settings
    ) -> None:
        """Test processing -> generating -> completed with a delivery email."""
        await create_pending(catalog_provider.purchases)
        await mark_paid(catalog_provider.purchases, "pi_1")

        with patch("backend.app.services.purchases.send_email", return_value=True) as mock_send:
            await fulfill_purchase("pi_1", catalog_provider, test_settings)

        purchase = await catalog_provider.purchases.get_by_payment_intent("pi_1")
        assert purchase is not None
        assert purchase.status == PurchaseStatus.completed
        assert purchase.progress == 100
        assert purchase.pdf_url == "/downloads/itineraries/lisbon-itinerary.pdf"
        assert purchase.job_id is not None and purchase.job_id.startswith("job_")
        assert purchase.completed_at is not None
        assert purchase.email_sent is True
        assert (test_settings.downloads_dir / "itineraries" / "lisbon-itinerary.pdf").exists()
        to, subject, body = mock_send.await_args.args[:3]
        assert to == "ana@example.com"
        assert "Premium Travel Itinerary" in subject
        assert "http://localhost:8000/payments/download/pi_1" in body

    @pytest.mark.asyncio
    async def test_reports_progress_while_generating(
        self, catalog_provider: InMemoryRepositoryProvider, test_settings: Settings
    ) -> None:
        """Test that generating progress is stored at each checkpoint."""
        await create_pending(catalog_provider.purchases)
        seen: list[tuple[PurchaseStatus, int]] = []
        original_update = catalog_provider.purchases.update

        async def recording_update(payment_intent_id: str, **fields: object) -> Purchase | None:
            purchase = await original_update(payment_intent_id, **fields)  # type: ignore[arg-type]
            if purchase is not None and "status" in fields:
                seen.append((purchase.status, purchase.progress))
            return purchase

        catalog_provider.purchases.update = recording_update  # type: ignore[method-assign]
        with patch("backend.app.services.purchases.send_email", return_value=False):
            await fulfill_purchase("pi_1", catalog_provider, test_settings)

        assert seen == [
            (PurchaseStatus.generating, 50),
            (PurchaseStatus.generating, 50),
            (PurchaseStatus.generating, 70),
            (PurchaseStatus.generating, 90),
            (PurchaseStatus.completed, 100),
        ]

    @pytest.mark.asyncio
    async def test_missing_destination_fails(
        self, catalog_provider: InMemoryRepositoryProvider, test_settings: Settings
    ) -> None:
        """Test that generation errors are recorded on the purchase."""
        await create_pending(catalog_provider.purchases, destination_id=99)

        with patch("backend.app.services.purchases.send_email") as mock_send:
            await fulfill_purchase("pi_1", catalog_provider, test_settings)

        purchase = await catalog_provider.purchases.get_by_payment_intent("pi_1")
        assert purchase is not None
        assert purchase.status == PurchaseStatus.failed
        assert purchase.error_message == "Destination 99 not found"
        mock_send.assert_not_called()

    @pytest.mark.asyncio
    async def test_product_without_document(
        self, catalog_provider: InMemoryRepositoryProvider, test_settings: Settings
    ) -> None:
        """Test that non-document products complete with no file."""
        await create_pending(catalog_provider.purchases, product_type="premium_consultation")

        with patch("backend.app.services.purchases.send_email", return_value=True):
            await fulfill_purchase("pi_1", catalog_provider, test_settings)

        purchase = await catalog_provider.purchases.get_by_payment_intent("pi_1")
        assert purchase is not None
        assert purchase.status == PurchaseStatus.completed
        assert purchase.pdf_url is None

    @pytest.mark.asyncio
    async def test_completed_purchase_is_left_alone(
        self, catalog_provider: InMemoryRepositoryProvider, test_settings: Settings
    ) -> None:
        """Test that a duplicate task does nothing once a purchase is done."""
        await create_pending(catalog_provider.purchases)
        await catalog_provider.purchases.update(
            "pi_1", status=PurchaseStatus.completed, progress=100, pdf_url="/x.pdf"
        )

        with patch("backend.app.services.purchases.send_email") as mock_send:
            await fulfill_purchase("pi_1", catalog_provider, test_settings)

        mock_send.assert_not_called()
