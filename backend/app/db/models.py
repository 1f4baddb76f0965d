"""SQLAlchemy ORM models for the destination catalog and purchases."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Destination(Base):
    """Destination table - reference data maintained by the admin process."""

    __tablename__ = "destination"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    country: Mapped[str] = mapped_column(Text, nullable=False)
    region: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    immersive_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    best_time_to_visit: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str | None] = mapped_column(Text, nullable=True)
    currency: Mapped[str | None] = mapped_column(Text, nullable=True)
    climate: Mapped[str | None] = mapped_column(Text, nullable=True)
    local_tips: Mapped[str | None] = mapped_column(Text, nullable=True)
    culture: Mapped[str | None] = mapped_column(Text, nullable=True)
    cuisine: Mapped[str | None] = mapped_column(Text, nullable=True)
    download_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # SnowbirdProfile fields; null for destinations not sold to snowbirds
    snowbird: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Relationships
    experiences: Mapped[list["Experience"]] = relationship(
        "Experience", back_populates="destination", order_by="Experience.id"
    )


class Itinerary(Base):
    """Itinerary table - one per destination."""

    __tablename__ = "itinerary"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    destination_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("destination.id"), nullable=False, unique=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=7)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Relationships
    days: Mapped[list["Day"]] = relationship(
        "Day", back_populates="itinerary", order_by="Day.day_number", cascade="all, delete-orphan"
    )


class Day(Base):
    """Day table - free-text content per itinerary day."""

    __tablename__ = "day"
    __table_args__ = (UniqueConstraint("itinerary_id", "day_number", name="uq_day_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    itinerary_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("itinerary.id"), nullable=False
    )
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Relationships
    itinerary: Mapped["Itinerary"] = relationship("Itinerary", back_populates="days")


class Experience(Base):
    """Experience table - local activities spotlighted in itineraries."""

    __tablename__ = "experience"
    __table_args__ = (Index("idx_experience_destination", "destination_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    destination_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("destination.id"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    kind: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    seasonal_tip: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    destination: Mapped["Destination"] = relationship(
        "Destination", back_populates="experiences"
    )


class Purchase(Base):
    """Purchase table - one row per payment intent."""

    __tablename__ = "purchase"
    __table_args__ = (
        Index("idx_purchase_email", "email"),
        Index("idx_purchase_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    product_type: Mapped[str] = mapped_column(String(64), nullable=False)
    destination_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("destination.id"), nullable=True
    )
    product_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="usd")
    payment_intent_id: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pdf_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    job_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    email_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
