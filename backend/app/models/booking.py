import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.enums import BookingStatus
from app.models.types import GUID


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_booking_provider_created", "provider_id", "created_at"),
        Index("ix_booking_vehicle_created", "vehicle_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(GUID(), primary_key=True, default=uuid.uuid4)
    vehicle_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("vehicles.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    # References users.id of a PROVIDER user, not the profile row.
    provider_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    service_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Mutated only through app.utils.booking_state.validate_transition
    status: Mapped[BookingStatus] = mapped_column(
        String(20), nullable=False, default=BookingStatus.PENDING, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    vehicle: Mapped["Vehicle"] = relationship("Vehicle", lazy="raise")
    provider: Mapped["User"] = relationship("User", foreign_keys=[provider_id], lazy="raise")
    invoice: Mapped["Invoice | None"] = relationship(
        "Invoice", back_populates="booking", uselist=False, lazy="raise"
    )
