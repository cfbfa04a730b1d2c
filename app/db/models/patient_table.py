# app/db/models/patient_table.py
from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import String, Boolean, DateTime, and_
from sqlalchemy.orm import relationship, Mapped, mapped_column
from sqlalchemy.sql.elements import ColumnElement
from .db_base_model import DbBaseModel

if TYPE_CHECKING:
    from .appointment_table import Appointment


class Patient(DbBaseModel):
    """
    Clinic-side view of a client account.

    ``patient_id`` is the user id issued by the identity provider, so the
    authenticated actor id of a client is directly its patient id.
    """

    __tablename__ = "patients"

    patient_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=DbBaseModel.generate_uuid,
    )

    patient_code: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        unique=True,
        default=DbBaseModel.generate_short_code,
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    # Account state owned by user management
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    appointments: Mapped[list["Appointment"]] = relationship(
        "Appointment", back_populates="patient"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def is_visible(cls) -> ColumnElement[bool]:
        """The one filter every patient query applies."""
        return and_(
            cls.is_approved.is_(True),
            cls.is_active.is_(True),
            cls.is_deleted.is_(False),
        )


__all__ = ["Patient"]
