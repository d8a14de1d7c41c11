"""SQLAlchemy models for all database tables."""

import enum
import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    TIMESTAMP,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship

from provider_validation.core.database import Base


class ValidationState(str, enum.Enum):
    """Three-way validation outcome of an address or phone."""

    UNVALIDATED = "unvalidated"
    CORRECT = "correct"
    INCORRECT = "incorrect"


class SessionStatus(str, enum.Enum):
    """Lifecycle state of a validation session."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


validation_state_enum = Enum(
    ValidationState,
    name="validation_state",
    values_callable=_enum_values,
)

session_status_enum = Enum(
    SessionStatus,
    name="session_status",
    values_callable=_enum_values,
)


class Provider(Base):
    """Provider record awaiting manual verification (bulk loaded, read-only here)."""

    __tablename__ = "providers"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    npi: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    gnpi: Mapped[str | None] = mapped_column(String(20), nullable=True)
    provider_name: Mapped[str] = mapped_column(String, nullable=False)
    specialty: Mapped[str | None] = mapped_column(String, nullable=True)
    provider_group: Mapped[str | None] = mapped_column(String, nullable=True)
    license_numbers: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    credentials: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    additional_metadata: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("NOW()"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("NOW()"), nullable=False
    )

    # Relationships
    addresses: Mapped[list["ProviderAddress"]] = relationship(
        "ProviderAddress", back_populates="provider", cascade="all, delete-orphan"
    )
    phones: Mapped[list["ProviderPhone"]] = relationship(
        "ProviderPhone", back_populates="provider", cascade="all, delete-orphan"
    )
    sessions: Mapped[list["ValidationSession"]] = relationship(
        "ValidationSession", back_populates="provider"
    )


class SubRecordValidationMixin:
    """Columns shared by every independently validated sub-record."""

    validation_state: Mapped[ValidationState] = mapped_column(
        validation_state_enum,
        nullable=False,
        default=ValidationState.UNVALIDATED,
        server_default=ValidationState.UNVALIDATED.value,
    )
    validated_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    validated_at: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )
    link_id: Mapped[str | None] = mapped_column(
        String, nullable=True, comment="Pairs an address with the phone captured alongside it"
    )
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("NOW()"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("NOW()"), nullable=False
    )

    @declared_attr
    def provider_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            UUID(as_uuid=True),
            ForeignKey("providers.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    CORRECTION_FIELDS = ()

    @property
    def validated_correct(self) -> Optional[bool]:
        """Tri-state view: None until validated, then True/False."""
        # Transient instances carry None until the column default is applied
        if self.validation_state in (None, ValidationState.UNVALIDATED):
            return None
        return self.validation_state == ValidationState.CORRECT

    @property
    def corrections(self) -> dict[str, Any]:
        """Corrected values, populated only for incorrect records."""
        if self.validation_state != ValidationState.INCORRECT:
            return {}
        return {
            field: getattr(self, field)
            for field in self.CORRECTION_FIELDS
            if getattr(self, field) is not None
        }


def _validation_constraints(table: str, correction_fields: tuple[str, ...]) -> tuple:
    corrections_null = " AND ".join(f"{field} IS NULL" for field in correction_fields)
    return (
        CheckConstraint(
            f"validation_state = 'incorrect' OR ({corrections_null})",
            name=f"ck_{table}_corrections_only_when_incorrect",
        ),
        CheckConstraint(
            "(validated_by IS NULL) = (validated_at IS NULL)",
            name=f"ck_{table}_validated_audit_pair",
        ),
        CheckConstraint(
            "(validation_state = 'unvalidated') = (validated_at IS NULL)",
            name=f"ck_{table}_validated_state_audit",
        ),
    )


ADDRESS_CORRECTION_FIELDS = (
    "corrected_address1",
    "corrected_address2",
    "corrected_city",
    "corrected_state",
    "corrected_zip",
)

PHONE_CORRECTION_FIELDS = ("corrected_phone",)


class ProviderAddress(SubRecordValidationMixin, Base):
    """Practice/billing address attached to a provider."""

    __tablename__ = "provider_addresses"
    __table_args__ = _validation_constraints("provider_addresses", ADDRESS_CORRECTION_FIELDS)

    CORRECTION_FIELDS = ADDRESS_CORRECTION_FIELDS

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    address_category: Mapped[str] = mapped_column(String, nullable=False)
    address1: Mapped[str] = mapped_column(String, nullable=False)
    address2: Mapped[str | None] = mapped_column(String, nullable=True)
    city: Mapped[str | None] = mapped_column(String, nullable=True)
    state: Mapped[str | None] = mapped_column(String, nullable=True)
    zip: Mapped[str | None] = mapped_column(String, nullable=True)
    country: Mapped[str] = mapped_column(String, nullable=False, default="US", server_default="US")

    corrected_address1: Mapped[str | None] = mapped_column(String, nullable=True)
    corrected_address2: Mapped[str | None] = mapped_column(String, nullable=True)
    corrected_city: Mapped[str | None] = mapped_column(String, nullable=True)
    corrected_state: Mapped[str | None] = mapped_column(String, nullable=True)
    corrected_zip: Mapped[str | None] = mapped_column(String, nullable=True)

    # Relationships
    provider: Mapped["Provider"] = relationship("Provider", back_populates="addresses")


class ProviderPhone(SubRecordValidationMixin, Base):
    """Contact phone number attached to a provider."""

    __tablename__ = "provider_phones"
    __table_args__ = _validation_constraints("provider_phones", PHONE_CORRECTION_FIELDS)

    CORRECTION_FIELDS = PHONE_CORRECTION_FIELDS

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    phone: Mapped[str] = mapped_column(String, nullable=False)
    phone_type: Mapped[str] = mapped_column(String, nullable=False, default="office", server_default="office")
    extension: Mapped[str | None] = mapped_column(String, nullable=True)

    corrected_phone: Mapped[str | None] = mapped_column(String, nullable=True)

    # Relationships
    provider: Mapped["Provider"] = relationship("Provider", back_populates="phones")


class ValidationSession(Base):
    """One operator's exclusive claim on one provider."""

    __tablename__ = "validation_sessions"
    __table_args__ = (
        Index(
            "uq_validation_sessions_provider_in_progress",
            "provider_id",
            unique=True,
            postgresql_where=text("status = 'in_progress'"),
        ),
        Index(
            "uq_validation_sessions_operator_in_progress",
            "operator_id",
            unique=True,
            postgresql_where=text("status = 'in_progress'"),
        ),
        CheckConstraint(
            "(status = 'completed') = (completed_at IS NOT NULL)",
            name="ck_validation_sessions_completed_at",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    provider_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("providers.id"), nullable=False, index=True
    )
    operator_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    status: Mapped[SessionStatus] = mapped_column(
        session_status_enum, nullable=False, default=SessionStatus.IN_PROGRESS
    )
    locked_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    call_attempt_1_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    call_attempt_2_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    quality_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    validation_results: Mapped[dict] = mapped_column(
        JSONB, nullable=False, default=dict, server_default=text("'{}'::jsonb"),
        comment="Progress and completion summary",
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("NOW()"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=text("NOW()"), nullable=False
    )

    # Relationships
    provider: Mapped["Provider"] = relationship("Provider", back_populates="sessions")

    @property
    def is_open(self) -> bool:
        return self.status == SessionStatus.IN_PROGRESS
