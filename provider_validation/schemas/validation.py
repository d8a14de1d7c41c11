"""Request and response schemas for the provider validation workflow."""

from datetime import datetime
from typing import ClassVar, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from provider_validation.database.models import SessionStatus, ValidationState


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class _SubRecordDecision(BaseModel):
    """Common shape of a validation decision on one sub-record."""

    model_config = ConfigDict(extra="forbid")

    is_correct: bool = Field(..., description="True if the stored value was confirmed")

    CORRECTION_FIELDS: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def corrections_only_when_incorrect(self):
        if self.is_correct and self.corrections():
            raise ValueError("corrected values may only be supplied when is_correct is false")
        return self

    def corrections(self) -> dict[str, str]:
        """Supplied corrected values; omitted fields are left out, not defaulted."""
        return {
            field: getattr(self, field)
            for field in self.CORRECTION_FIELDS
            if getattr(self, field) is not None
        }


class AddressValidation(_SubRecordDecision):
    """Decision on one address."""

    CORRECTION_FIELDS: ClassVar[tuple[str, ...]] = (
        "corrected_address1",
        "corrected_address2",
        "corrected_city",
        "corrected_state",
        "corrected_zip",
    )

    address_id: UUID
    corrected_address1: Optional[str] = None
    corrected_address2: Optional[str] = None
    corrected_city: Optional[str] = None
    corrected_state: Optional[str] = None
    corrected_zip: Optional[str] = None

    @field_validator(
        "corrected_address1",
        "corrected_address2",
        "corrected_city",
        "corrected_state",
        "corrected_zip",
    )
    @classmethod
    def normalize_corrections(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class PhoneValidation(_SubRecordDecision):
    """Decision on one phone."""

    CORRECTION_FIELDS: ClassVar[tuple[str, ...]] = ("corrected_phone",)

    phone_id: UUID
    corrected_phone: Optional[str] = None

    @field_validator("corrected_phone")
    @classmethod
    def normalize_correction(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class NewAddress(BaseModel):
    """Address missing from the bulk load, supplied by the operator."""

    model_config = ConfigDict(extra="forbid")

    address_category: str = Field(..., min_length=1)
    address1: str = Field(..., min_length=1)
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: str = "US"
    link_id: Optional[str] = None

    @field_validator("address2", "link_id")
    @classmethod
    def normalize_optional(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class NewPhone(BaseModel):
    """Phone missing from the bulk load, supplied by the operator."""

    model_config = ConfigDict(extra="forbid")

    phone: str = Field(..., min_length=1)
    phone_type: str = "office"
    extension: Optional[str] = None
    link_id: Optional[str] = None

    @field_validator("extension", "link_id")
    @classmethod
    def normalize_optional(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class ValidationUpdate(BaseModel):
    """Partial validation edits for one session."""

    model_config = ConfigDict(extra="forbid")

    address_validations: list[AddressValidation] = Field(default_factory=list)
    phone_validations: list[PhoneValidation] = Field(default_factory=list)
    new_addresses: list[NewAddress] = Field(default_factory=list)
    new_phones: list[NewPhone] = Field(default_factory=list)


class CallAttemptRequest(BaseModel):
    """Call attempt to stamp; the range is enforced by the workflow."""

    attempt_number: int


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ProviderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    npi: str
    gnpi: Optional[str] = None
    provider_name: str
    specialty: Optional[str] = None
    provider_group: Optional[str] = None
    license_numbers: list[str] = Field(default_factory=list)
    credentials: list[str] = Field(default_factory=list)
    is_active: bool


class _SubRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    provider_id: UUID
    validation_state: ValidationState
    validated_correct: Optional[bool] = None
    validated_by: Optional[int] = None
    validated_at: Optional[datetime] = None
    link_id: Optional[str] = None


class AddressOut(_SubRecordOut):
    address_category: str
    address1: str
    address2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: str = "US"
    corrected_address1: Optional[str] = None
    corrected_address2: Optional[str] = None
    corrected_city: Optional[str] = None
    corrected_state: Optional[str] = None
    corrected_zip: Optional[str] = None


class PhoneOut(_SubRecordOut):
    phone: str
    phone_type: str
    extension: Optional[str] = None
    corrected_phone: Optional[str] = None


class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    provider_id: UUID
    operator_id: int
    status: SessionStatus
    locked_at: datetime
    call_attempt_1_at: Optional[datetime] = None
    call_attempt_2_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    quality_score: Optional[float] = None


class LinkedPairOut(BaseModel):
    """Address with the phone captured alongside it, if any."""

    model_config = ConfigDict(from_attributes=True)

    address: AddressOut
    phone: Optional[PhoneOut] = None


class AssignmentResponse(BaseModel):
    provider: ProviderOut
    session: SessionOut
    addresses: list[AddressOut]
    phones: list[PhoneOut]
    address_phone_records: list[LinkedPairOut]
    resumed: bool = Field(..., description="True when an already open session was returned")


class ValidationPreview(BaseModel):
    """Whether a session can be completed, and what is still missing."""

    model_config = ConfigDict(from_attributes=True)

    session_id: UUID
    can_complete: bool
    unvalidated_addresses: list[AddressOut] = Field(default_factory=list)
    unvalidated_phones: list[PhoneOut] = Field(default_factory=list)
    total_required: int
    total_validated: int
    message: str


class QueueStats(BaseModel):
    total_pending: int
    completed_today: int
    in_progress: int


class OperationStatus(BaseModel):
    status: str = "success"
    session_id: UUID
