"""Unit tests for request and response schemas."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from provider_validation.database.models import ValidationState
from provider_validation.schemas.validation import (
    AddressOut,
    AddressValidation,
    NewAddress,
    PhoneValidation,
    ValidationUpdate,
)


def test_corrections_rejected_when_correct():
    with pytest.raises(ValidationError, match="corrected values"):
        AddressValidation(address_id=uuid4(), is_correct=True, corrected_city="Dallas")


def test_blank_corrections_are_dropped():
    edit = AddressValidation(
        address_id=uuid4(), is_correct=False, corrected_city="  ", corrected_zip="75001"
    )

    assert edit.corrected_city is None
    assert edit.corrections() == {"corrected_zip": "75001"}


def test_blank_correction_on_correct_record_is_accepted():
    edit = PhoneValidation(phone_id=uuid4(), is_correct=True, corrected_phone="")

    assert edit.corrections() == {}


def test_unknown_fields_are_forbidden():
    with pytest.raises(ValidationError):
        PhoneValidation(phone_id=uuid4(), is_correct=False, corrected_extension="12")


def test_new_address_requires_street():
    with pytest.raises(ValidationError):
        NewAddress(address_category="practice", address1="")


def test_empty_update_defaults():
    update = ValidationUpdate()

    assert update.address_validations == []
    assert update.phone_validations == []
    assert update.new_addresses == []
    assert update.new_phones == []


@pytest.mark.parametrize(
    "state, expected",
    [
        (ValidationState.UNVALIDATED, None),
        (ValidationState.CORRECT, True),
        (ValidationState.INCORRECT, False),
    ],
)
def test_address_out_tri_state(make_address, clock, state, expected):
    validated = state != ValidationState.UNVALIDATED
    address = make_address(
        uuid4(),
        validation_state=state,
        validated_by=7 if validated else None,
        validated_at=clock.now() if validated else None,
    )

    out = AddressOut.model_validate(address)

    assert out.validation_state == state
    assert out.validated_correct is expected
