"""Read-only completion preview."""

import uuid

from provider_validation.repositories import (
    AddressRepository,
    PhoneRepository,
    SessionRepository,
)
from provider_validation.schemas.validation import AddressOut, PhoneOut, ValidationPreview
from provider_validation.services.base_service import BaseService


class PreviewService(BaseService):
    """Reports whether a session could be completed right now."""

    async def preview(self, session_id: uuid.UUID, operator_id: int) -> ValidationPreview:
        return await self.execute(session_id, operator_id)

    async def run(self, session_id: uuid.UUID, operator_id: int) -> ValidationPreview:
        async with self.db_client.transaction() as session:
            sessions = SessionRepository(session)
            addresses = AddressRepository(session)
            phones = PhoneRepository(session)

            validation_session = await self.lock_owned_session(sessions, session_id, operator_id)
            provider_id = validation_session.provider_id

            pending_addresses = await addresses.list_unvalidated(provider_id)
            pending_phones = await phones.list_unvalidated(provider_id)
            total_required = (
                await addresses.count_for_provider(provider_id)
                + await phones.count_for_provider(provider_id)
            )

            remaining = len(pending_addresses) + len(pending_phones)
            can_complete = remaining == 0
            if can_complete:
                message = "All validations complete. You can now complete the validation."
            else:
                message = (
                    f"Please validate {remaining} remaining items "
                    f"({len(pending_addresses)} addresses, {len(pending_phones)} phones) "
                    f"before completing."
                )

            return ValidationPreview(
                session_id=session_id,
                can_complete=can_complete,
                unvalidated_addresses=[AddressOut.model_validate(a) for a in pending_addresses],
                unvalidated_phones=[PhoneOut.model_validate(p) for p in pending_phones],
                total_required=total_required,
                total_validated=total_required - remaining,
                message=message,
            )
