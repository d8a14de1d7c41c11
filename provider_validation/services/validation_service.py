"""Recording of operator decisions on addresses and phones."""

import uuid
from typing import Optional

from provider_validation.core.clock import Clock, IdFactory, default_id_factory
from provider_validation.core.database import DatabaseClient
from provider_validation.core.exceptions import SubRecordNotFound
from provider_validation.repositories import (
    AddressRepository,
    PhoneRepository,
    SessionRepository,
)
from provider_validation.schemas.validation import ValidationUpdate
from provider_validation.services.base_service import BaseService


class ValidationService(BaseService):
    """Applies a batch of validation edits to one session's provider.

    The batch is all or nothing: an edit naming a record that does not
    belong to the session's provider aborts the transaction.
    """

    def __init__(
        self,
        db_client: DatabaseClient,
        clock: Optional[Clock] = None,
        id_factory: IdFactory = default_id_factory,
    ):
        super().__init__(db_client, clock)
        self.id_factory = id_factory

    async def record_validation(
        self, session_id: uuid.UUID, operator_id: int, update: ValidationUpdate
    ) -> None:
        await self.execute(session_id, operator_id, update)

    async def run(self, session_id: uuid.UUID, operator_id: int, update: ValidationUpdate) -> None:
        now = self.clock.now()

        async with self.db_client.transaction() as session:
            sessions = SessionRepository(session)
            addresses = AddressRepository(session)
            phones = PhoneRepository(session)

            validation_session = await self.lock_owned_session(sessions, session_id, operator_id)
            provider_id = validation_session.provider_id

            for edit in update.address_validations:
                updated = await addresses.apply_validation(
                    record_id=edit.address_id,
                    provider_id=provider_id,
                    is_correct=edit.is_correct,
                    operator_id=operator_id,
                    validated_at=now,
                    corrections=edit.corrections(),
                )
                if not updated:
                    raise SubRecordNotFound(addresses.kind, edit.address_id)

            for edit in update.phone_validations:
                updated = await phones.apply_validation(
                    record_id=edit.phone_id,
                    provider_id=provider_id,
                    is_correct=edit.is_correct,
                    operator_id=operator_id,
                    validated_at=now,
                    corrections=edit.corrections(),
                )
                if not updated:
                    raise SubRecordNotFound(phones.kind, edit.phone_id)

            for new_address in update.new_addresses:
                await addresses.add_validated(
                    record_id=self.id_factory(),
                    provider_id=provider_id,
                    operator_id=operator_id,
                    created_at=now,
                    **new_address.model_dump(),
                )

            for new_phone in update.new_phones:
                await phones.add_validated(
                    record_id=self.id_factory(),
                    provider_id=provider_id,
                    operator_id=operator_id,
                    created_at=now,
                    **new_phone.model_dump(),
                )

            await sessions.merge_results(
                validation_session,
                {
                    "last_update": now.isoformat(),
                    "addresses_updated": len(update.address_validations),
                    "phones_updated": len(update.phone_validations),
                    "new_addresses_added": len(update.new_addresses),
                    "new_phones_added": len(update.new_phones),
                },
                updated_at=now,
            )

        self.logger.info(
            "Validation recorded",
            extra={
                "session_id": str(session_id),
                "operator_id": operator_id,
                "addresses": len(update.address_validations),
                "phones": len(update.phone_validations),
            },
        )
