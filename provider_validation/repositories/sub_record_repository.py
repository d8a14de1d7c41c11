"""Repositories for provider addresses and phones.

Both sub-record kinds share the validation columns, so the validation
write path lives on ``SubRecordRepository`` and the concrete repositories
only add ordering and construction details.
"""

import uuid
from datetime import datetime
from typing import Any, Optional, Sequence, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from provider_validation.database.models import (
    ProviderAddress,
    ProviderPhone,
    ValidationState,
)
from provider_validation.repositories.base_repository import BaseRepository

SubRecordType = TypeVar("SubRecordType", ProviderAddress, ProviderPhone)


class SubRecordRepository(BaseRepository[SubRecordType]):
    """Shared read and validation operations for sub-records."""

    kind: str = "sub-record"

    def _ordering(self) -> Sequence[Any]:
        return (self.model.created_at, self.model.id)

    async def list_for_provider(self, provider_id: uuid.UUID) -> list[SubRecordType]:
        """Get all sub-records of a provider in presentation order."""
        query = (
            select(self.model)
            .where(self.model.provider_id == provider_id)
            .order_by(*self._ordering())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def list_unvalidated(self, provider_id: uuid.UUID) -> list[SubRecordType]:
        """Get the provider's sub-records that still need a decision."""
        query = (
            select(self.model)
            .where(
                self.model.provider_id == provider_id,
                self.model.validation_state == ValidationState.UNVALIDATED,
            )
            .order_by(*self._ordering())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_for_provider(self, provider_id: uuid.UUID) -> int:
        query = select(func.count()).select_from(self.model).where(
            self.model.provider_id == provider_id
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def count_unvalidated(self, provider_id: uuid.UUID) -> int:
        query = select(func.count()).select_from(self.model).where(
            self.model.provider_id == provider_id,
            self.model.validation_state == ValidationState.UNVALIDATED,
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def apply_validation(
        self,
        record_id: uuid.UUID,
        provider_id: uuid.UUID,
        is_correct: bool,
        operator_id: int,
        validated_at: datetime,
        corrections: Optional[dict[str, Optional[str]]] = None,
    ) -> bool:
        """Record an operator's decision on one sub-record.

        Every correction column is written on each call: a correct decision
        clears them, an incorrect one stores exactly the supplied values and
        nulls the rest. Re-applying a decision therefore overwrites the
        previous one instead of merging with it.

        Args:
            record_id: Address or phone id
            provider_id: Provider the record must belong to
            is_correct: Operator's verdict
            operator_id: Operator making the decision
            validated_at: Decision time
            corrections: Corrected values keyed by correction column name

        Returns:
            True if the record was updated, False if it does not exist under
            ``provider_id``
        """
        supplied = corrections or {}
        unknown = set(supplied) - set(self.model.CORRECTION_FIELDS)
        if unknown:
            raise ValueError(f"Unknown correction fields for {self.kind}: {sorted(unknown)}")

        values: dict[str, Any] = {
            "validation_state": ValidationState.CORRECT if is_correct else ValidationState.INCORRECT,
            "validated_by": operator_id,
            "validated_at": validated_at,
            "updated_at": validated_at,
        }
        for field in self.model.CORRECTION_FIELDS:
            values[field] = None if is_correct else supplied.get(field)

        try:
            stmt = (
                update(self.model)
                .where(self.model.id == record_id, self.model.provider_id == provider_id)
                .values(**values)
                .execution_options(synchronize_session="fetch")
            )
            result = await self.session.execute(stmt)
            return result.rowcount == 1
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error validating {self.kind} {record_id}: {str(e)}",
                exc_info=True,
            )
            raise

    async def add_validated(
        self,
        record_id: uuid.UUID,
        provider_id: uuid.UUID,
        operator_id: int,
        created_at: datetime,
        **fields: Any,
    ) -> SubRecordType:
        """Insert an operator-supplied sub-record, pre-validated as correct."""
        return await self.create(
            id=record_id,
            provider_id=provider_id,
            validation_state=ValidationState.CORRECT,
            validated_by=operator_id,
            validated_at=created_at,
            created_by=operator_id,
            created_at=created_at,
            updated_at=created_at,
            **fields,
        )


class AddressRepository(SubRecordRepository[ProviderAddress]):
    """Repository for ProviderAddress records."""

    kind = "address"

    def __init__(self, session: AsyncSession):
        super().__init__(session, ProviderAddress)

    def _ordering(self) -> Sequence[Any]:
        return (ProviderAddress.address_category, ProviderAddress.created_at, ProviderAddress.id)


class PhoneRepository(SubRecordRepository[ProviderPhone]):
    """Repository for ProviderPhone records."""

    kind = "phone"

    def __init__(self, session: AsyncSession):
        super().__init__(session, ProviderPhone)
