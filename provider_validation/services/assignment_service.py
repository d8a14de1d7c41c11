"""Assignment of providers to operators."""

from dataclasses import dataclass, field
from typing import Optional

from provider_validation.core.clock import Clock, IdFactory, default_id_factory
from provider_validation.core.database import DatabaseClient
from provider_validation.core.exceptions import NoWorkAvailable, StoreFailure
from provider_validation.database.models import (
    Provider,
    ProviderAddress,
    ProviderPhone,
    ValidationSession,
)
from provider_validation.repositories import (
    AddressRepository,
    PhoneRepository,
    ProviderRepository,
    SessionRepository,
)
from provider_validation.services.base_service import BaseService
from provider_validation.services.linkage import LinkedPair, pair_sub_records


@dataclass
class AssignmentResult:
    """Everything an operator needs to start working on a provider."""

    provider: Provider
    session: ValidationSession
    addresses: list[ProviderAddress] = field(default_factory=list)
    phones: list[ProviderPhone] = field(default_factory=list)
    pairs: list[LinkedPair] = field(default_factory=list)
    resumed: bool = False


class AssignmentService(BaseService):
    """Hands each operator exactly one provider at a time.

    An operator who already holds an open session gets it back. Otherwise
    one eligible provider is claimed with ``FOR UPDATE SKIP LOCKED`` so that
    concurrent operators never receive the same provider, and a new session
    is opened on it inside the same transaction.
    """

    def __init__(
        self,
        db_client: DatabaseClient,
        clock: Optional[Clock] = None,
        id_factory: IdFactory = default_id_factory,
    ):
        super().__init__(db_client, clock)
        self.id_factory = id_factory

    async def assign(self, operator_id: int) -> AssignmentResult:
        """Resume or create the operator's session.

        Raises:
            NoWorkAvailable: Nothing is eligible and the operator holds no session
            StoreFailure: Storage fault; the transaction was rolled back
        """
        return await self.execute(operator_id)

    async def run(self, operator_id: int) -> AssignmentResult:
        async with self.db_client.transaction() as session:
            providers = ProviderRepository(session)
            sessions = SessionRepository(session)

            await sessions.lock_operator(operator_id)

            resumed = True
            validation_session = await sessions.get_open_for_operator(operator_id)
            if validation_session is not None:
                provider = await providers.get_by_id(validation_session.provider_id)
                if provider is None:
                    raise StoreFailure(
                        f"Provider {validation_session.provider_id} of open session "
                        f"{validation_session.id} is missing"
                    )
            else:
                resumed = False
                provider = await self._claim_provider(providers, sessions)
                if provider is None:
                    self.logger.info(
                        "No providers available for assignment",
                        extra={"operator_id": operator_id},
                    )
                    raise NoWorkAvailable()

                validation_session = await sessions.create_session(
                    session_id=self.id_factory(),
                    provider_id=provider.id,
                    operator_id=operator_id,
                    locked_at=self.clock.now(),
                )

            addresses = await AddressRepository(session).list_for_provider(provider.id)
            phones = await PhoneRepository(session).list_for_provider(provider.id)

        self.logger.info(
            "Provider assigned",
            extra={
                "operator_id": operator_id,
                "provider_id": str(provider.id),
                "session_id": str(validation_session.id),
                "resumed": resumed,
            },
        )

        return AssignmentResult(
            provider=provider,
            session=validation_session,
            addresses=addresses,
            phones=phones,
            pairs=pair_sub_records(addresses, phones),
            resumed=resumed,
        )

    async def _claim_provider(
        self, providers: ProviderRepository, sessions: SessionRepository
    ) -> Optional[Provider]:
        """Lock an eligible provider that has no open session.

        The claim query can judge eligibility on a snapshot taken before a
        concurrent session commit. Once the row lock is held, the open
        session check is repeated in a new statement, which sees every
        committed session; a provider that fails it is passed over.
        """
        while True:
            provider = await providers.claim_next_available()
            if provider is None:
                return None
            if not await sessions.provider_has_open_session(provider.id):
                return provider
            self.logger.info(
                "Claimed provider already has an open session; selecting another",
                extra={"provider_id": str(provider.id)},
            )
