from abc import ABC, abstractmethod
from typing import Any, Optional
import uuid

from sqlalchemy.exc import SQLAlchemyError

from provider_validation.core.clock import Clock, SystemClock
from provider_validation.core.database import DatabaseClient
from provider_validation.core.exceptions import (
    AppError,
    SessionClosed,
    SessionNotFound,
    SessionNotOwned,
    StoreFailure,
)
from provider_validation.database.models import ValidationSession
from provider_validation.repositories.session_repository import SessionRepository
from provider_validation.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BaseService(ABC):
    """Base class for application services.

    Provides a standardized execution flow with validation and error handling.
    Every service runs against an explicitly passed store handle and clock.
    """

    def __init__(self, db_client: DatabaseClient, clock: Optional[Clock] = None):
        """Initialize the service.

        Args:
            db_client: Store handle owning the connection pool
            clock: Time source; defaults to the system clock
        """
        self.db_client = db_client
        self.clock = clock or SystemClock()
        self.logger = LOGGER

    async def execute(self, *args, **kwargs) -> Any:
        """Execute the service logic.

        This template method handles:
        1. Input validation
        2. Core logic execution
        3. Standardized error handling

        Returns:
            Result of the service execution

        Raises:
            AppError: If execution fails
        """
        try:
            self.validate(*args, **kwargs)

            result = await self.run(*args, **kwargs)

            return result

        except AppError:
            raise

        except SQLAlchemyError as e:
            self.logger.error(
                f"Store operation failed: {str(e)}",
                exc_info=True,
                extra={"service": self.__class__.__name__}
            )
            raise StoreFailure(f"Store operation failed: {str(e)}", original_error=e) from e

        except Exception as e:
            self.logger.error(
                f"Service execution failed: {str(e)}",
                exc_info=True,
                extra={"service": self.__class__.__name__}
            )
            raise AppError(f"Service execution failed: {str(e)}", original_error=e) from e

    def validate(self, *args, **kwargs):
        """Validate service input before any I/O.

        Override this method to implement custom validation logic.
        """
        pass

    @abstractmethod
    async def run(self, *args, **kwargs) -> Any:
        """Run the core service logic.

        Must be implemented by subclasses.
        """
        pass

    async def lock_owned_session(
        self, sessions: SessionRepository, session_id: uuid.UUID, operator_id: int
    ) -> ValidationSession:
        """Lock a session row and check that the operator may write to it.

        The row lock is held until the enclosing transaction ends, so the
        status and owner seen here cannot change before the caller's writes.

        Raises:
            SessionNotFound: No session has this id
            SessionClosed: The session is already completed
            SessionNotOwned: Another operator holds the session
        """
        validation_session = await sessions.lock_by_id(session_id)
        if validation_session is None:
            raise SessionNotFound(session_id)
        if not validation_session.is_open:
            raise SessionClosed(session_id)
        if validation_session.operator_id != operator_id:
            self.logger.warning(
                "Operator attempted to use a session held by another operator",
                extra={"session_id": str(session_id), "operator_id": operator_id},
            )
            raise SessionNotOwned(session_id, operator_id)
        return validation_session
