"""Provider validation workflow endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from provider_validation.core.auth import get_current_operator
from provider_validation.core.clock import Clock, IdFactory, SystemClock, default_id_factory
from provider_validation.core.database import DatabaseClient, get_db_client
from provider_validation.schemas.common import ApiResponse
from provider_validation.schemas.validation import (
    AddressOut,
    AssignmentResponse,
    CallAttemptRequest,
    LinkedPairOut,
    OperationStatus,
    PhoneOut,
    ProviderOut,
    SessionOut,
    ValidationUpdate,
)
from provider_validation.services import (
    AssignmentResult,
    AssignmentService,
    CallAttemptService,
    CompletionService,
    PreviewService,
    StatsService,
    ValidationService,
)
from provider_validation.utils.logging import get_logger
from provider_validation.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


def get_clock() -> Clock:
    return SystemClock()


def get_id_factory() -> IdFactory:
    return default_id_factory


async def get_assignment_service(
    db_client: Annotated[DatabaseClient, Depends(get_db_client)],
    clock: Annotated[Clock, Depends(get_clock)],
    id_factory: Annotated[IdFactory, Depends(get_id_factory)],
) -> AssignmentService:
    return AssignmentService(db_client, clock, id_factory)


async def get_validation_service(
    db_client: Annotated[DatabaseClient, Depends(get_db_client)],
    clock: Annotated[Clock, Depends(get_clock)],
    id_factory: Annotated[IdFactory, Depends(get_id_factory)],
) -> ValidationService:
    return ValidationService(db_client, clock, id_factory)


async def get_call_attempt_service(
    db_client: Annotated[DatabaseClient, Depends(get_db_client)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> CallAttemptService:
    return CallAttemptService(db_client, clock)


async def get_completion_service(
    db_client: Annotated[DatabaseClient, Depends(get_db_client)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> CompletionService:
    return CompletionService(db_client, clock)


async def get_preview_service(
    db_client: Annotated[DatabaseClient, Depends(get_db_client)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> PreviewService:
    return PreviewService(db_client, clock)


async def get_stats_service(
    db_client: Annotated[DatabaseClient, Depends(get_db_client)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> StatsService:
    return StatsService(db_client, clock)


def _assignment_response(result: AssignmentResult) -> AssignmentResponse:
    return AssignmentResponse(
        provider=ProviderOut.model_validate(result.provider),
        session=SessionOut.model_validate(result.session),
        addresses=[AddressOut.model_validate(a) for a in result.addresses],
        phones=[PhoneOut.model_validate(p) for p in result.phones],
        address_phone_records=[
            LinkedPairOut(
                address=AddressOut.model_validate(pair.address),
                phone=PhoneOut.model_validate(pair.phone) if pair.phone is not None else None,
            )
            for pair in result.pairs
        ],
        resumed=result.resumed,
    )


@router.get(
    "/next",
    response_model=ApiResponse,
    summary="Get the next provider to validate",
    operation_id="get_next_provider",
)
async def get_next_provider(
    request: Request,
    operator_id: Annotated[int, Depends(get_current_operator)],
    service: Annotated[AssignmentService, Depends(get_assignment_service)],
) -> ApiResponse:
    """Resume the operator's open session or claim a new provider."""
    result = await service.assign(operator_id)

    message = "Resumed open validation session" if result.resumed else "Provider assigned"
    return create_api_response(
        data=_assignment_response(result),
        message=message,
        request=request,
    )


@router.put(
    "/sessions/{session_id}/validation",
    response_model=ApiResponse,
    summary="Record validation decisions",
    operation_id="update_session_validation",
)
async def update_validation(
    request: Request,
    session_id: UUID,
    payload: ValidationUpdate,
    operator_id: Annotated[int, Depends(get_current_operator)],
    service: Annotated[ValidationService, Depends(get_validation_service)],
) -> ApiResponse:
    """Apply address and phone decisions, and add missing records."""
    await service.record_validation(session_id, operator_id, payload)

    return create_api_response(
        data=OperationStatus(session_id=session_id),
        message="Validation updated",
        request=request,
    )


@router.post(
    "/sessions/{session_id}/call-attempts",
    response_model=ApiResponse,
    summary="Record a call attempt",
    operation_id="record_call_attempt",
)
async def record_call_attempt(
    request: Request,
    session_id: UUID,
    payload: CallAttemptRequest,
    operator_id: Annotated[int, Depends(get_current_operator)],
    service: Annotated[CallAttemptService, Depends(get_call_attempt_service)],
) -> ApiResponse:
    await service.record_call_attempt(session_id, operator_id, payload.attempt_number)

    return create_api_response(
        data=OperationStatus(session_id=session_id),
        message=f"Call attempt {payload.attempt_number} recorded",
        request=request,
    )


@router.post(
    "/sessions/{session_id}/complete",
    response_model=ApiResponse,
    status_code=status.HTTP_200_OK,
    summary="Complete a validation session",
    operation_id="complete_validation_session",
)
async def complete_session(
    request: Request,
    session_id: UUID,
    operator_id: Annotated[int, Depends(get_current_operator)],
    service: Annotated[CompletionService, Depends(get_completion_service)],
) -> ApiResponse:
    """Close the session once every address and phone is validated."""
    validation_session = await service.complete(session_id, operator_id)

    return create_api_response(
        data=SessionOut.model_validate(validation_session),
        message="Validation completed",
        request=request,
    )


@router.get(
    "/sessions/{session_id}/preview",
    response_model=ApiResponse,
    summary="Preview session completion",
    operation_id="get_validation_preview",
)
async def get_preview(
    request: Request,
    session_id: UUID,
    operator_id: Annotated[int, Depends(get_current_operator)],
    service: Annotated[PreviewService, Depends(get_preview_service)],
) -> ApiResponse:
    preview = await service.preview(session_id, operator_id)

    return create_api_response(data=preview, message=preview.message, request=request)


@router.get(
    "/stats",
    response_model=ApiResponse,
    summary="Get queue statistics",
    operation_id="get_queue_stats",
)
async def get_stats(
    request: Request,
    operator_id: Annotated[int, Depends(get_current_operator)],
    service: Annotated[StatsService, Depends(get_stats_service)],
) -> ApiResponse:
    stats = await service.stats(operator_id)

    return create_api_response(data=stats, message="Statistics retrieved", request=request)
