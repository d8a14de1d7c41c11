"""Work assignment and session lifecycle services."""

from provider_validation.services.assignment_service import AssignmentResult, AssignmentService
from provider_validation.services.call_attempt_service import CallAttemptService
from provider_validation.services.completion_service import CompletionService
from provider_validation.services.linkage import LinkedPair, pair_sub_records
from provider_validation.services.preview_service import PreviewService
from provider_validation.services.stats_service import StatsService
from provider_validation.services.validation_service import ValidationService

__all__ = [
    "AssignmentResult",
    "AssignmentService",
    "CallAttemptService",
    "CompletionService",
    "LinkedPair",
    "PreviewService",
    "StatsService",
    "ValidationService",
    "pair_sub_records",
]
