from .api_client import EngagementApiClient, EngagementApiError
from .optimistic import EngagementState, MutationOutcome, MutationState, OptimisticMutationController

__all__ = [
    'EngagementApiClient',
    'EngagementApiError',
    'EngagementState',
    'MutationOutcome',
    'MutationState',
    'OptimisticMutationController',
]
