"""Domain error taxonomy.

Services raise these; ``evaltrack.main`` renders them as JSON responses with
the status code carried by each class.
"""

from fastapi import status


class EvalTrackError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = 'error'

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.__class__.__doc__ or self.code
        super().__init__(self.detail)


class InvalidScope(EvalTrackError):
    """Malformed or missing scope identifiers."""

    status_code = 422
    code = 'invalid_scope'


class InvalidAttempt(EvalTrackError):
    """Attempt values violate item count or timestamp rules."""

    status_code = 422
    code = 'invalid_attempt'


class InvalidRewardAction(EvalTrackError):
    """Unknown engagement action for an XP reward."""

    status_code = 422
    code = 'invalid_reward_action'


class Unauthenticated(EvalTrackError):
    """No valid acting user."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = 'unauthenticated'


class NotFound(EvalTrackError):
    """Addressed record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    code = 'not_found'


class AttemptAlreadyCompleted(EvalTrackError):
    """Attempt has already been completed."""

    status_code = status.HTTP_409_CONFLICT
    code = 'attempt_already_completed'


class ConflictRetryable(EvalTrackError):
    """A concurrent write collided; retry the request."""

    status_code = status.HTTP_409_CONFLICT
    code = 'conflict_retryable'


class StorageUnavailable(EvalTrackError):
    """The backing store is unavailable; retry later."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = 'storage_unavailable'
