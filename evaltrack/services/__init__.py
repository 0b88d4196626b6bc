from evaltrack.services import (
    attempt_service,
    leaderboard_service,
    profile_service,
    reward_ledger,
    scope_service,
    xp_levels,
)

__all__ = [
    'attempt_service',
    'leaderboard_service',
    'profile_service',
    'reward_ledger',
    'scope_service',
    'xp_levels',
]
