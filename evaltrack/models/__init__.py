from evaltrack.db.base_class import Base
from evaltrack.models.attempt import AttemptRecord
from evaltrack.models.profile import Profile
from evaltrack.models.reward import RewardGrant, XpBalance


__all__ = [
    'AttemptRecord',
    'Base',
    'Profile',
    'RewardGrant',
    'XpBalance',
]
