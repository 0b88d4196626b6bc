from evaltrack.schemas.attempt import (
    AttemptComplete,
    AttemptCreate,
    AttemptHistoryResponse,
    AttemptOut,
    AttemptSummaryOut,
    LeaderboardEntryOut,
    LeaderboardResponse,
    UserSummaryOut,
)
from evaltrack.schemas.reward import (
    ActionRewardRequest,
    ContentUploadRewardRequest,
    GrantOutcomeOut,
    PathCompletionRewardRequest,
    RewardGrantOut,
    RewardHistoryResponse,
    XpLevelOut,
    XpStatusOut,
)
