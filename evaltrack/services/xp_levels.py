from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class XpLevel:
    name: str
    xp_required: int
    benefits: tuple[str, ...] = ()


XP_LEVELS: tuple[XpLevel, ...] = (
    XpLevel('Beginner', 0, ('Public content access', 'Basic profile')),
    XpLevel('Student', 500, ('Student badge', 'Exclusive content access')),
    XpLevel('Explorer', 2_000, ('Explorer badge', 'Learning path access')),
    XpLevel('Researcher', 5_000, ('Researcher badge', 'Special projects')),
    XpLevel('Expert', 10_000, ('Expert badge', 'Advanced content creation')),
    XpLevel('Master', 25_000, ('Master badge', 'Student mentoring')),
    XpLevel('Sage', 50_000, ('Sage badge', 'Premium learning paths')),
    XpLevel('Scholar', 100_000, ('Scholar badge', 'Exclusive community')),
    XpLevel('Virtuoso', 250_000, ('Virtuoso badge', 'Institution collaboration')),
    XpLevel('Prodigy', 500_000, ('Prodigy badge', 'Special certifications')),
    XpLevel('Genius', 1_000_000, ('Genius badge', 'Platform ambassador')),
    XpLevel('Legend', 2_500_000, ('Legend badge', 'Official education influencer')),
    XpLevel('Mythic', 5_000_000, ('Mythic badge', 'Global community leader')),
    XpLevel('Immortal', 10_000_000, ('Immortal badge', 'Platform hall of fame')),
)


def get_user_level(experience_points: int) -> XpLevel:
    xp = max(0, experience_points)
    current = XP_LEVELS[0]
    for level in XP_LEVELS:
        if xp >= level.xp_required:
            current = level
        else:
            break
    return current


def get_next_level(experience_points: int) -> XpLevel | None:
    current = get_user_level(experience_points)
    index = XP_LEVELS.index(current)
    if index + 1 < len(XP_LEVELS):
        return XP_LEVELS[index + 1]
    return None


def get_level_progress(experience_points: int) -> int:
    """Percent (0-100) of the way from the current level to the next one."""
    xp = max(0, experience_points)
    current = get_user_level(xp)
    upcoming = get_next_level(xp)
    if upcoming is None:
        return 100
    span = upcoming.xp_required - current.xp_required
    return min(100, math.floor((xp - current.xp_required) / span * 100 + 0.5))


def get_xp_to_next_level(experience_points: int) -> int:
    upcoming = get_next_level(experience_points)
    if upcoming is None:
        return 0
    return max(0, upcoming.xp_required - max(0, experience_points))
