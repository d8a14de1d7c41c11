"""Quality score awarded when a session is completed."""

from datetime import timedelta

DEFAULT_TARGET_MINUTES_PER_ITEM = 2.0
DEFAULT_FAST_BONUS = 0.2
DEFAULT_SCORE_CEILING = 1.0


def calculate_quality_score(
    items: int,
    elapsed: timedelta,
    target_minutes_per_item: float = DEFAULT_TARGET_MINUTES_PER_ITEM,
    fast_bonus: float = DEFAULT_FAST_BONUS,
    ceiling: float = DEFAULT_SCORE_CEILING,
) -> float:
    """Score a session by how its duration compares to a per-item target.

    Finishing at or under the target earns up to ``fast_bonus`` above 1;
    finishing over it scores ``target / actual``. The result is clamped to
    ``[0, ceiling]``, so with the default ceiling the bonus never shows.

    Args:
        items: Number of addresses and phones in the session
        elapsed: Time between claim and completion
        target_minutes_per_item: Expected minutes per item
        fast_bonus: Maximum bonus for finishing early
        ceiling: Upper clamp, at most 1.0

    Returns:
        Score in ``[0, ceiling]``; 0.0 for an empty session
    """
    if items <= 0:
        return 0.0

    target = items * target_minutes_per_item
    actual = max(elapsed.total_seconds(), 0.0) / 60.0

    if actual <= target:
        score = 1.0 + (target - actual) / target * fast_bonus
    else:
        score = target / actual

    return min(max(score, 0.0), ceiling)
