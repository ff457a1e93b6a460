"""Time-decayed answer scoring.

Pure functions only: no I/O and no clock. The write path that adds scores to
the leaderboard lives in the gameplay service.
"""

import math

from config import SCORE_MAX_TIME_MS, SCORE_TIME_BONUS_MAX
from core.exceptions import ValidationError
from schemas.scoring import ScoreResult


def calculate_score(
    base_points: int,
    response_time_ms: float,
    max_time_ms: int = SCORE_MAX_TIME_MS,
    time_bonus_max: int = SCORE_TIME_BONUS_MAX,
) -> ScoreResult:
    """Score a correct answer with a bonus for answering quickly.

    The response time is clamped to [0, max_time_ms]. The bonus falls
    linearly from time_bonus_max at 0 ms to 0 at max_time_ms and is rounded
    half up.

    Args:
        base_points: Points awarded for the correct answer.
        response_time_ms: Time the player took to answer.
        max_time_ms: Time after which no bonus is given.
        time_bonus_max: Bonus for an instant answer.

    Returns:
        ScoreResult with the total score and the bonus part.

    Raises:
        ValidationError: If max_time_ms is not positive.
    """
    if max_time_ms <= 0:
        raise ValidationError("max_time_ms must be positive.")

    clamped_time = max(0, min(response_time_ms, max_time_ms))
    time_factor = 1 - clamped_time / max_time_ms
    time_bonus = int(math.floor(time_bonus_max * time_factor + 0.5))

    return ScoreResult(score=base_points + time_bonus, time_bonus=time_bonus)
