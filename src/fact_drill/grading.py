"""Grading policy: correctness and speed to an FSRS rating."""
from dataclasses import dataclass
from datetime import datetime

from fact_drill.models import ResponseRecord, SpeedStats
from fact_drill.scheduling import Rating, utc

RATING_NAMES = {
    Rating.Again: "Again",
    Rating.Hard: "Hard",
    Rating.Good: "Good",
    Rating.Easy: "Easy",
}


@dataclass(frozen=True)
class GradingThresholds:
    """Percentile names bounding the Easy, Good and Hard bands."""
    easy: str = "p25"
    good: str = "p50"
    hard: str = "p75"


DEFAULT_THRESHOLDS = GradingThresholds()


def grade(
    correct: bool,
    response_time_ms: float,
    stats: SpeedStats,
    thresholds: GradingThresholds = DEFAULT_THRESHOLDS,
) -> Rating:
    """Rate one answer.

    ``stats`` must be the statistics from before this answer was recorded.
    Wrong answers are always Again. Until the learner is warmed up every
    correct answer is Good; afterwards the response time is compared with
    the learner's own percentiles, and a correct but slow answer is Again.
    """
    if not correct:
        return Rating.Again
    if not stats.warmed_up:
        return Rating.Good
    percentiles = stats.percentiles
    if response_time_ms <= getattr(percentiles, thresholds.easy):
        return Rating.Easy
    if response_time_ms <= getattr(percentiles, thresholds.good):
        return Rating.Good
    if response_time_ms <= getattr(percentiles, thresholds.hard):
        return Rating.Hard
    return Rating.Again


def rating_name(rating: Rating) -> str:
    return RATING_NAMES[Rating(rating)]


def create_response_record(
    card_id: str,
    answer: int | None,
    correct: bool,
    response_time_ms: float,
    now: datetime | None = None,
) -> ResponseRecord:
    return ResponseRecord(
        card_id=card_id,
        answer=answer,
        correct=correct,
        response_time_ms=max(0.0, float(response_time_ms)),
        timestamp=utc(now),
    )
