"""Adapter over the FSRS scheduling primitive.

The interval math lives in the ``fsrs`` package. This module only creates
fresh states, applies a rating, and classifies a state into the four
buckets the selector works with. States are treated as values: a
transition always returns a new ``fsrs.Card`` and leaves its input alone.
"""
from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from fsrs import Card as SchedulingState
from fsrs import Rating, Scheduler, State

__all__ = [
    "CardState", "Rating", "SchedulingState", "Transition",
    "classify", "due_date", "new_state", "transition", "utc",
]

DEFAULT_SCHEDULER = Scheduler()


class CardState(Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    RELEARNING = "relearning"


_FSRS_STATES = {
    State.Learning: CardState.LEARNING,
    State.Review: CardState.REVIEW,
    State.Relearning: CardState.RELEARNING,
}


@dataclass(frozen=True)
class Transition:
    state: SchedulingState
    due: datetime


def utc(moment: datetime | None = None) -> datetime:
    """Normalize a timestamp to an aware UTC datetime (fsrs requires UTC)."""
    if moment is None:
        return datetime.now(timezone.utc)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def new_state(card_id: int, now: datetime | None = None) -> SchedulingState:
    return SchedulingState(card_id=card_id, due=utc(now))


def transition(
    state: SchedulingState,
    rating: Rating,
    now: datetime | None = None,
    scheduler: Scheduler = DEFAULT_SCHEDULER,
) -> Transition:
    updated, _ = scheduler.review_card(deepcopy(state), Rating(rating), review_datetime=utc(now))
    return Transition(state=updated, due=updated.due)


def classify(state: SchedulingState) -> CardState:
    """Bucket a state; anything never reviewed or unrecognized counts as new."""
    last_review = getattr(state, "last_review", None)
    if last_review is None:
        return CardState.NEW
    return _FSRS_STATES.get(getattr(state, "state", None), CardState.NEW)


def due_date(state: SchedulingState) -> datetime:
    return utc(state.due)
