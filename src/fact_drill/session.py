"""Practice turns, deck regeneration and session lifecycle."""
import logging
import random
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from fact_drill import db
from fact_drill.config import Settings, deck_shape_changed
from fact_drill.deck import generate_deck
from fact_drill.facts import evaluate, is_correct, parse_answer
from fact_drill.grading import create_response_record, grade
from fact_drill.models import Card, ResponseRecord, SessionData
from fact_drill.scheduling import DEFAULT_SCHEDULER, Rating, transition, utc
from fact_drill.speed import empty_stats, record_sample

logger = logging.getLogger(__name__)

INACTIVITY_THRESHOLD = timedelta(hours=4)


@dataclass(frozen=True)
class PracticeState:
    cards: list
    session: SessionData

    def card(self, card_id: str) -> Card:
        for card in self.cards:
            if card.id == card_id:
                return card
        raise KeyError(card_id)


@dataclass(frozen=True)
class TurnResult:
    state: PracticeState
    card: Card
    record: ResponseRecord
    rating: Rating
    correct: bool
    correct_answer: int


def new_session(now: datetime | None = None) -> SessionData:
    now = utc(now)
    return SessionData(
        responses=(),
        speed_stats=empty_stats(),
        last_review_date=now,
        session_start_time=now,
        total_session_time=0.0,
    )


def should_start_new_session(
    last_activity: datetime,
    now: datetime,
    threshold: timedelta = INACTIVITY_THRESHOLD,
) -> bool:
    return utc(now) - utc(last_activity) > threshold


def start_session(
    session: SessionData,
    now: datetime | None = None,
    threshold: timedelta = INACTIVITY_THRESHOLD,
) -> SessionData:
    """Begin a new session if the learner has been away longer than ``threshold``.

    Speed statistics start over with the new session; the response log is kept.
    """
    now = utc(now)
    if not should_start_new_session(session.last_review_date, now, threshold):
        return session
    logger.info("Inactive since %s; starting a new session", session.last_review_date.isoformat())
    return replace(
        session,
        speed_stats=empty_stats(),
        session_start_time=now,
        total_session_time=0.0,
    )


def regenerate(
    settings: Settings,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> PracticeState:
    """Throw away the deck and statistics and start from the current settings."""
    return PracticeState(cards=generate_deck(settings, rng=rng, now=now), session=new_session(now))


def apply_settings(
    old: Settings,
    new: Settings,
    state: PracticeState,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> PracticeState:
    if deck_shape_changed(old, new):
        return regenerate(new, now=now, rng=rng)
    return state


def submit_answer(
    state: PracticeState,
    card_id: str,
    answer: int | str,
    response_time_ms: float,
    settings: Settings,
    now: datetime | None = None,
    scheduler=DEFAULT_SCHEDULER,
) -> TurnResult:
    """Grade one answer and fold it into the deck and session.

    The rating is computed against the speed statistics from before this
    answer; the new sample is recorded afterwards.
    """
    now = utc(now)
    card = state.card(card_id)
    response_time_ms = max(0.0, float(response_time_ms))
    parsed = parse_answer(answer)
    correct_answer = evaluate(card.fact)
    correct = is_correct(card.fact, answer)

    session = state.session
    rating = grade(correct, response_time_ms, session.speed_stats)
    moved = transition(card.scheduling_state, rating, now, scheduler=scheduler)
    updated = card.with_state(moved.state)
    record = create_response_record(card.id, parsed, correct, response_time_ms, now)

    session = replace(
        session,
        responses=session.responses + (record,),
        speed_stats=record_sample(session.speed_stats, response_time_ms, settings.warmup_target),
        last_review_date=now,
        total_session_time=session.total_session_time + response_time_ms,
    )
    cards = [updated if c.id == card.id else c for c in state.cards]
    return TurnResult(
        state=PracticeState(cards=cards, session=session),
        card=updated,
        record=record,
        rating=rating,
        correct=correct,
        correct_answer=correct_answer,
    )


# --- Persistence glue ---


def load_practice_state(
    db_path: str,
    settings: Settings,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> PracticeState:
    """Load deck and session, regenerating whatever is missing or unreadable."""
    now = utc(now)
    cards = db.load_deck(db_path)
    session = db.load_session(db_path)
    if cards is None:
        logger.info("No usable deck stored; generating one")
        return reset_practice(db_path, settings, now=now, rng=rng)
    if session is None:
        session = new_session(now)
    state = PracticeState(cards=cards, session=start_session(session, now))
    db.save_session(db_path, state.session)
    return state


def reset_practice(
    db_path: str,
    settings: Settings,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> PracticeState:
    """Regenerate and store a fresh deck."""
    return store_fresh_state(db_path, regenerate(settings, now=now, rng=rng))


def store_fresh_state(db_path: str, state: PracticeState) -> PracticeState:
    """Save a regenerated state; the old response log goes with the old deck."""
    db.clear_responses(db_path)
    save_practice_state(db_path, state)
    return state


def save_practice_state(db_path: str, state: PracticeState) -> None:
    db.save_deck(db_path, state.cards)
    db.save_session(db_path, state.session)


def save_turn(db_path: str, result: TurnResult) -> None:
    db.save_card(db_path, result.card)
    db.append_response(db_path, result.record)
    db.save_session(db_path, result.state.session)
