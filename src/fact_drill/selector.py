"""Next-card selection, deck counts and the upcoming-review forecast."""
import random
from dataclasses import dataclass
from datetime import datetime

from fact_drill.models import Card
from fact_drill.scheduling import CardState, classify, due_date, utc


@dataclass(frozen=True)
class CardStats:
    due: int
    new: int
    learning: int
    review: int


def _local_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now().astimezone()
    if now.tzinfo is None:
        return now.astimezone()
    return now


def _weighted_pick(group: list[Card], rng: random.Random) -> Card:
    weights = [max(1, card.difficulty_weight) for card in group]
    return rng.choices(group, weights=weights, k=1)[0]


def select_next(
    cards: list[Card],
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> Card | None:
    """Pick the card to present next.

    Due learning and relearning cards come first, then due review cards,
    then new cards. Inside a group a card is picked with probability
    proportional to its difficulty weight. If nothing is due and no new
    cards remain, the card due soonest is returned.
    """
    if not cards:
        return None
    rng = rng or random.Random()
    now = utc(now)

    relearn, review, new = [], [], []
    for card in cards:
        state = classify(card.scheduling_state)
        if state == CardState.NEW:
            new.append(card)
        elif due_date(card.scheduling_state) <= now:
            if state == CardState.REVIEW:
                review.append(card)
            else:
                relearn.append(card)

    for group in (relearn, review, new):
        if group:
            return _weighted_pick(group, rng)
    return min(cards, key=lambda c: due_date(c.scheduling_state))


def get_card_stats(cards: list[Card], now: datetime | None = None) -> CardStats:
    now = utc(now)
    due = new = learning = review = 0
    for card in cards:
        state = classify(card.scheduling_state)
        if state == CardState.NEW:
            new += 1
            continue
        if state == CardState.REVIEW:
            review += 1
        else:
            learning += 1
        if due_date(card.scheduling_state) <= now:
            due += 1
    return CardStats(due=due, new=new, learning=learning, review=review)


def forecast(cards: list[Card], days: int = 7, now: datetime | None = None) -> list[int]:
    """Count reviews falling on each of the next ``days`` calendar days.

    Day 0 is today in the timezone of ``now`` (local time by default).
    Overdue cards are counted on day 0; new cards are not scheduled yet
    and are left out.
    """
    now = _local_now(now)
    today = now.date()
    counts = [0] * max(0, days)
    for card in cards:
        if classify(card.scheduling_state) == CardState.NEW:
            continue
        due_day = due_date(card.scheduling_state).astimezone(now.tzinfo).date()
        offset = max(0, (due_day - today).days)
        if offset < days:
            counts[offset] += 1
    return counts
