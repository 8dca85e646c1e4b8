"""Deck generation from the learner's settings."""
import logging
import random
from datetime import datetime

from fact_drill.config import Settings
from fact_drill.difficulty import boundary_targets, difficulty_weight
from fact_drill.facts import card_id, enumerate_facts
from fact_drill.models import Card
from fact_drill.scheduling import new_state, utc

logger = logging.getLogger(__name__)


def generate_deck(
    settings: Settings,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[Card]:
    """Build a fresh, shuffled deck with one new card per fact.

    Every call starts over: no scheduling state carries across from a
    previous deck.
    """
    rng = rng or random.Random()
    now = utc(now)
    facts = enumerate_facts(
        settings.min_number, settings.max_number,
        settings.operation_mode, settings.non_negative_subtraction,
    )
    targets = boundary_targets(settings.min_number, settings.max_number)
    cards = [
        Card(
            id=card_id(fact.operation, fact.left, fact.right),
            fact=fact,
            scheduling_state=new_state(index, now),
            difficulty_weight=difficulty_weight(fact, settings.difficulty_mode, targets),
        )
        for index, fact in enumerate(facts, 1)
    ]
    rng.shuffle(cards)
    logger.info(
        "Generated %d cards (%s, %d-%d, %s)", len(cards), settings.operation_mode,
        settings.min_number, settings.max_number, settings.difficulty_mode,
    )
    return cards
