# tests/test_integration.py
"""End-to-end test of the core practice loop."""
import random
from datetime import timedelta

from fact_drill import db
from fact_drill.config import Settings
from fact_drill.dashboard import get_overall_stats
from fact_drill.models import MIXED
from fact_drill.scheduling import CardState, Rating, classify
from fact_drill.selector import forecast, get_card_stats, select_next
from fact_drill.session import load_practice_state, save_turn, submit_answer


def test_full_practice_workflow(tmp_db, now, scheduler):
    """Select, answer, grade, transition and re-aggregate over many turns."""
    settings = Settings(operation_mode=MIXED, min_number=0, max_number=5, warmup_target=10)
    db.init_db(tmp_db)
    generator = random.Random(7)
    state = load_practice_state(tmp_db, settings, now=now, rng=generator)
    assert get_card_stats(state.cards, now=now).new == 36 + 21

    clock = now
    ratings = []
    for turn in range(30):
        card = select_next(state.cards, now=clock, rng=generator)
        answer = card.left + card.right if card.operation == "addition" else card.left - card.right
        if turn % 7 == 3:
            answer += 1
        result = submit_answer(state, card.id, answer, 800 + generator.uniform(0, 2000), settings, now=clock, scheduler=scheduler)
        save_turn(tmp_db, result)
        ratings.append(result.rating)
        state = result.state
        clock += timedelta(seconds=20)

    assert all(r == Rating.Good for turn, r in enumerate(ratings[:10]) if turn % 7 != 3)
    assert ratings[3] == Rating.Again
    assert state.session.speed_stats.warmed_up

    counts = get_card_stats(state.cards, now=clock)
    assert counts.new < 57
    assert counts.learning + counts.review == 57 - counts.new
    assert sum(forecast(state.cards, days=365, now=clock)) == 57 - counts.new

    overall = get_overall_stats(db.load_responses(tmp_db))
    assert overall["total"] == 30
    assert overall["correct"] == 30 - 4

    reloaded = load_practice_state(tmp_db, settings, now=clock, rng=generator)
    reviewed = [c for c in reloaded.cards if classify(c.scheduling_state) != CardState.NEW]
    assert len(reviewed) == 57 - counts.new
