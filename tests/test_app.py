import random
from dataclasses import replace
from unittest.mock import patch

import pytest

from fact_drill import db
from fact_drill.app import (
    SessionExitRequested, cmd_forecast, cmd_preset, cmd_regenerate, cmd_settings,
    cmd_stats, run_practice_session, session_prompt,
)
from fact_drill.config import Settings
from fact_drill.models import ADDITION, SUBTRACTION
from fact_drill.selector import select_next
from fact_drill.session import load_practice_state

ONE_CARD = Settings(operation_mode=ADDITION, min_number=2, max_number=2)


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("fact_drill.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("fact_drill.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("fact_drill.app.Prompt.ask", return_value="hello"):
        result = session_prompt("test prompt")
        assert result == "hello"


def _state(tmp_db, settings=ONE_CARD):
    db.init_db(tmp_db)
    return load_practice_state(tmp_db, settings, rng=random.Random(0))


def test_run_practice_session_records_answers(tmp_db):
    """Answer the only card twice, then leave with 'q'."""
    state = _state(tmp_db)
    with patch("fact_drill.app.Prompt.ask", side_effect=["4", "5", "q"]):
        state = run_practice_session(tmp_db, ONE_CARD, state)
    responses = db.load_responses(tmp_db)
    assert [r.correct for r in responses] == [True, False]
    assert len(state.session.responses) == 2
    assert len(db.load_session(tmp_db).speed_stats.responses) == 2


def test_run_practice_session_rejects_non_numeric(tmp_db):
    state = _state(tmp_db)
    with patch("fact_drill.app.Prompt.ask", side_effect=["four", "q"]):
        state = run_practice_session(tmp_db, ONE_CARD, state)
    assert db.load_responses(tmp_db) == []
    assert state.session.responses == ()


def test_non_numeric_answer_asks_the_same_card_again(tmp_db):
    settings = Settings(operation_mode=ADDITION, min_number=1, max_number=2)
    state = _state(tmp_db, settings)
    with patch("fact_drill.app.select_next", wraps=select_next) as picker, \
            patch("fact_drill.app.Prompt.ask", side_effect=["four", "0", "q"]):
        state = run_practice_session(tmp_db, settings, state)
    # one draw for the question, one after it is answered
    assert picker.call_count == 2
    responses = db.load_responses(tmp_db)
    assert len(responses) == 1
    assert not responses[0].correct


def test_run_practice_session_empty_deck(tmp_db):
    state = _state(tmp_db)
    empty = replace(state, cards=[])
    with patch("fact_drill.app.Prompt.ask") as ask:
        assert run_practice_session(tmp_db, ONE_CARD, empty) is empty
        ask.assert_not_called()


def test_cmd_stats_and_forecast_run(tmp_db):
    state = _state(tmp_db)
    with patch("fact_drill.app.Prompt.ask", side_effect=["4", "q"]):
        state = run_practice_session(tmp_db, ONE_CARD, state)
    cmd_stats(tmp_db, ONE_CARD, state)
    cmd_forecast(ONE_CARD, state)


def test_cmd_settings_regenerates_on_shape_change(tmp_db):
    state = _state(tmp_db)
    with patch("fact_drill.app.Prompt.ask", side_effect=["4", "q"]):
        state = run_practice_session(tmp_db, ONE_CARD, state)
    answers = [SUBTRACTION]
    ints = [0, 3, 50]
    confirms = [True, True]
    with patch("fact_drill.app.Prompt.ask", side_effect=answers + ["balanced"]), \
            patch("fact_drill.app.IntPrompt.ask", side_effect=ints), \
            patch("fact_drill.app.Confirm.ask", side_effect=confirms):
        settings, state = cmd_settings(tmp_db, ONE_CARD, state)
    assert settings.operation_mode == SUBTRACTION
    assert len(state.cards) == 10
    assert db.load_settings(tmp_db) == settings
    assert len(db.load_deck(tmp_db)) == 10
    assert db.load_responses(tmp_db) == []


def test_cmd_settings_keeps_deck_when_shape_is_unchanged(tmp_db):
    state = _state(tmp_db)
    with patch("fact_drill.app.Prompt.ask", side_effect=[ADDITION, "balanced"]), \
            patch("fact_drill.app.IntPrompt.ask", side_effect=[2, 2, 10]), \
            patch("fact_drill.app.Confirm.ask", side_effect=[True, False]):
        settings, kept = cmd_settings(tmp_db, ONE_CARD, state)
    assert kept is state
    assert settings.warmup_target == 10
    assert not settings.show_upcoming_reviews


def test_cmd_preset(tmp_db):
    state = _state(tmp_db)
    with patch("fact_drill.app.Prompt.ask", return_value="grade-1"):
        settings, state = cmd_preset(tmp_db, ONE_CARD, state)
    assert (settings.min_number, settings.max_number) == (0, 10)
    assert len(state.cards) == 121


def test_cmd_regenerate_declined_keeps_state(tmp_db):
    state = _state(tmp_db)
    with patch("fact_drill.app.Confirm.ask", return_value=False):
        assert cmd_regenerate(tmp_db, ONE_CARD, state) is state
