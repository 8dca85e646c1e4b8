# tests/test_speed.py
import random

import pytest

from fact_drill.speed import HISTORY_LIMIT, empty_stats, percentile, record_sample
from fact_drill.models import SpeedStats


def test_percentile_interpolates():
    assert percentile([1, 2, 3, 4], 0.5) == 2.5
    assert percentile([10, 20, 30, 40, 50], 0.25) == 20
    assert percentile([10, 20, 30, 40, 50], 0.9) == pytest.approx(46)


def test_percentile_edge_cases():
    assert percentile([], 0.5) == 0.0
    assert percentile([700], 0.9) == 700


def test_record_sample_does_not_mutate_input():
    stats = empty_stats()
    updated = record_sample(stats, 1200, warmup_target=3)
    assert stats.responses == ()
    assert updated.responses == (1200.0,)
    assert updated.percentiles.p50 == 1200


def test_percentiles_stay_ordered():
    generator = random.Random(42)
    stats = empty_stats()
    for _ in range(120):
        stats = record_sample(stats, generator.uniform(300, 9000), warmup_target=10)
        p = stats.percentiles
        assert p.p25 <= p.p50 <= p.p75 <= p.p90


def test_warmup_flips_exactly_once():
    stats = empty_stats()
    flags = []
    for t in range(1, 9):
        stats = record_sample(stats, t * 100, warmup_target=5)
        flags.append(stats.warmed_up)
    assert flags == [False, False, False, False, True, True, True, True]


def test_warmup_is_sticky():
    stats = SpeedStats(responses=(), warmed_up=True)
    assert record_sample(stats, 500, warmup_target=50).warmed_up


def test_negative_time_is_clamped():
    stats = record_sample(empty_stats(), -40, warmup_target=1)
    assert stats.responses == (0.0,)


def test_history_is_bounded():
    stats = empty_stats()
    for t in range(HISTORY_LIMIT + 25):
        stats = record_sample(stats, t, warmup_target=10)
    assert len(stats.responses) == HISTORY_LIMIT
    assert stats.responses[-1] == HISTORY_LIMIT + 24
    assert stats.warmed_up


def test_warmup_target_above_history_limit_is_reached():
    target = HISTORY_LIMIT + 100
    stats = empty_stats()
    for t in range(target - 1):
        stats = record_sample(stats, 1000 + t, warmup_target=target)
    assert len(stats.responses) == HISTORY_LIMIT
    assert not stats.warmed_up
    stats = record_sample(stats, 900, warmup_target=target)
    assert stats.sample_count == target
    assert stats.warmed_up


def test_sample_count_picks_up_from_existing_history():
    stats = SpeedStats(responses=(800.0, 900.0, 1000.0))
    assert record_sample(stats, 700, warmup_target=4).warmed_up
