"""Running response-time statistics used for speed-aware grading."""
import math

from fact_drill.models import Percentiles, SpeedStats

HISTORY_LIMIT = 200


def empty_stats() -> SpeedStats:
    return SpeedStats()


def percentile(sorted_values: list[float], q: float) -> float:
    """Linear interpolation between closest ranks; ``q`` is in [0, 1]."""
    if not sorted_values:
        return 0.0
    position = (len(sorted_values) - 1) * q
    lower = math.floor(position)
    upper = math.ceil(position)
    if lower == upper:
        return float(sorted_values[lower])
    fraction = position - lower
    return sorted_values[lower] + (sorted_values[upper] - sorted_values[lower]) * fraction


def compute_percentiles(values) -> Percentiles:
    ordered = sorted(values)
    return Percentiles(
        p25=percentile(ordered, 0.25),
        p50=percentile(ordered, 0.50),
        p75=percentile(ordered, 0.75),
        p90=percentile(ordered, 0.90),
    )


def record_sample(stats: SpeedStats, response_time_ms: float, warmup_target: int) -> SpeedStats:
    """Return new statistics with one more response time folded in.

    ``stats`` is left untouched. Warmup counts every sample ever recorded,
    not just the rolling history, so a target above ``HISTORY_LIMIT`` is
    still reachable. Once warmed up, the flag stays set.
    """
    history = (stats.responses + (max(0.0, float(response_time_ms)),))[-HISTORY_LIMIT:]
    sample_count = max(stats.sample_count, len(stats.responses)) + 1
    return SpeedStats(
        responses=history,
        percentiles=compute_percentiles(history),
        warmed_up=stats.warmed_up or sample_count >= warmup_target,
        sample_count=sample_count,
    )
