"""Performance summaries over the response log."""
from fact_drill.facts import parse_card_id
from fact_drill.models import OPERATIONS, ResponseRecord


def get_accuracy_label(score: float) -> str:
    if score >= 90:
        return "MASTERED"
    elif score >= 75:
        return "SOLID"
    elif score >= 50:
        return "DEVELOPING"
    return "STARTING"


def get_accuracy_color(score: float) -> str:
    if score >= 90:
        return "green"
    elif score >= 75:
        return "yellow"
    elif score >= 50:
        return "dark_orange"
    return "red"


def _summarize(records: list[ResponseRecord]) -> dict:
    total = len(records)
    correct = sum(1 for r in records if r.correct)
    if not total:
        return {"total": 0, "correct": 0, "accuracy": 0.0, "avg_time_ms": 0}
    return {
        "total": total,
        "correct": correct,
        "accuracy": round(correct / total * 100, 1),
        "avg_time_ms": round(sum(r.response_time_ms for r in records) / total),
    }


def get_overall_stats(responses: list[ResponseRecord]) -> dict:
    return _summarize(list(responses))


def get_daily_stats(responses: list[ResponseRecord], days: int = 7) -> list[dict]:
    """Per-day accuracy and average time for the most recent days with practice."""
    groups: dict = {}
    for record in responses:
        day = record.timestamp.astimezone().date()
        groups.setdefault(day, []).append(record)
    results = []
    for day in sorted(groups):
        summary = _summarize(groups[day])
        summary["day"] = day.isoformat()
        results.append(summary)
    return results[-days:] if days > 0 else []


def get_operation_accuracy(responses: list[ResponseRecord]) -> dict:
    """Accuracy per operation; operations never practiced are left out."""
    by_operation = {op: [] for op in OPERATIONS}
    for record in responses:
        fact = parse_card_id(record.card_id)
        if fact is not None:
            by_operation[fact.operation].append(record)
    return {
        op: _summarize(records)["accuracy"]
        for op, records in by_operation.items()
        if records
    }
