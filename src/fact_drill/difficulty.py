"""Difficulty weighting that biases practice toward error-prone facts."""
from fact_drill.facts import evaluate
from fact_drill.models import ADDITION, FOCUS_BOUNDARIES, Fact

BOUNDARY_PROXIMITY = 2

BASE_WEIGHT = 1
NEAR_BOUNDARY_WEIGHT = 2
CROSSING_WEIGHT = 3


def boundary_targets(min_number: int, max_number: int) -> tuple[int, ...]:
    """Multiples of ten inside the range, plus the range maximum, ascending."""
    if min_number > max_number:
        return ()
    start = -(-min_number // 10) * 10
    targets = set(range(start, max_number + 1, 10))
    targets.add(max_number)
    return tuple(sorted(targets))


def crosses_ten(fact: Fact) -> bool:
    left_ones, right_ones = fact.left % 10, fact.right % 10
    if fact.operation == ADDITION:
        return left_ones + right_ones >= 10
    return fact.left >= fact.right and left_ones < right_ones


def near_boundary(value: int, targets: tuple[int, ...]) -> bool:
    return any(abs(value - target) <= BOUNDARY_PROXIMITY for target in targets)


def difficulty_weight(fact: Fact, difficulty_mode: str, targets: tuple[int, ...]) -> int:
    if difficulty_mode != FOCUS_BOUNDARIES:
        return BASE_WEIGHT
    if crosses_ten(fact):
        return CROSSING_WEIGHT
    if any(near_boundary(v, targets) for v in (fact.left, fact.right, evaluate(fact))):
        return NEAR_BOUNDARY_WEIGHT
    return BASE_WEIGHT
