"""Arithmetic fact space enumeration and answer checking."""
from fact_drill.models import ADDITION, MIXED, SUBTRACTION, Fact

CARD_ID_PREFIX = "arith"


def card_id(operation: str, left: int, right: int) -> str:
    return f"{CARD_ID_PREFIX}:{operation}:{left}:{right}"


def parse_card_id(value: str) -> Fact | None:
    """Recover the fact behind a card id, or None if the id is not ours."""
    parts = value.split(":")
    if len(parts) != 4 or parts[0] != CARD_ID_PREFIX or parts[1] not in (ADDITION, SUBTRACTION):
        return None
    try:
        left, right = int(parts[2]), int(parts[3])
    except ValueError:
        return None
    if left < 0 or right < 0:
        return None
    return Fact(parts[1], left, right)


def enumerate_facts(
    min_number: int,
    max_number: int,
    operation_mode: str,
    non_negative_subtraction: bool = True,
) -> list[Fact]:
    """List every fact for a range and operation mode.

    The range is inclusive on both ends. With ``non_negative_subtraction``
    any subtraction whose result would be negative is left out. An inverted
    range gives no facts.
    """
    numbers = range(min_number, max_number + 1)
    facts = []
    if operation_mode in (ADDITION, MIXED):
        facts.extend(Fact(ADDITION, left, right) for left in numbers for right in numbers)
    if operation_mode in (SUBTRACTION, MIXED):
        for left in numbers:
            for right in numbers:
                if non_negative_subtraction and left < right:
                    continue
                facts.append(Fact(SUBTRACTION, left, right))
    return facts


def evaluate(fact: Fact) -> int:
    if fact.operation == ADDITION:
        return fact.left + fact.right
    return fact.left - fact.right


def format_question(fact: Fact) -> str:
    if fact.operation == ADDITION:
        return f"{fact.left} + {fact.right}"
    return f"{fact.left} − {fact.right}"


def parse_answer(answer: int | str) -> int | None:
    if isinstance(answer, int):
        return answer
    try:
        return int(str(answer).strip())
    except ValueError:
        return None


def is_correct(fact: Fact, answer: int | str) -> bool:
    parsed = parse_answer(answer)
    if parsed is None:
        return False
    return parsed == evaluate(fact)
