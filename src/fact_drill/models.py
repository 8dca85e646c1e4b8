"""Data classes for the arithmetic drill domain model."""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from fsrs import Card as SchedulingState

ADDITION = "addition"
SUBTRACTION = "subtraction"
MIXED = "mixed"
OPERATIONS = (ADDITION, SUBTRACTION)
OPERATION_MODES = (ADDITION, SUBTRACTION, MIXED)

BALANCED = "balanced"
FOCUS_BOUNDARIES = "focus-boundaries"
DIFFICULTY_MODES = (BALANCED, FOCUS_BOUNDARIES)


@dataclass(frozen=True)
class Fact:
    operation: str
    left: int
    right: int


@dataclass(frozen=True)
class Card:
    id: str
    fact: Fact
    scheduling_state: SchedulingState
    difficulty_weight: int = 1

    @property
    def operation(self) -> str:
        return self.fact.operation

    @property
    def left(self) -> int:
        return self.fact.left

    @property
    def right(self) -> int:
        return self.fact.right

    def with_state(self, state: SchedulingState) -> "Card":
        """Return a copy of this card holding a new scheduling state."""
        return replace(self, scheduling_state=state)


@dataclass(frozen=True)
class ResponseRecord:
    card_id: str
    answer: Optional[int]
    correct: bool
    response_time_ms: float
    timestamp: datetime


@dataclass(frozen=True)
class Percentiles:
    p25: float = 0.0
    p50: float = 0.0
    p75: float = 0.0
    p90: float = 0.0


@dataclass(frozen=True)
class SpeedStats:
    responses: tuple = ()
    percentiles: Percentiles = field(default_factory=Percentiles)
    warmed_up: bool = False
    sample_count: int = 0  # all samples seen, including those rolled out of history


@dataclass(frozen=True)
class SessionData:
    responses: tuple
    speed_stats: SpeedStats
    last_review_date: datetime
    session_start_time: datetime
    total_session_time: float = 0.0  # ms spent answering this session
