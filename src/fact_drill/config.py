"""Learner settings: defaults, presets and normalization of stored values."""
import logging
from dataclasses import asdict, dataclass, replace

from fact_drill.errors import SettingsError
from fact_drill.models import (
    ADDITION, BALANCED, DIFFICULTY_MODES, MIXED, OPERATION_MODES,
)

logger = logging.getLogger(__name__)

MAX_MIN_NUMBER = 99
MAX_MAX_NUMBER = 199

# Settings that change which cards exist or how they are weighted.
DECK_SHAPE_FIELDS = (
    "operation_mode", "min_number", "max_number",
    "non_negative_subtraction", "difficulty_mode",
)


@dataclass(frozen=True)
class Settings:
    warmup_target: int = 50
    operation_mode: str = MIXED
    min_number: int = 0
    max_number: int = 20
    non_negative_subtraction: bool = True
    difficulty_mode: str = BALANCED
    show_upcoming_reviews: bool = True


DEFAULT_SETTINGS = Settings()

PRESETS = {
    "grade-1": {
        "label": "Grade 1 (0-10, addition focus)",
        "operation_mode": ADDITION, "min_number": 0, "max_number": 10,
        "non_negative_subtraction": True,
    },
    "grade-2": {
        "label": "Grade 2 (0-20, mixed, non-negative)",
        "operation_mode": MIXED, "min_number": 0, "max_number": 20,
        "non_negative_subtraction": True,
    },
    "grade-3": {
        "label": "Grade 3 (0-50, mixed, non-negative)",
        "operation_mode": MIXED, "min_number": 0, "max_number": 50,
        "non_negative_subtraction": True,
    },
}


def _to_int(name: str, value) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError) as e:
        raise SettingsError(f"{name} must be a whole number, got {value!r}") from e


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def normalize_settings(raw: dict) -> Settings:
    """Build a Settings from loosely typed values, clamping the number range.

    Missing keys take their defaults. Unknown modes fall back to the default
    mode. ``min_number`` is kept at or above zero and ``max_number`` at or
    above ``min_number``, so the fact space is never inverted.
    """
    values = asdict(DEFAULT_SETTINGS)
    values.update({k: v for k, v in raw.items() if k in values and v is not None})

    min_number = min(max(0, _to_int("min_number", values["min_number"])), MAX_MIN_NUMBER)
    max_number = min(max(min_number, _to_int("max_number", values["max_number"])), MAX_MAX_NUMBER)

    operation_mode = values["operation_mode"]
    if operation_mode not in OPERATION_MODES:
        logger.warning("Unknown operation mode %r, using %s", operation_mode, DEFAULT_SETTINGS.operation_mode)
        operation_mode = DEFAULT_SETTINGS.operation_mode
    difficulty_mode = values["difficulty_mode"]
    if difficulty_mode not in DIFFICULTY_MODES:
        logger.warning("Unknown difficulty mode %r, using %s", difficulty_mode, DEFAULT_SETTINGS.difficulty_mode)
        difficulty_mode = DEFAULT_SETTINGS.difficulty_mode

    return Settings(
        warmup_target=max(1, _to_int("warmup_target", values["warmup_target"])),
        operation_mode=operation_mode,
        min_number=min_number,
        max_number=max_number,
        non_negative_subtraction=_to_bool(values["non_negative_subtraction"]),
        difficulty_mode=difficulty_mode,
        show_upcoming_reviews=_to_bool(values["show_upcoming_reviews"]),
    )


def settings_to_dict(settings: Settings) -> dict:
    return asdict(settings)


def apply_preset(settings: Settings, name: str) -> Settings:
    if name not in PRESETS:
        raise SettingsError(f"Unknown preset: {name}")
    preset = {k: v for k, v in PRESETS[name].items() if k != "label"}
    return replace(settings, **preset)


def deck_shape_changed(old: Settings, new: Settings) -> bool:
    return any(getattr(old, f) != getattr(new, f) for f in DECK_SHAPE_FIELDS)
