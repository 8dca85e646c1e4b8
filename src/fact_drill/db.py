"""Database initialization, connection management and the drill's local store."""
import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from fact_drill.config import DEFAULT_SETTINGS, Settings, normalize_settings, settings_to_dict
from fact_drill.errors import SettingsError
from fact_drill.facts import parse_card_id
from fact_drill.models import Card, Percentiles, ResponseRecord, SessionData, SpeedStats
from fact_drill.scheduling import SchedulingState, utc
from fact_drill.speed import empty_stats

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = str(Path.home() / ".fact_drill" / "drill.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS cards (
    id TEXT PRIMARY KEY,
    operation TEXT NOT NULL,
    left_operand INTEGER NOT NULL,
    right_operand INTEGER NOT NULL,
    difficulty_weight INTEGER NOT NULL DEFAULT 1,
    scheduling_state TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS responses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    card_id TEXT NOT NULL,
    answer INTEGER,
    correct INTEGER NOT NULL,
    response_time_ms REAL NOT NULL,
    answered_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS session_data (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    speed_stats TEXT NOT NULL,
    last_review_date TEXT NOT NULL,
    session_start_time TEXT NOT NULL,
    total_session_time REAL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


# --- Cards ---


def _card_row(card: Card) -> tuple:
    return (
        card.id, card.operation, card.left, card.right, card.difficulty_weight,
        json.dumps(card.scheduling_state.to_dict()),
    )


def _card_from_row(row: sqlite3.Row) -> Card | None:
    fact = parse_card_id(row["id"])
    if fact is None or (fact.operation, fact.left, fact.right) != (
        row["operation"], row["left_operand"], row["right_operand"]
    ):
        return None
    if row["difficulty_weight"] is None or row["difficulty_weight"] < 1:
        return None
    try:
        state = SchedulingState.from_dict(json.loads(row["scheduling_state"]))
    except (TypeError, ValueError, KeyError) as e:
        logger.debug("Bad scheduling state for %s: %s", row["id"], e)
        return None
    return Card(id=row["id"], fact=fact, scheduling_state=state, difficulty_weight=row["difficulty_weight"])


def load_deck(db_path: str) -> list[Card] | None:
    """Load the stored deck, or None when there is none or it can't be trusted.

    A single unreadable row (including cards from the old multiplication
    deck) rejects the whole deck so the caller regenerates from settings.
    """
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM cards").fetchall()
    conn.close()
    if not rows:
        return None
    cards = []
    for row in rows:
        card = _card_from_row(row)
        if card is None:
            logger.warning("Stored deck has an unreadable card %r; discarding deck", row["id"])
            return None
        cards.append(card)
    return cards


def save_deck(db_path: str, cards: list[Card]) -> None:
    """Replace the stored deck wholesale."""
    conn = get_connection(db_path)
    conn.execute("DELETE FROM cards")
    conn.executemany(
        """INSERT INTO cards
        (id, operation, left_operand, right_operand, difficulty_weight, scheduling_state)
        VALUES (?, ?, ?, ?, ?, ?)""",
        [_card_row(c) for c in cards],
    )
    conn.commit()
    conn.close()


def save_card(db_path: str, card: Card) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "UPDATE cards SET scheduling_state = ? WHERE id = ?",
        (json.dumps(card.scheduling_state.to_dict()), card.id),
    )
    conn.commit()
    conn.close()


# --- Responses ---


def append_response(db_path: str, record: ResponseRecord) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO responses (card_id, answer, correct, response_time_ms, answered_at) VALUES (?, ?, ?, ?, ?)",
        (record.card_id, record.answer, int(record.correct), record.response_time_ms, record.timestamp.isoformat()),
    )
    conn.commit()
    conn.close()


def clear_responses(db_path: str) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM responses")
    conn.commit()
    conn.close()


def load_responses(db_path: str) -> list[ResponseRecord]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM responses ORDER BY id").fetchall()
    conn.close()
    return [
        ResponseRecord(
            card_id=r["card_id"],
            answer=r["answer"],
            correct=bool(r["correct"]),
            response_time_ms=r["response_time_ms"],
            timestamp=utc(datetime.fromisoformat(r["answered_at"])),
        )
        for r in rows
    ]


# --- Session ---


def _stats_to_json(stats: SpeedStats) -> str:
    return json.dumps({
        "responses": list(stats.responses),
        "percentiles": {
            "p25": stats.percentiles.p25, "p50": stats.percentiles.p50,
            "p75": stats.percentiles.p75, "p90": stats.percentiles.p90,
        },
        "warmed_up": stats.warmed_up,
        "sample_count": stats.sample_count,
    })


def _stats_from_json(text: str) -> SpeedStats:
    data = json.loads(text)
    responses = tuple(float(v) for v in data["responses"])
    return SpeedStats(
        responses=responses,
        percentiles=Percentiles(**{k: float(v) for k, v in data["percentiles"].items()}),
        warmed_up=bool(data["warmed_up"]),
        sample_count=int(data.get("sample_count", len(responses))),
    )


def save_session(db_path: str, session: SessionData) -> None:
    """Store speed statistics and session timing; responses are appended separately."""
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO session_data (id, speed_stats, last_review_date, session_start_time, total_session_time)
        VALUES (1, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET speed_stats=excluded.speed_stats,
            last_review_date=excluded.last_review_date,
            session_start_time=excluded.session_start_time,
            total_session_time=excluded.total_session_time""",
        (
            _stats_to_json(session.speed_stats),
            session.last_review_date.isoformat(),
            session.session_start_time.isoformat(),
            session.total_session_time,
        ),
    )
    conn.commit()
    conn.close()


def load_session(db_path: str) -> SessionData | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM session_data WHERE id = 1").fetchone()
    conn.close()
    if row is None:
        return None
    try:
        stats = _stats_from_json(row["speed_stats"])
    except (TypeError, ValueError, KeyError) as e:
        logger.warning("Stored speed statistics are unreadable (%s); starting over", e)
        stats = empty_stats()
    try:
        last_review = utc(datetime.fromisoformat(row["last_review_date"]))
    except (TypeError, ValueError):
        logger.warning("Stored session dates are unreadable; discarding session")
        return None
    try:
        session_start = utc(datetime.fromisoformat(row["session_start_time"]))
    except (TypeError, ValueError):
        session_start = last_review
    return SessionData(
        responses=tuple(load_responses(db_path)),
        speed_stats=stats,
        last_review_date=last_review,
        session_start_time=session_start,
        total_session_time=row["total_session_time"] or 0.0,
    )


# --- Settings ---


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def load_settings(db_path: str) -> Settings:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT key, value FROM user_settings").fetchall()
    conn.close()
    try:
        return normalize_settings({r["key"]: r["value"] for r in rows})
    except SettingsError as e:
        logger.warning("Stored settings are unreadable (%s); using defaults", e)
        return DEFAULT_SETTINGS


def save_settings(db_path: str, settings: Settings) -> None:
    for key, value in settings_to_dict(settings).items():
        set_setting(db_path, key, str(value))


def clear_all_data(db_path: str) -> None:
    """Remove cards, responses, session and settings (settings revert to defaults)."""
    conn = get_connection(db_path)
    for table in ("cards", "responses", "session_data", "user_settings"):
        conn.execute(f"DELETE FROM {table}")
    conn.commit()
    conn.close()
