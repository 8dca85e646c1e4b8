"""Interactive CLI application."""
import logging
import random
import time

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from fact_drill import db
from fact_drill.config import (
    DEFAULT_SETTINGS, PRESETS, Settings, apply_preset, normalize_settings,
)
from fact_drill.dashboard import (
    get_accuracy_color, get_accuracy_label, get_daily_stats, get_operation_accuracy,
    get_overall_stats,
)
from fact_drill.facts import format_question, parse_answer
from fact_drill.grading import rating_name
from fact_drill.models import DIFFICULTY_MODES, OPERATION_MODES
from fact_drill.scheduling import CardState, classify
from fact_drill.selector import forecast, get_card_stats, select_next
from fact_drill.session import (
    PracticeState, apply_settings, load_practice_state, reset_practice, save_turn,
    store_fresh_state, submit_answer,
)

console = Console()
logger = logging.getLogger(__name__)

EXIT_WORDS = ("q", "menu")
FORECAST_DAYS = 7


class SessionExitRequested(Exception):
    """Raised when the learner leaves a drill to return to the menu."""


def session_prompt(prompt: str, **kwargs) -> str:
    value = Prompt.ask(prompt, **kwargs)
    if value.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return value


def show_welcome():
    console.print(Panel(
        "[bold]Arithmetic Fact Drill[/bold]\n[dim]Spaced repetition for addition and subtraction[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("practice", "Answer facts until you type q"),
        ("stats", "Deck counts, speed and accuracy"),
        ("forecast", f"Reviews due over the next {FORECAST_DAYS} days"),
        ("settings", "Change range, operations and warmup"),
        ("preset", "Apply a grade preset"),
        ("regenerate", "Rebuild the deck from current settings"),
        ("reset", "Erase all progress and settings"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def run_practice_session(
    db_path: str,
    settings: Settings,
    state: PracticeState,
    rng: random.Random | None = None,
) -> PracticeState:
    """Drill cards one at a time; every graded answer is saved before the next card."""
    if not state.cards:
        console.print("[yellow]The deck is empty. Widen the number range in settings.[/yellow]")
        return state
    console.print("\n[bold]Practice[/bold] [dim](type q to return to the menu)[/dim]\n")
    while True:
        card = select_next(state.cards, rng=rng)
        if card is None:
            return state
        label = classify(card.scheduling_state).value
        console.print(Panel(f"[bold]{format_question(card.fact)} = ?[/bold]", title=label, border_style="cyan"))
        started = time.perf_counter()
        while True:
            try:
                raw = session_prompt("Answer")
            except SessionExitRequested:
                return state
            if parse_answer(raw) is not None:
                break
            console.print("[red]Please enter a whole number.[/red]")
        elapsed_ms = (time.perf_counter() - started) * 1000

        warming_up = not state.session.speed_stats.warmed_up
        result = submit_answer(state, card.id, raw, elapsed_ms, settings)
        save_turn(db_path, result)
        state = result.state

        note = " [dim](warmup)[/dim]" if warming_up and result.correct else ""
        if result.correct:
            console.print(f"[green]Correct![/green] {elapsed_ms / 1000:.1f}s • Rating: {rating_name(result.rating)}{note}")
        else:
            console.print(f"[red]Incorrect.[/red] Answer: [green]{result.correct_answer}[/green] • Rating: {rating_name(result.rating)}")
        console.print()


def cmd_stats(db_path: str, settings: Settings, state: PracticeState):
    card_stats = get_card_stats(state.cards)
    table = Table(title="Deck")
    for column in ("Due", "New", "Learning", "Review", "Total"):
        table.add_column(column, justify="right")
    table.add_row(
        str(card_stats.due), str(card_stats.new), str(card_stats.learning),
        str(card_stats.review), str(len(state.cards)),
    )
    console.print(table)

    speed = state.session.speed_stats
    if speed.warmed_up:
        p = speed.percentiles
        console.print(
            f"\n  Warmed up ({len(speed.responses)} responses)  |  "
            f"p25 {p.p25:.0f}ms  p50 {p.p50:.0f}ms  p75 {p.p75:.0f}ms  p90 {p.p90:.0f}ms"
        )
    else:
        console.print(f"\n  Warmup: {len(speed.responses)}/{settings.warmup_target}")
    console.print(f"  Session started {state.session.session_start_time.astimezone():%H:%M}")

    responses = db.load_responses(db_path)
    overall = get_overall_stats(responses)
    color = get_accuracy_color(overall["accuracy"])
    console.print(
        f"\n  Answers: [bold]{overall['total']}[/bold]  |  "
        f"Accuracy: [{color}]{overall['accuracy']}% {get_accuracy_label(overall['accuracy'])}[/{color}]  |  "
        f"Avg time: [bold]{overall['avg_time_ms']}ms[/bold]"
    )
    for operation, accuracy in get_operation_accuracy(responses).items():
        console.print(f"  {operation.title()}: [{get_accuracy_color(accuracy)}]{accuracy}%[/{get_accuracy_color(accuracy)}]")

    daily = get_daily_stats(responses)
    if not daily:
        console.print("\n[dim]No data available yet. Start practicing to see your progress![/dim]")
        return
    trend = Table(title="Performance Trends (Last 7 Days)")
    trend.add_column("Day")
    trend.add_column("Answers", justify="right")
    trend.add_column("Accuracy", justify="right")
    trend.add_column("Avg time", justify="right")
    for day in daily:
        trend.add_row(day["day"], str(day["total"]), f"{day['accuracy']}%", f"{day['avg_time_ms']}ms")
    console.print(trend)


def cmd_forecast(settings: Settings, state: PracticeState):
    if not settings.show_upcoming_reviews:
        console.print("[dim]Upcoming reviews are hidden. Turn them on in settings.[/dim]")
        return
    counts = forecast(state.cards, days=FORECAST_DAYS)
    table = Table(title="Upcoming Reviews")
    table.add_column("Day")
    table.add_column("Cards", justify="right")
    for offset, count in enumerate(counts):
        day = "Today" if offset == 0 else ("Tomorrow" if offset == 1 else f"+{offset}d")
        table.add_row(day, str(count))
    console.print(table)
    new_cards = sum(1 for c in state.cards if classify(c.scheduling_state) == CardState.NEW)
    console.print(f"  [dim]{new_cards} cards not yet seen[/dim]")


def _rebuild(db_path: str, settings: Settings, message: str) -> PracticeState:
    state = reset_practice(db_path, settings)
    console.print(f"[green]{message}[/green] {len(state.cards)} cards.")
    return state


def cmd_settings(db_path: str, settings: Settings, state: PracticeState) -> tuple[Settings, PracticeState]:
    console.print("\n[bold]Settings[/bold]")
    raw = {
        "operation_mode": Prompt.ask("Operations", choices=list(OPERATION_MODES), default=settings.operation_mode),
        "min_number": IntPrompt.ask("Minimum number", default=settings.min_number),
        "max_number": IntPrompt.ask("Maximum number", default=settings.max_number),
        "non_negative_subtraction": Confirm.ask("Keep subtraction results non-negative?", default=settings.non_negative_subtraction),
        "difficulty_mode": Prompt.ask("Difficulty", choices=list(DIFFICULTY_MODES), default=settings.difficulty_mode),
        "warmup_target": IntPrompt.ask("Warmup answers before speed grading", default=settings.warmup_target),
        "show_upcoming_reviews": Confirm.ask("Show upcoming reviews?", default=settings.show_upcoming_reviews),
    }
    updated = normalize_settings(raw)
    db.save_settings(db_path, updated)
    rebuilt = apply_settings(settings, updated, state)
    if rebuilt is state:
        console.print("[green]Settings saved.[/green]")
        return updated, state
    store_fresh_state(db_path, rebuilt)
    console.print(f"[green]Deck regenerated with current settings.[/green] {len(rebuilt.cards)} cards.")
    return updated, rebuilt


def cmd_preset(db_path: str, settings: Settings, state: PracticeState) -> tuple[Settings, PracticeState]:
    for name, preset in PRESETS.items():
        console.print(f"  [cyan]{name:<10}[/cyan] {preset['label']}")
    name = Prompt.ask("Preset", choices=list(PRESETS))
    updated = apply_preset(settings, name)
    db.save_settings(db_path, updated)
    return updated, _rebuild(db_path, updated, f"{PRESETS[name]['label']} preset applied and deck regenerated.")


def cmd_regenerate(db_path: str, settings: Settings, state: PracticeState) -> PracticeState:
    if not Confirm.ask("This discards all card progress. Continue?", default=False):
        return state
    return _rebuild(db_path, settings, "Deck regenerated with current settings.")


def cmd_reset(db_path: str, settings: Settings, state: PracticeState) -> tuple[Settings, PracticeState]:
    if not Confirm.ask("Erase all progress and settings?", default=False):
        return settings, state
    db.clear_all_data(db_path)
    db.save_settings(db_path, DEFAULT_SETTINGS)
    return DEFAULT_SETTINGS, _rebuild(db_path, DEFAULT_SETTINGS, "All data cleared.")


def configure_logging(level: int = logging.WARNING) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main(db_path: str = db.DEFAULT_DB_PATH):
    configure_logging()
    db.init_db(db_path)
    settings = db.load_settings(db_path)
    db.save_settings(db_path, settings)
    state = load_practice_state(db_path, settings)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="practice").strip().lower()
        try:
            if choice == "practice":
                state = run_practice_session(db_path, settings, state)
            elif choice == "stats":
                cmd_stats(db_path, settings, state)
            elif choice == "forecast":
                cmd_forecast(settings, state)
            elif choice == "settings":
                settings, state = cmd_settings(db_path, settings, state)
            elif choice == "preset":
                settings, state = cmd_preset(db_path, settings, state)
            elif choice == "regenerate":
                state = cmd_regenerate(db_path, settings, state)
            elif choice == "reset":
                settings, state = cmd_reset(db_path, settings, state)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Keep practicing![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug("Command %r failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
