"""steadymind CLI -- worry decision tree and HALT check-ins in the terminal."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from steadymind import db, display, halt, worry_tree
from steadymind.models import EntryType, QAPair, ReflectionEntryCreate, TreeNode

log = logging.getLogger(__name__)

app = typer.Typer(
    name="steadymind",
    help="Work through worries and check in on your basic needs.",
    no_args_is_help=True,
)


def _conn() -> db.sqlite3.Connection:
    """Get a database connection (convenience wrapper)."""
    return db.get_connection()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Work through worries and check in on your basic needs."""
    from steadymind import config as cfg

    _configure_logging("DEBUG" if verbose else cfg.load_config().log_level)
    conn = _conn()
    db.ensure_default_habit_exists(conn)
    conn.close()


def _prompt_rating(label: str, default: int) -> int:
    """Ask for a 0-10 rating until a valid one is given."""
    while True:
        raw = typer.prompt(f"{label} (0-10)", default=str(default))
        try:
            val = int(raw)
            if 0 <= val <= 10:
                return val
        except ValueError:
            pass
        display.print_warning("  Please enter a number from 0 to 10.")


# ---------------------------------------------------------------------------
# Worry decision tree
# ---------------------------------------------------------------------------


def _ask_worry(walk: worry_tree.WorryWalk) -> None:
    prompt = worry_tree.NODE_PROMPTS[TreeNode.START]
    display.print_info(prompt.title)
    display.print_info(prompt.description)
    while True:
        text = typer.prompt(
            "  Your worry", default=walk.session.worry_text or "", show_default=False
        )
        anxiety = _prompt_rating(
            "  How anxious does this make you feel?", walk.session.anxiety_before
        )
        try:
            walk.submit_worry(text, anxiety)
            return
        except worry_tree.InvalidTransition as exc:
            display.print_warning(f"  {exc}")


@app.command()
def worry(
    save: bool = typer.Option(True, "--save/--no-save", help="Save the result to your journal"),
    about: bool = typer.Option(False, "--about", help="Explain the technique and exit"),
) -> None:
    """Work through a worry with the decision tree."""
    if about:
        display.print_about("About This Technique", worry_tree.ABOUT_TEXT)
        return
    walk = worry_tree.WorryWalk()

    while not walk.finished:
        if walk.node == TreeNode.START:
            _ask_worry(walk)
            continue
        prompt = worry_tree.NODE_PROMPTS[walk.node]
        display.print_node(prompt, walk.session.worry_text)
        raw = typer.prompt("  Choice").strip().lower()
        if raw == "b":
            walk.back()
            continue
        try:
            walk.choose(int(raw) - 1)
        except ValueError:
            display.print_warning("  Please enter 1, 2, or b.")

    outcome = worry_tree.NODE_PROMPTS[walk.node]
    display.print_outcome(outcome)
    if outcome.action_hint:
        plan = typer.prompt(f"  {outcome.action_hint}", default="", show_default=False)
        walk.set_action_plan(plan)

    walk.rate_after(_prompt_rating("  How anxious do you feel now?", walk.session.anxiety_after))
    if walk.anxiety_change > 0:
        display.print_success(f"Your anxiety decreased by {walk.anxiety_change} points!")

    display.print_nudge(worry_tree.decision_summary(walk.node))

    if not save:
        return
    conn = _conn()
    entry = db.add_entry(
        conn,
        ReflectionEntryCreate(
            entry_type=EntryType.QUICK_NOTE,
            reflection_type=worry_tree.WORRY_REFLECTION_TYPE,
            content=walk.journal_note(),
        ),
    )
    display.print_success(f"Worry analysis saved to journal (#{entry.id}).")
    conn.close()


@app.command(name="worry-history")
def worry_history(
    chart: Optional[Path] = typer.Option(None, "--chart", help="Save a before/after PNG chart"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of sessions to show"),
) -> None:
    """Show anxiety ratings from past worry sessions."""
    conn = _conn()
    entries = db.list_entries(conn, reflection_type=worry_tree.WORRY_REFLECTION_TYPE, limit=limit)
    conn.close()

    points = []
    for entry in entries:
        levels = worry_tree.parse_anxiety_levels(entry.content or "")
        if levels is None:
            log.warning("entry #%d has no anxiety ratings", entry.id)
            continue
        points.append((entry.created_at, *levels))
        before, after = levels
        display.print_info(
            f"#{entry.id}  {entry.created_at.strftime('%Y-%m-%d %H:%M')}  "
            f"before {before}/10 -> after {after}/10"
        )
    if not points:
        display.print_info("No worry sessions yet.")
        return

    if chart is not None:
        from steadymind.charts import anxiety_trend

        img = anxiety_trend(points)
        if img is None:
            display.print_warning("Need at least two sessions for a chart.")
        else:
            img.save(chart)
            display.print_success(f"Chart saved to {chart}")


# ---------------------------------------------------------------------------
# HALT check-in
# ---------------------------------------------------------------------------


@app.command(name="halt")
def halt_check() -> None:
    """Check in on your basic needs: Hungry, Angry, Lonely, Tired."""
    display.print_info("HALT Check-In. Press Enter to skip a question.")
    pairs: list[QAPair] = []
    for prompt in halt.HALT_PROMPTS:
        display.console.print(f"\n[bold]{prompt.title}[/bold]")
        display.console.print(prompt.prompt)
        display.console.print(f"[dim]{prompt.hint}[/dim]")
        answer = typer.prompt("  Answer", default="", show_default=False).strip()
        if answer:
            pairs.append(QAPair(question=prompt.title, answer=answer))

    if not pairs:
        display.print_info("No answers given; nothing saved.")
        return

    conn = _conn()
    entry = db.add_entry(
        conn,
        ReflectionEntryCreate(
            entry_type=EntryType.GUIDED_JOURNAL,
            reflection_type=halt.HALT_REFLECTION_TYPE,
            qa_pairs=pairs,
        ),
    )
    summary = halt.summarize_entry(entry)
    display.print_success(f"HALT check saved (#{entry.id}).")
    if summary.has_urgent_concerns:
        display.print_warning(summary.text)
    else:
        display.print_info(summary.text)
    conn.close()


@app.command(name="halt-stats")
def halt_stats(
    chart: Optional[Path] = typer.Option(None, "--chart", help="Save a needs-breakdown PNG chart"),
) -> None:
    """See patterns across your HALT check-ins."""
    conn = _conn()
    entries = db.list_entries(conn, reflection_type=halt.HALT_REFLECTION_TYPE)
    conn.close()

    tally = halt.aggregate(entries)
    insights = halt.derive_insights(tally)
    if tally.total_checks == 0:
        display.print_info("No HALT check-ins yet. Run `steadymind halt` to take one.")
        display.print_insights(insights)
        return

    display.print_overview(tally)
    display.print_needs_breakdown(tally)
    display.print_recent_checks(tally)
    display.print_insights(insights)

    if chart is not None:
        from steadymind.charts import needs_breakdown

        needs_breakdown(tally).save(chart)
        display.print_success(f"Chart saved to {chart}")


# ---------------------------------------------------------------------------
# Journal
# ---------------------------------------------------------------------------


@app.command()
def journal(
    entry_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Filter by reflection type, e.g. halt or worry_decision_tree"
    ),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of entries to show"),
) -> None:
    """List your journal entries."""
    conn = _conn()
    entries = db.list_entries(conn, reflection_type=entry_type, limit=limit)
    display.print_entry_list(entries)
    conn.close()


@app.command()
def show(entry_id: int = typer.Argument(..., help="ID of the entry to show")) -> None:
    """Show one journal entry in full."""
    conn = _conn()
    entry = db.get_entry(conn, entry_id)
    conn.close()
    if entry is None:
        display.print_warning(f"Entry #{entry_id} not found.")
        raise typer.Exit(1)
    display.print_entry(entry)


@app.command()
def delete(
    entry_id: int = typer.Argument(..., help="ID of the entry to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a journal entry."""
    conn = _conn()
    if db.get_entry(conn, entry_id) is None:
        display.print_warning(f"Entry #{entry_id} not found.")
        conn.close()
        raise typer.Exit(1)
    if not yes and not typer.confirm(f"Delete entry #{entry_id}?", default=False):
        display.print_info("Kept.")
        conn.close()
        return
    db.delete_entry(conn, entry_id)
    display.print_success(f"Deleted entry #{entry_id}.")
    conn.close()


@app.command(name="import-entries")
def import_entries(
    path: Path = typer.Argument(..., help="JSON file holding a list of journal entries"),
) -> None:
    """Import journal entries from a JSON file (all or nothing)."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        display.print_warning(f"Could not read {path}: {exc}")
        raise typer.Exit(1)
    if not isinstance(raw, list):
        display.print_warning("Expected a JSON list of entries.")
        raise typer.Exit(1)

    to_add: list[ReflectionEntryCreate] = []
    for i, item in enumerate(raw):
        try:
            to_add.append(ReflectionEntryCreate.model_validate(item))
        except ValidationError as exc:
            display.print_warning(f"Entry {i} is invalid: {exc.errors()[0]['msg']}")
            raise typer.Exit(1)

    conn = _conn()
    for entry_in in to_add:
        db.add_entry(conn, entry_in)
    conn.close()
    display.print_success(f"Imported {len(to_add)} entr{'ies' if len(to_add) != 1 else 'y'}.")


# ---------------------------------------------------------------------------
# Habits
# ---------------------------------------------------------------------------


@app.command()
def habits() -> None:
    """List your habits and streaks."""
    conn = _conn()
    display.print_habits(db.list_habits(conn))
    conn.close()


@app.command(name="reflect-done")
def reflect_done() -> None:
    """Check off today's Daily Reflection habit."""
    conn = _conn()
    habit = db.ensure_default_habit_exists(conn)
    if db.complete_habit(conn, habit.id):
        display.print_success(f"Checked off: {habit.title}")
    else:
        display.print_info(f"{habit.title} is already done today.")
    streak = db.habit_streak(conn, habit.id)
    display.print_nudge(f"Streak: {streak} day{'s' if streak != 1 else ''}")
    conn.close()


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@app.command()
def config(
    db_path: Optional[str] = typer.Option(
        None, "--db-path",
        help="Set a custom database file path",
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level",
        help="Default log level: DEBUG, INFO, WARNING or ERROR",
    ),
    reset: bool = typer.Option(False, "--reset", help="Reset to default local DB"),
    show: bool = typer.Option(False, "--show", help="Show current config"),
) -> None:
    """Configure where your data is stored and how much is logged."""
    from steadymind import config as cfg

    if db_path:
        result = cfg.set_db_path(db_path)
        display.print_success(f"Database path set to: {result.db_path}")
    elif log_level:
        try:
            result = cfg.set_log_level(log_level)
        except ValueError as exc:
            display.print_warning(str(exc))
            raise typer.Exit(1)
        display.print_success(f"Log level set to: {result.log_level}")
    elif reset:
        cfg.reset_db_path()
        display.print_success("Reset to default local database.")
    elif show:
        current = cfg.load_config()
        resolved = cfg.get_db_path()
        if current.db_path:
            display.print_info(f"Database: {current.db_path}")
        else:
            display.print_info(f"Database: {resolved} (default)")
        display.print_info(f"Log level: {current.log_level}")
    else:
        display.print_info("Use --db-path, --log-level, --reset, or --show.")
