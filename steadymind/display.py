"""Rich terminal formatting helpers."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from steadymind.halt import format_relative, summarize_entry
from steadymind.models import ConcernTally, EntryType, HabitSummary, HaltCategory, ReflectionEntry
from steadymind.worry_tree import NodePrompt

console = Console()

_NEED_STYLE: dict[HaltCategory, str] = {
    HaltCategory.HUNGRY: "dark_orange",
    HaltCategory.ANGRY: "red",
    HaltCategory.LONELY: "blue",
    HaltCategory.TIRED: "magenta",
}

_BAR_WIDTH = 30
RECENT_CHECKS_SHOWN = 5


def print_nudge(message: str) -> None:
    """Print an encouragement message in a styled panel."""
    text = Text(message, justify="center")
    console.print(Panel(text, border_style="magenta", padding=(1, 4)))


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[blue]{message}[/blue]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]{message}[/yellow]")


# ---------------------------------------------------------------------------
# Worry decision tree
# ---------------------------------------------------------------------------


def print_node(prompt: NodePrompt, worry_preview: Optional[str] = None) -> None:
    """Show a decision question with its numbered options."""
    lines: list[str] = [prompt.description, ""]
    if worry_preview:
        preview = worry_preview if len(worry_preview) <= 100 else f"{worry_preview[:100]}..."
        lines += [f"[dim]Your worry: {preview}[/dim]", ""]
    for i, label in enumerate(prompt.options, 1):
        lines.append(f"  [bold]{i}[/bold]  {label}")
    lines.append("  [bold]b[/bold]  Back")
    console.print(Panel("\n".join(lines), title=prompt.title, border_style="blue"))


def print_about(title: str, body: str) -> None:
    console.print(Panel(body, title=title, border_style="cyan", padding=(1, 2)))


def print_outcome(prompt: NodePrompt) -> None:
    """Show the guidance for a finished walk."""
    lines = [prompt.description, "", f"[italic]{prompt.guidance}[/italic]"]
    if prompt.affirmation:
        lines += ["", f"[bold]{prompt.affirmation}[/bold]"]
    console.print(Panel("\n".join(lines), title=prompt.title, border_style="green"))


# ---------------------------------------------------------------------------
# HALT analytics
# ---------------------------------------------------------------------------


def print_overview(tally: ConcernTally, now: Optional[datetime] = None) -> None:
    """Check counts and the time of the last check."""
    table = Table(show_header=True, box=None, pad_edge=False)
    table.add_column("Total Checks", justify="center")
    table.add_column("Last 7 Days", justify="center")
    table.add_column("Last 30 Days", justify="center")
    table.add_row(
        str(tally.total_checks), str(tally.checks_last_week), str(tally.checks_last_month),
        style="bold cyan",
    )
    body: list = [table]
    if tally.most_recent_check is not None:
        when = format_relative(tally.most_recent_check.created_at, now)
        body.append(Text(f"\nLast check: {when}", style="dim"))
    console.print(Panel(Group(*body), title="Overview", border_style="blue"))


def print_needs_breakdown(tally: ConcernTally) -> None:
    """Text bars showing how often each need was flagged as a concern."""
    counts = tally.as_counts()
    max_count = max(counts.values())
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("need", width=8)
    table.add_column("bar", width=_BAR_WIDTH)
    table.add_column("count", justify="right")
    for category, count in counts.items():
        filled = round(count / max_count * _BAR_WIDTH) if max_count > 0 else 0
        pct = round(count / tally.total_checks * 100) if tally.total_checks else 0
        bar = Text("█" * filled, style=_NEED_STYLE[category])
        bar.append("░" * (_BAR_WIDTH - filled), style="dim")
        table.add_row(category.label, bar, f"{count} ({pct}%)")
    console.print(Panel(table, title="Needs Breakdown", border_style="blue"))


def print_recent_checks(tally: ConcernTally, now: Optional[datetime] = None) -> None:
    """The newest few checks with a one-line summary each."""
    recent = tally.recent_checks[:RECENT_CHECKS_SHOWN]
    if not recent:
        console.print(Panel("No recent checks", title="Recent Checks", border_style="dim"))
        return
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("icon", width=2)
    table.add_column("when", style="dim")
    table.add_column("summary")
    for entry in recent:
        summary = summarize_entry(entry)
        icon = "[yellow]![/yellow]" if summary.has_urgent_concerns else "[green]✓[/green]"
        table.add_row(icon, format_relative(entry.created_at, now), summary.text)
    console.print(Panel(table, title="Recent Checks", border_style="blue"))


def print_insights(insights: list[str]) -> None:
    body = "\n".join(f"• {line}" for line in insights)
    console.print(Panel(body, title="Insights", border_style="magenta"))


# ---------------------------------------------------------------------------
# Journal & habits
# ---------------------------------------------------------------------------


def print_entry_list(entries: list[ReflectionEntry]) -> None:
    """Compact table of journal entries."""
    if not entries:
        console.print(Panel("No journal entries.", title="Journal", border_style="dim"))
        return
    table = Table(show_header=True, box=None, pad_edge=False)
    table.add_column("id", width=5)
    table.add_column("date")
    table.add_column("type")
    table.add_column("preview")
    for entry in entries:
        if entry.entry_type == EntryType.QUICK_NOTE:
            preview = (entry.content or "").strip().splitlines()
            first = preview[0] if preview else ""
        else:
            first = entry.qa_pairs[0].answer
        if len(first) > 50:
            first = first[:50] + "..."
        table.add_row(
            f"#{entry.id}",
            entry.created_at.strftime("%Y-%m-%d %H:%M"),
            entry.reflection_type or entry.entry_type.value,
            first,
        )
    console.print(Panel(table, title="Journal", border_style="blue"))


def print_entry(entry: ReflectionEntry) -> None:
    """Full text of one entry."""
    title = f"#{entry.id} {entry.reflection_type or entry.entry_type.value}"
    subtitle = entry.created_at.strftime("%Y-%m-%d %H:%M")
    if entry.entry_type == EntryType.QUICK_NOTE:
        body = entry.content or ""
    else:
        body = "\n\n".join(f"[bold]{p.question}[/bold]\n{p.answer}" for p in entry.qa_pairs)
    console.print(Panel(body, title=title, subtitle=subtitle, border_style="blue"))


def print_habits(habits: list[HabitSummary]) -> None:
    if not habits:
        console.print(Panel("No habits.", title="Habits", border_style="dim"))
        return
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("status", width=3)
    table.add_column("id", width=5)
    table.add_column("title")
    table.add_column("streak", justify="right")
    for summary in habits:
        days = summary.streak_days
        table.add_row(
            "✓" if summary.done_today else "·",
            f"#{summary.habit.id}",
            summary.habit.title,
            f"{days} day{'s' if days != 1 else ''}",
            style="green" if summary.done_today else "dim",
        )
    console.print(Panel(table, title="Habits", border_style="blue"))
