"""HALT check-in prompts and the keyword heuristics behind HALT analytics.

HALT is a check-in on four basic needs -- Hungry, Angry, Lonely, Tired.
Each saved check is a guided journal entry whose Q/A pairs are scanned with
simple case-insensitive substring rules.  The rules are deliberately coarse:
they flag a *possible* unmet need, they do not diagnose anything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from steadymind.models import (
    ConcernTally,
    EntryType,
    HaltCategory,
    HaltEntrySummary,
    QAPair,
    ReflectionEntry,
)

log = logging.getLogger(__name__)

HALT_REFLECTION_TYPE = "halt"

# ---------------------------------------------------------------------------
# Check-in prompts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HaltPrompt:
    """A single check-in question. ``title`` is what gets stored as the question."""

    title: str
    prompt: str
    hint: str


HALT_PROMPTS: list[HaltPrompt] = [
    HaltPrompt(
        title="Hungry - Physical Needs",
        prompt=(
            "Have you eaten recently? How's your physical energy and nourishment? "
            "Are you taking care of your basic physical needs?"
        ),
        hint="When did you last eat? How's your energy level?",
    ),
    HaltPrompt(
        title="Angry - Emotions",
        prompt=(
            "What's frustrating or irritating you right now? Are you feeling "
            "angry, annoyed, or resentful about anything?"
        ),
        hint="Be honest about what's bothering you...",
    ),
    HaltPrompt(
        title="Lonely - Connection",
        prompt=(
            "Who have you connected with today? Are you feeling isolated or "
            "disconnected? How's your sense of belonging?"
        ),
        hint="Think about meaningful connections, not just interactions...",
    ),
    HaltPrompt(
        title="Tired - Rest & Energy",
        prompt=(
            "How's your sleep been? Are you running on empty? What's draining "
            "your energy right now?"
        ),
        hint="Physical tiredness, mental fatigue, emotional exhaustion...",
    ),
    HaltPrompt(
        title="What You Need",
        prompt=(
            "Based on these reflections, what's one thing you could do for "
            "yourself right now to address these needs?"
        ),
        hint="Small, actionable steps work best...",
    ),
]

# ---------------------------------------------------------------------------
# Keyword rules
# ---------------------------------------------------------------------------

# Question keywords that tie a prompt to a category.
QUESTION_KEYWORDS: dict[HaltCategory, tuple[str, ...]] = {
    HaltCategory.HUNGRY: ("hungry", "physical"),
    HaltCategory.ANGRY: ("angry", "frustrat"),
    HaltCategory.LONELY: ("lonely", "connection"),
    HaltCategory.TIRED: ("tired", "sleep", "rest"),
}

# Answer substrings that indicate the need is unmet.
CONCERN_KEYWORDS: dict[HaltCategory, tuple[str, ...]] = {
    HaltCategory.HUNGRY: ("not", "haven't", "skip", "low"),
    HaltCategory.ANGRY: ("yes", "frustrat", "annoyed", "upset"),
    HaltCategory.LONELY: ("no one", "alone", "isolated", "haven't"),
    HaltCategory.TIRED: ("exhaust", "not enough", "bad", "drained"),
}

# Any answer to an anger question longer than this counts as venting.
# Long calm answers are flagged too; kept as-is pending product review.
ANGRY_LENGTH_THRESHOLD = 50

# The per-check summary uses slightly narrower rules plus "doing well" words.
_SUMMARY_QUESTION_KEYWORDS: dict[HaltCategory, tuple[str, ...]] = {
    **QUESTION_KEYWORDS,
    HaltCategory.TIRED: ("tired", "sleep"),
}
_SUMMARY_CONCERN_KEYWORDS: dict[HaltCategory, tuple[str, ...]] = {
    HaltCategory.HUNGRY: ("not", "haven't", "skip"),
    HaltCategory.ANGRY: ("yes", "frustrat", "upset"),
    HaltCategory.LONELY: ("no one", "alone", "isolated"),
    HaltCategory.TIRED: ("exhaust", "not enough", "bad"),
}
_SUMMARY_STRENGTHS: dict[HaltCategory, tuple[tuple[str, ...], str]] = {
    HaltCategory.HUNGRY: (("good", "well"), "nourished"),
    HaltCategory.ANGRY: (("no", "calm"), "calm"),
    HaltCategory.LONELY: (("connected", "talked"), "connected"),
    HaltCategory.TIRED: (("good", "rested"), "rested"),
}

URGENT_CONCERN_COUNT = 3


def _contains_any(text: str, needles: Iterable[str]) -> bool:
    return any(n in text for n in needles)


def question_categories(question: str) -> list[HaltCategory]:
    """Categories whose keywords appear in *question*, in H-A-L-T order."""
    q = question.lower()
    return [c for c, words in QUESTION_KEYWORDS.items() if _contains_any(q, words)]


def classify(pair: QAPair) -> set[HaltCategory]:
    """Return the categories for which *pair* signals an unmet need."""
    answer = pair.answer.lower()
    found: set[HaltCategory] = set()
    for category in question_categories(pair.question):
        if _contains_any(answer, CONCERN_KEYWORDS[category]):
            found.add(category)
        elif category == HaltCategory.ANGRY and len(answer) > ANGRY_LENGTH_THRESHOLD:
            found.add(category)
    return found


def is_halt_entry(entry: ReflectionEntry) -> bool:
    return (
        entry.entry_type == EntryType.GUIDED_JOURNAL
        and entry.reflection_type == HALT_REFLECTION_TYPE
    )


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def aggregate(
    entries: Iterable[ReflectionEntry], now: Optional[datetime] = None
) -> ConcernTally:
    """Tally concerns and check frequency over every HALT entry in *entries*.

    Non-HALT entries are ignored.  Checks are ordered newest first; entries
    sharing a timestamp keep the order they were given in.
    """
    now = now or datetime.now()
    checks = [e for e in entries if is_halt_entry(e)]
    # sorted() is stable, so equal timestamps keep input order.
    checks = sorted(checks, key=lambda e: e.created_at, reverse=True)

    counts = {c: 0 for c in HaltCategory}
    for entry in checks:
        for pair in entry.qa_pairs:
            for category in classify(pair):
                counts[category] += 1

    last_week = now - timedelta(days=7)
    last_month = now - timedelta(days=30)

    tally = ConcernTally(
        hungry_concerns=counts[HaltCategory.HUNGRY],
        angry_concerns=counts[HaltCategory.ANGRY],
        lonely_concerns=counts[HaltCategory.LONELY],
        tired_concerns=counts[HaltCategory.TIRED],
        total_checks=len(checks),
        checks_last_week=sum(1 for e in checks if e.created_at > last_week),
        checks_last_month=sum(1 for e in checks if e.created_at > last_month),
        most_recent_check=checks[0] if checks else None,
        recent_checks=checks,
    )
    log.debug(
        "aggregated %d HALT checks: %s", tally.total_checks,
        {c.value: n for c, n in counts.items()},
    )
    return tally


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------

NO_DATA_INSIGHT = "No data yet - take your first HALT check to get insights!"
STALE_INSIGHT = (
    "It's been a while since your last check. A quick HALT check can help you "
    "stay grounded."
)
MULTIPLE_NEEDS_INSIGHT = (
    "You're experiencing multiple unmet needs regularly. This is important "
    "feedback - consider what small changes might help."
)
WELL_MET_INSIGHT = (
    "Your basic needs are generally well-met. Keep up the good self-care practices!"
)
FALLBACK_INSIGHT = (
    "Keep checking in with yourself. Regular HALT checks help you catch needs "
    "before they become urgent."
)

DOMINANT_SUGGESTIONS: dict[HaltCategory, str] = {
    HaltCategory.HUNGRY: (
        "Physical nourishment seems to be a recurring theme. Consider setting "
        "regular meal times or keeping healthy snacks nearby."
    ),
    HaltCategory.ANGRY: (
        "Frustration is coming up often. Exploring stress management techniques "
        "or talking to someone might help."
    ),
    HaltCategory.LONELY: (
        "Connection is an important need. Consider reaching out to a friend or "
        "joining a community activity."
    ),
    HaltCategory.TIRED: (
        "Rest is crucial for wellbeing. Review your sleep habits and consider "
        "creating a wind-down routine."
    ),
}

DOMINANT_SHARE = 0.3
MULTIPLE_NEEDS_AVG = 2
WELL_MET_AVG = 0.5
MILESTONE_CHECKS = 5


def dominant_concern(tally: ConcernTally) -> Optional[HaltCategory]:
    """Most frequent concern.  On a tie the later category in H-A-L-T wins."""
    best: Optional[HaltCategory] = None
    best_count = 0
    for category, count in tally.as_counts().items():
        if count > 0 and count >= best_count:
            best, best_count = category, count
    return best


def derive_insights(tally: ConcernTally) -> list[str]:
    """Plain-English observations about a tally, in a fixed order."""
    if tally.total_checks == 0:
        return [NO_DATA_INSIGHT]

    insights: list[str] = []

    if tally.checks_last_week >= 2:
        insights.append(
            f"Great job staying consistent! You've done {tally.checks_last_week} "
            "checks this week."
        )
    elif tally.total_checks >= 3 and tally.checks_last_week == 0:
        insights.append(STALE_INSIGHT)

    top = dominant_concern(tally)
    if top is not None and tally.concern_count(top) >= tally.total_checks * DOMINANT_SHARE:
        insights.append(DOMINANT_SUGGESTIONS[top])

    avg = tally.avg_concerns_per_check
    if avg >= MULTIPLE_NEEDS_AVG:
        insights.append(MULTIPLE_NEEDS_INSIGHT)
    elif avg < WELL_MET_AVG:
        insights.append(WELL_MET_INSIGHT)

    if tally.total_checks >= MILESTONE_CHECKS:
        insights.append(
            f"You've completed {tally.total_checks} HALT checks - this "
            "self-awareness is a powerful tool for wellbeing."
        )

    if not insights:
        insights.append(FALLBACK_INSIGHT)
    return insights


# ---------------------------------------------------------------------------
# Per-check summary & dates
# ---------------------------------------------------------------------------


def summarize_entry(entry: ReflectionEntry) -> HaltEntrySummary:
    """Describe one HALT check as a short line for the recent-checks list."""
    if not entry.qa_pairs:
        return HaltEntrySummary(text="Completed check")

    concerns: list[str] = []
    strengths: list[str] = []
    for pair in entry.qa_pairs:
        question = pair.question.lower()
        answer = pair.answer.lower()
        for category, words in _SUMMARY_QUESTION_KEYWORDS.items():
            if not _contains_any(question, words):
                continue
            good_words, strength = _SUMMARY_STRENGTHS[category]
            if _contains_any(answer, _SUMMARY_CONCERN_KEYWORDS[category]):
                concerns.append(category.label)
            elif _contains_any(answer, good_words):
                strengths.append(strength)

    if concerns:
        return HaltEntrySummary(
            text=f"Concerns: {', '.join(concerns)}",
            has_urgent_concerns=len(concerns) >= URGENT_CONCERN_COUNT,
        )
    if strengths:
        return HaltEntrySummary(text=f"Doing well ({', '.join(strengths)})")
    return HaltEntrySummary(text="Checked in on basic needs")


def format_relative(when: datetime, now: Optional[datetime] = None) -> str:
    """Human-friendly age of a check ("2 hours ago", "Yesterday", ...)."""
    now = now or datetime.now()
    diff = now - when
    if diff < timedelta(0):  # clock skew
        return "Just now"
    if diff.days == 0:
        hours = diff.seconds // 3600
        if hours == 0:
            return "Just now"
        if hours == 1:
            return "1 hour ago"
        return f"{hours} hours ago"
    if diff.days == 1:
        return "Yesterday"
    if diff.days < 7:
        return f"{diff.days} days ago"
    return f"{when.month}/{when.day}/{when.year}"
