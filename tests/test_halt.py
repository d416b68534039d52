"""Tests for HALT classification, aggregation and insights."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from steadymind.halt import (
    DOMINANT_SUGGESTIONS,
    FALLBACK_INSIGHT,
    HALT_PROMPTS,
    MULTIPLE_NEEDS_INSIGHT,
    NO_DATA_INSIGHT,
    STALE_INSIGHT,
    WELL_MET_INSIGHT,
    aggregate,
    classify,
    derive_insights,
    dominant_concern,
    format_relative,
    is_halt_entry,
    question_categories,
    summarize_entry,
)
from steadymind.models import ConcernTally, EntryType, HaltCategory, QAPair, ReflectionEntry

NOW = datetime(2026, 3, 15, 12, 0, 0)


def _check(
    entry_id: int = 1,
    pairs: list[tuple[str, str]] | None = None,
    created_at: datetime = NOW,
    reflection_type: str = "halt",
) -> ReflectionEntry:
    """Helper to build a HALT check entry."""
    pairs = pairs or [("Hungry - Physical Needs", "Ate a good lunch")]
    return ReflectionEntry(
        id=entry_id,
        created_at=created_at,
        entry_type=EntryType.GUIDED_JOURNAL,
        reflection_type=reflection_type,
        qa_pairs=[QAPair(question=q, answer=a) for q, a in pairs],
    )


class TestClassify:
    def test_hungry_havent(self) -> None:
        pair = QAPair(question="Are you hungry?", answer="No, I haven't eaten in hours")
        assert classify(pair) == {HaltCategory.HUNGRY}

    def test_case_insensitive(self) -> None:
        pair = QAPair(question="HUNGRY - PHYSICAL NEEDS", answer="SKIPPED breakfast")
        assert classify(pair) == {HaltCategory.HUNGRY}

    def test_no_concern(self) -> None:
        pair = QAPair(question="Hungry - Physical Needs", answer="Ate a good lunch")
        assert classify(pair) == set()

    def test_answer_ignored_without_question_match(self) -> None:
        pair = QAPair(question="What You Need", answer="I feel alone and exhausted")
        assert classify(pair) == set()

    def test_angry_keyword(self) -> None:
        pair = QAPair(question="Angry - Emotions", answer="a bit annoyed")
        assert classify(pair) == {HaltCategory.ANGRY}

    def test_angry_long_answer(self) -> None:
        answer = "I spent the whole afternoon in the garden with my dog and it was lovely"
        assert len(answer) > 50
        pair = QAPair(question="Angry - Emotions", answer=answer)
        assert classify(pair) == {HaltCategory.ANGRY}

    def test_angry_length_boundary(self) -> None:
        pair = QAPair(question="Angry - Emotions", answer="a" * 50)
        assert classify(pair) == set()
        pair = QAPair(question="Angry - Emotions", answer="a" * 51)
        assert classify(pair) == {HaltCategory.ANGRY}

    def test_lonely(self) -> None:
        pair = QAPair(question="Lonely - Connection", answer="I talked to no one today")
        assert classify(pair) == {HaltCategory.LONELY}

    def test_tired(self) -> None:
        pair = QAPair(question="Tired - Rest & Energy", answer="Completely drained")
        assert classify(pair) == {HaltCategory.TIRED}

    def test_prompts_map_to_one_category(self) -> None:
        cats = [question_categories(p.title) for p in HALT_PROMPTS]
        assert cats == [
            [HaltCategory.HUNGRY],
            [HaltCategory.ANGRY],
            [HaltCategory.LONELY],
            [HaltCategory.TIRED],
            [],
        ]


class TestAggregate:
    def test_empty(self) -> None:
        tally = aggregate([], now=NOW)
        assert tally.total_checks == 0
        assert tally.as_counts() == {c: 0 for c in HaltCategory}
        assert tally.most_recent_check is None
        assert derive_insights(tally) == [NO_DATA_INSIGHT]

    def test_single_hungry_check(self) -> None:
        entry = _check(pairs=[("Are you hungry?", "No, I haven't eaten in hours")])
        tally = aggregate([entry], now=NOW)
        assert tally.hungry_concerns == 1
        assert tally.angry_concerns == 0
        assert tally.lonely_concerns == 0
        assert tally.tired_concerns == 0
        assert tally.total_checks == 1
        assert tally.most_recent_check == entry

    def test_ignores_non_halt_entries(self) -> None:
        note = ReflectionEntry(id=9, entry_type=EntryType.QUICK_NOTE, content="haven't eaten")
        other = _check(entry_id=2, reflection_type="checkin")
        assert not is_halt_entry(note)
        assert not is_halt_entry(other)
        assert aggregate([note, other], now=NOW).total_checks == 0

    def test_time_windows(self) -> None:
        entries = [
            _check(1, created_at=NOW - timedelta(days=40)),
            _check(2, created_at=NOW - timedelta(days=1)),
            _check(3, created_at=NOW - timedelta(days=10)),
            _check(4, created_at=NOW - timedelta(days=7)),  # exactly on the edge
        ]
        tally = aggregate(entries, now=NOW)
        assert tally.total_checks == 4
        assert tally.checks_last_week == 1
        assert tally.checks_last_month == 3
        assert [e.id for e in tally.recent_checks] == [2, 4, 3, 1]
        assert tally.most_recent_check is not None
        assert tally.most_recent_check.id == 2

    def test_same_timestamp_keeps_input_order(self) -> None:
        entries = [_check(5), _check(6), _check(7, created_at=NOW - timedelta(hours=1))]
        tally = aggregate(entries, now=NOW)
        assert [e.id for e in tally.recent_checks] == [5, 6, 7]

    def test_counts_bounded_by_checks(self) -> None:
        pairs = [
            ("Hungry - Physical Needs", "haven't eaten"),
            ("Angry - Emotions", "yes, upset"),
            ("Lonely - Connection", "alone"),
            ("Tired - Rest & Energy", "exhausted"),
        ]
        entries = [_check(i, pairs=pairs) for i in range(3)]
        tally = aggregate(entries, now=NOW)
        for count in tally.as_counts().values():
            assert count == 3 <= tally.total_checks
        assert tally.avg_concerns_per_check == 4.0


class TestDominantConcern:
    def test_none_when_empty(self) -> None:
        assert dominant_concern(ConcernTally(total_checks=3)) is None

    def test_clear_winner(self) -> None:
        tally = ConcernTally(tired_concerns=3, hungry_concerns=1, total_checks=4)
        assert dominant_concern(tally) is HaltCategory.TIRED

    def test_tie_goes_to_later_category(self) -> None:
        tally = ConcernTally(hungry_concerns=2, lonely_concerns=2, total_checks=4)
        assert dominant_concern(tally) is HaltCategory.LONELY


class TestDeriveInsights:
    def test_multiple_needs_boundary(self) -> None:
        tally = ConcernTally(hungry_concerns=2, angry_concerns=2, total_checks=2)
        assert tally.avg_concerns_per_check == 2.0
        insights = derive_insights(tally)
        assert MULTIPLE_NEEDS_INSIGHT in insights
        assert insights == [DOMINANT_SUGGESTIONS[HaltCategory.ANGRY], MULTIPLE_NEEDS_INSIGHT]

    def test_just_below_multiple_needs(self) -> None:
        tally = ConcernTally(hungry_concerns=3, angry_concerns=2, total_checks=3, checks_last_week=1)
        assert MULTIPLE_NEEDS_INSIGHT not in derive_insights(tally)

    def test_consistency_praise(self) -> None:
        tally = ConcernTally(total_checks=2, checks_last_week=2, checks_last_month=2)
        insights = derive_insights(tally)
        assert insights[0] == "Great job staying consistent! You've done 2 checks this week."
        assert WELL_MET_INSIGHT in insights

    def test_stale_nudge(self) -> None:
        tally = ConcernTally(total_checks=3, checks_last_week=0)
        assert derive_insights(tally) == [STALE_INSIGHT, WELL_MET_INSIGHT]

    def test_dominant_needs_thirty_percent(self) -> None:
        tally = ConcernTally(tired_concerns=3, total_checks=10, checks_last_week=1)
        assert DOMINANT_SUGGESTIONS[HaltCategory.TIRED] in derive_insights(tally)
        tally = ConcernTally(tired_concerns=2, total_checks=10, checks_last_week=1)
        assert DOMINANT_SUGGESTIONS[HaltCategory.TIRED] not in derive_insights(tally)

    def test_milestone(self) -> None:
        tally = ConcernTally(total_checks=5, checks_last_week=1)
        insights = derive_insights(tally)
        assert insights[-1] == (
            "You've completed 5 HALT checks - this self-awareness is a powerful "
            "tool for wellbeing."
        )

    def test_fallback(self) -> None:
        tally = ConcernTally(
            hungry_concerns=1, angry_concerns=1, total_checks=4, checks_last_week=1
        )
        assert derive_insights(tally) == [FALLBACK_INSIGHT]

    def test_idempotent(self) -> None:
        tally = ConcernTally(hungry_concerns=4, total_checks=6, checks_last_week=3)
        before = tally.model_copy(deep=True)
        assert derive_insights(tally) == derive_insights(tally)
        assert tally == before


class TestSummarizeEntry:
    def test_concerns_urgent(self) -> None:
        entry = _check(
            pairs=[
                ("Hungry - Physical Needs", "haven't eaten"),
                ("Angry - Emotions", "yes, upset"),
                ("Lonely - Connection", "alone all day"),
            ]
        )
        summary = summarize_entry(entry)
        assert summary.text == "Concerns: Hungry, Angry, Lonely"
        assert summary.has_urgent_concerns

    def test_single_concern_not_urgent(self) -> None:
        entry = _check(pairs=[("Tired - Rest & Energy", "bad sleep")])
        summary = summarize_entry(entry)
        assert summary.text == "Concerns: Tired"
        assert not summary.has_urgent_concerns

    def test_doing_well(self) -> None:
        entry = _check(
            pairs=[
                ("Hungry - Physical Needs", "ate well, feeling good"),
                ("Angry - Emotions", "calm today"),
            ]
        )
        assert summarize_entry(entry).text == "Doing well (nourished, calm)"

    def test_neutral(self) -> None:
        entry = _check(pairs=[("What You Need", "a walk")])
        assert summarize_entry(entry).text == "Checked in on basic needs"


class TestFormatRelative:
    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(minutes=10), "Just now"),
            (timedelta(hours=1, minutes=5), "1 hour ago"),
            (timedelta(hours=5), "5 hours ago"),
            (timedelta(days=1, hours=2), "Yesterday"),
            (timedelta(days=3), "3 days ago"),
            (timedelta(minutes=-5), "Just now"),
        ],
    )
    def test_recent(self, delta, expected) -> None:
        assert format_relative(NOW - delta, now=NOW) == expected

    def test_old_date(self) -> None:
        assert format_relative(datetime(2026, 1, 2, 9, 0), now=NOW) == "1/2/2026"
