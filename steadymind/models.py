"""Pydantic models for journal entries, HALT analytics, the worry tree and habits."""

from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class EntryType(str, enum.Enum):
    """Kinds of journal entry."""

    QUICK_NOTE = "quick_note"
    GUIDED_JOURNAL = "guided_journal"


class QAPair(BaseModel):
    """One prompt and the answer given to it."""

    model_config = ConfigDict(frozen=True)

    question: str
    answer: str


class _EntryFields(BaseModel):
    """Fields and checks shared by stored and new journal entries."""

    entry_type: EntryType
    reflection_type: Optional[str] = None  # e.g. "halt", "worry_decision_tree"
    content: Optional[str] = None
    qa_pairs: list[QAPair] = Field(default_factory=list)

    @field_validator("created_at", check_fields=False)
    @classmethod
    def _to_local_naive(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Timestamps are stored as naive local time."""
        if value is not None and value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value

    @model_validator(mode="after")
    def _check_payload(self) -> "_EntryFields":
        if self.entry_type == EntryType.QUICK_NOTE and self.content is None:
            raise ValueError("quick notes must have content")
        if self.entry_type == EntryType.GUIDED_JOURNAL and not self.qa_pairs:
            raise ValueError("guided journals must have at least one Q/A pair")
        return self


class ReflectionEntry(_EntryFields):
    """A stored journal entry (quick note or guided reflection)."""

    id: int
    created_at: datetime = Field(default_factory=datetime.now)


class ReflectionEntryCreate(_EntryFields):
    """Input model for adding a journal entry."""

    created_at: Optional[datetime] = None  # None = now


class HaltCategory(str, enum.Enum):
    """The four basic needs of the HALT check-in, in H-A-L-T order."""

    HUNGRY = "hungry"
    ANGRY = "angry"
    LONELY = "lonely"
    TIRED = "tired"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class ConcernTally(BaseModel):
    """Aggregated HALT check-in statistics. Built per analysis, never stored."""

    hungry_concerns: int = Field(default=0, ge=0)
    angry_concerns: int = Field(default=0, ge=0)
    lonely_concerns: int = Field(default=0, ge=0)
    tired_concerns: int = Field(default=0, ge=0)
    total_checks: int = Field(default=0, ge=0)
    checks_last_week: int = Field(default=0, ge=0)
    checks_last_month: int = Field(default=0, ge=0)
    most_recent_check: Optional[ReflectionEntry] = None
    recent_checks: list[ReflectionEntry] = Field(default_factory=list)

    def concern_count(self, category: HaltCategory) -> int:
        return getattr(self, f"{category.value}_concerns")

    def as_counts(self) -> dict[HaltCategory, int]:
        return {c: self.concern_count(c) for c in HaltCategory}

    @property
    def total_concerns(self) -> int:
        return sum(self.as_counts().values())

    @property
    def avg_concerns_per_check(self) -> float:
        if self.total_checks == 0:
            return 0.0
        return self.total_concerns / self.total_checks


class HaltEntrySummary(BaseModel):
    """One-line description of a single HALT check."""

    text: str
    has_urgent_concerns: bool = False


class TreeNode(str, enum.Enum):
    """Nodes of the worry decision tree."""

    START = "start"
    IS_REAL = "is_real"
    CAN_CONTROL = "can_control"
    CAN_ACT_NOW = "can_act_now"
    ACTION_NOW = "action_now"
    SCHEDULE_LATER = "schedule_later"
    LET_GO = "let_go"
    LET_GO_HYPOTHETICAL = "let_go_hypothetical"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_NODES


_TERMINAL_NODES = frozenset(
    {
        TreeNode.ACTION_NOW,
        TreeNode.SCHEDULE_LATER,
        TreeNode.LET_GO,
        TreeNode.LET_GO_HYPOTHETICAL,
    }
)


class WorrySession(BaseModel):
    """Inputs collected during one walk through the worry decision tree."""

    model_config = ConfigDict(validate_assignment=True)

    worry_text: Optional[str] = None
    action_plan: Optional[str] = None
    anxiety_before: int = Field(default=5, ge=0, le=10)
    anxiety_after: int = Field(default=5, ge=0, le=10)
    node: TreeNode = TreeNode.START
    history: list[TreeNode] = Field(default_factory=list)


class Habit(BaseModel):
    """A recurring habit the user checks off."""

    id: int
    title: str
    description: str = ""
    system_type: Optional[str] = None  # e.g. "daily_reflection"; None = user-created
    created_at: datetime = Field(default_factory=datetime.now)


class HabitCreate(BaseModel):
    """Input model for creating a habit."""

    title: str = Field(min_length=1, max_length=200)
    description: str = ""
    system_type: Optional[str] = None


class HabitSummary(BaseModel):
    """A habit with its current streak, for the habits listing."""

    habit: Habit
    streak_days: int = Field(default=0, ge=0)
    last_done: Optional[date] = None

    @property
    def done_today(self) -> bool:
        return self.last_done == date.today()


class AppConfig(BaseModel):
    """Application configuration (persisted to ~/.config/steadymind/config.json)."""

    db_path: Optional[str] = None  # None = use default (~/.local/share/steadymind/)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
