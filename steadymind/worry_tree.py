"""Worry decision tree: a CBT worry-management exercise.

The walk starts with the user writing down a worry, then asks up to three
yes/no style questions:

* **Is it real?** -- happening now or very likely, versus a "what if".
* **Can you control it?** -- is there anything you can personally do.
* **Can you act now?** -- act immediately, or schedule a time for later.

Each path ends in one of four outcomes (act now, schedule it, let go, or
return to the present).  The functions here are pure; :class:`WorryWalk`
wraps them with the per-session inputs that end up in the journal note.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from steadymind.models import TreeNode, WorrySession

log = logging.getLogger(__name__)

WORRY_REFLECTION_TYPE = "worry_decision_tree"


class WorryTreeError(ValueError):
    """Base class for invalid decision tree operations."""


class InvalidTransition(WorryTreeError):
    """Raised for a choice on a terminal node or an out-of-range option."""


class NoHistory(WorryTreeError):
    """Raised when going back from the start of the walk."""


# ---------------------------------------------------------------------------
# Transition table
# ---------------------------------------------------------------------------

# node -> next node for option 0, 1.  START has a single "submit worry" step.
TRANSITIONS: dict[TreeNode, tuple[TreeNode, ...]] = {
    TreeNode.START: (TreeNode.IS_REAL,),
    TreeNode.IS_REAL: (TreeNode.CAN_CONTROL, TreeNode.LET_GO_HYPOTHETICAL),
    TreeNode.CAN_CONTROL: (TreeNode.CAN_ACT_NOW, TreeNode.LET_GO),
    TreeNode.CAN_ACT_NOW: (TreeNode.ACTION_NOW, TreeNode.SCHEDULE_LATER),
}

RATIONALES: dict[TreeNode, str] = {
    TreeNode.ACTION_NOW: (
        "This worry is about something I can control AND I can act on it now. "
        "Taking action is the best approach."
    ),
    TreeNode.SCHEDULE_LATER: (
        "This worry is about something I can control, but I cannot act on it "
        "right now. I've scheduled a time to address it."
    ),
    TreeNode.LET_GO: (
        "This worry is about something outside my control. The healthiest "
        "response is to acknowledge it and let it go."
    ),
    TreeNode.LET_GO_HYPOTHETICAL: (
        'This worry is about a hypothetical "what if" scenario that may never '
        "happen. I'm choosing to focus on the present."
    ),
}

IN_PROGRESS = "In progress..."

# Outcomes where the user writes down a concrete step or time.
ACTION_NODES = frozenset({TreeNode.ACTION_NOW, TreeNode.SCHEDULE_LATER})


def start() -> TreeNode:
    """Return the node every walk begins at."""
    return TreeNode.START


def choose(current: TreeNode, option_index: int) -> TreeNode:
    """Return the node reached by picking *option_index* at *current*."""
    options = TRANSITIONS.get(current)
    if options is None:
        raise InvalidTransition(f"{current.value} is a terminal node")
    if (
        isinstance(option_index, bool)
        or not isinstance(option_index, int)
        or not 0 <= option_index < len(options)
    ):
        raise InvalidTransition(
            f"option {option_index!r} is not valid at {current.value}"
        )
    return options[option_index]


def back(history: list[TreeNode]) -> TreeNode:
    """Pop the most recent node off *history* and return it."""
    if not history:
        raise NoHistory("already at the start of the walk")
    return history.pop()


def decision_summary(state: TreeNode) -> str:
    """Rationale sentence for a finished walk, or a placeholder mid-walk."""
    return RATIONALES.get(state, IN_PROGRESS)


def summarize(state: TreeNode, worry_text: str, action_plan: Optional[str] = None) -> str:
    """Rationale for a terminal *state* followed by the worry and any plan."""
    if not state.is_terminal:
        raise InvalidTransition(f"{state.value} is not an outcome")
    parts = [RATIONALES[state], worry_text]
    if state in ACTION_NODES and action_plan:
        parts.append(action_plan)
    return "\n".join(parts)


def render_journal_note(session: WorrySession) -> str:
    """Markdown note saved to the journal at the end of a walk."""
    lines = [
        "## Worry Decision Tree",
        "",
        "### My Worry",
        session.worry_text or "Not specified",
        "",
        "### Decision Path",
        decision_summary(session.node),
        "",
    ]
    if session.action_plan:
        lines += ["### Action Plan", session.action_plan, ""]
    lines += [
        "### Anxiety Level",
        f"- Before: {session.anxiety_before}/10",
        f"- After: {session.anxiety_after}/10",
    ]
    return "\n".join(lines) + "\n"


_ANXIETY_RE = re.compile(r"^- Before: (\d+)/10\s*\n- After: (\d+)/10", re.MULTILINE)


def parse_anxiety_levels(note: str) -> Optional[tuple[int, int]]:
    """Read the (before, after) ratings back out of a saved journal note."""
    match = _ANXIETY_RE.search(note)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


# ---------------------------------------------------------------------------
# Screen text for each node
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NodePrompt:
    """Wording shown to the user at a node."""

    title: str
    description: str
    options: tuple[str, ...] = ()
    guidance: str = ""
    action_hint: str = ""
    affirmation: str = ""


NODE_PROMPTS: dict[TreeNode, NodePrompt] = {
    TreeNode.START: NodePrompt(
        title="What's worrying you?",
        description=(
            "Write down your worry. We'll work through it together using a "
            "decision tree."
        ),
    ),
    TreeNode.IS_REAL: NodePrompt(
        title="Is this a real problem or hypothetical?",
        description=(
            "Is this worry about something that's actually happening now, or is "
            'it a "what if" scenario about something that might happen?'
        ),
        options=("It's happening now or very likely", 'It\'s a "what if" worry'),
    ),
    TreeNode.CAN_CONTROL: NodePrompt(
        title="Can you influence or control this?",
        description=(
            "Is there anything you can personally do to change or improve this "
            "situation?"
        ),
        options=("Yes, I can do something", "No, it's outside my control"),
    ),
    TreeNode.CAN_ACT_NOW: NodePrompt(
        title="Can you take action right now?",
        description=(
            "Is there something you can do about this immediately, or do you "
            "need to wait?"
        ),
        options=("Yes, I can act now", "No, I need to wait"),
    ),
    TreeNode.ACTION_NOW: NodePrompt(
        title="Take Action!",
        description=(
            "You've identified something you can do right now. What's the first "
            "small step you can take?"
        ),
        guidance=(
            "Taking action is the best antidote to worry. Even a small step "
            "forward can reduce anxiety significantly."
        ),
        action_hint='What will you do right now? (e.g., "Prepare my opening slide")',
    ),
    TreeNode.SCHEDULE_LATER: NodePrompt(
        title="Schedule It",
        description=(
            "You can't act right now, but you can plan. When will you address this?"
        ),
        guidance=(
            "Scheduling a specific time to address your worry helps your brain "
            '"let go" until then. Write down when you\'ll handle it.'
        ),
        action_hint='When will you address this? (e.g., "Tomorrow at 2pm")',
    ),
    TreeNode.LET_GO: NodePrompt(
        title="Practice Letting Go",
        description=(
            "This situation is outside your control. Continuing to worry won't "
            "change the outcome."
        ),
        guidance=(
            "Accepting what you can't control is difficult but healthy. Try "
            'saying: "I acknowledge this worry. I cannot control it. I choose to '
            'redirect my energy to things I can influence."'
        ),
        affirmation='"I release what I cannot control"',
    ),
    TreeNode.LET_GO_HYPOTHETICAL: NodePrompt(
        title="Return to the Present",
        description=(
            "You're worrying about something that hasn't happened and may never "
            "happen."
        ),
        guidance=(
            'Most "what if" worries never come true. Instead of living in an '
            "imagined future, bring your attention back to this moment. What's "
            "actually true right now?"
        ),
        affirmation='"I focus on what is, not what might be"',
    ),
}

ABOUT_TEXT = (
    "This technique helps you decide what to do with worrying thoughts by "
    "asking key questions about controllability and timing.\n\n"
    "Based on CBT principles for worry management and anxiety reduction.\n\n"
    "Most worries fall into two categories: things we can control (act on "
    "them) and things we can't (let them go).\n\n"
    "It's normal to worry. This tool isn't about stopping worry, but "
    "redirecting your energy productively."
)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class WorryWalk:
    """One user's pass through the tree, plus the inputs gathered on the way."""

    def __init__(self) -> None:
        self.session = WorrySession()

    @property
    def node(self) -> TreeNode:
        return self.session.node

    @property
    def finished(self) -> bool:
        return self.session.node.is_terminal

    def restart(self) -> TreeNode:
        """Start over; the last "after" rating becomes the new starting point."""
        previous_after = self.session.anxiety_after
        self.session = WorrySession(anxiety_before=previous_after)
        return self.session.node

    def submit_worry(self, text: str, anxiety: Optional[int] = None) -> TreeNode:
        """Record the worry (and optional 0-10 rating) and move to the first question."""
        if self.session.node != TreeNode.START:
            raise InvalidTransition("the worry can only be submitted at the start of a walk")
        text = text.strip()
        if not text:
            raise InvalidTransition("a worry must be written down before continuing")
        next_node = choose(self.session.node, 0)
        if anxiety is not None:
            self.session.anxiety_before = anxiety
        self.session.worry_text = text
        self._advance(next_node)
        return next_node

    def choose(self, option_index: int) -> TreeNode:
        if self.session.node == TreeNode.START:
            raise InvalidTransition("submit the worry text to leave the start node")
        next_node = choose(self.session.node, option_index)
        self._advance(next_node)
        return next_node

    def back(self) -> TreeNode:
        previous = back(self.session.history)
        log.debug("back: %s -> %s", self.session.node.value, previous.value)
        self.session.node = previous
        return previous

    def set_action_plan(self, plan: str) -> None:
        self.session.action_plan = plan.strip() or None

    def rate_after(self, anxiety: int) -> None:
        self.session.anxiety_after = anxiety

    @property
    def anxiety_change(self) -> int:
        """Drop in anxiety (positive means the user feels calmer)."""
        return self.session.anxiety_before - self.session.anxiety_after

    def summary(self) -> str:
        return summarize(
            self.session.node, self.session.worry_text or "", self.session.action_plan
        )

    def journal_note(self) -> str:
        return render_journal_note(self.session)

    def _advance(self, next_node: TreeNode) -> None:
        log.debug("choose: %s -> %s", self.session.node.value, next_node.value)
        self.session.history.append(self.session.node)
        self.session.node = next_node
