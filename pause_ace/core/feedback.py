"""Maps interaction outcomes to the feedback sentence given to the Reflector."""

from __future__ import annotations

from enum import Enum
from typing import Union


class InteractionOutcome(str, Enum):
    """How an interaction ended, as recorded by the calling app."""

    ACCEPTED = "accepted"
    OVERRIDDEN = "overridden"
    WAIT = "wait"
    ABANDONED = "abandoned"
    AUTO_APPROVED = "auto_approved"
    BREAK_GLASS = "break_glass"
    TIMEOUT = "timeout"
    WIZARD_BOOKMARK = "wizard_bookmark"
    WIZARD_ABANDONED = "wizard_abandoned"


FEEDBACK_SIGNALS: dict[InteractionOutcome, str] = {
    InteractionOutcome.ACCEPTED: "correct — user accepted the suggestion",
    InteractionOutcome.OVERRIDDEN: "incorrect — user overrode the suggestion",
    InteractionOutcome.WAIT: "correct — user chose to wait as suggested",
    InteractionOutcome.ABANDONED: "neutral — user abandoned without deciding",
    InteractionOutcome.AUTO_APPROVED: (
        "neutral — low-risk purchase auto-approved, no intervention needed"
    ),
    InteractionOutcome.BREAK_GLASS: (
        "neutral — system failure triggered break glass fallback, no learning signal"
    ),
    InteractionOutcome.TIMEOUT: "neutral — interaction timed out, no learning signal",
    InteractionOutcome.WIZARD_BOOKMARK: "correct — user bookmarked reflection for later",
    InteractionOutcome.WIZARD_ABANDONED: "neutral — user started wizard but abandoned",
}

# Outcomes that carry a behavioural signal worth a learning run
LEARNABLE_OUTCOMES = frozenset(
    {
        InteractionOutcome.ACCEPTED,
        InteractionOutcome.OVERRIDDEN,
        InteractionOutcome.WAIT,
        InteractionOutcome.ABANDONED,
    }
)


def _coerce(outcome: Union[InteractionOutcome, str]) -> InteractionOutcome | None:
    if isinstance(outcome, InteractionOutcome):
        return outcome
    try:
        return InteractionOutcome(str(outcome))
    except ValueError:
        return None


def feedback_signal(outcome: Union[InteractionOutcome, str]) -> str:
    """Return the natural-language feedback sentence for *outcome*.

    Unknown outcomes map to a neutral sentence naming the raw value rather
    than raising, so a newly added outcome never breaks learning.
    """
    known = _coerce(outcome)
    if known is None:
        raw = outcome.value if isinstance(outcome, Enum) else outcome
        return f"neutral — unknown outcome: {raw}"
    return FEEDBACK_SIGNALS[known]


def is_learnable(outcome: Union[InteractionOutcome, str]) -> bool:
    return _coerce(outcome) in LEARNABLE_OUTCOMES
