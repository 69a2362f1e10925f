"""The interaction record that a learning run is derived from."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .feedback import InteractionOutcome, feedback_signal


@dataclass(frozen=True)
class Interaction:
    """A completed interaction handed to the learning pipeline.

    ``question`` is what was being decided (e.g. the purchase context),
    ``generator_answer`` is what the agent said or did.
    """

    interaction_id: str
    user_id: str
    question: str
    generator_answer: str
    outcome: Union[InteractionOutcome, str]
    ground_truth: Optional[str] = None
    metadata: Dict[str, object] = field(default_factory=dict)

    @property
    def feedback(self) -> str:
        return feedback_signal(self.outcome)
