"""Output types produced by the learning roles."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class NewLearning(BaseModel):
    """A candidate skill proposed by the Reflector."""

    section: str = Field(..., description="Topical bucket for the learning")
    content: str = Field(..., description="The strategy text")
    atomicity_score: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="How atomic/focused this learning is (advisory only)",
    )


class ReflectionQuality(BaseModel):
    """Self-assessment flags attached to a reflection. Advisory, not gating."""

    root_cause_identified: bool = False
    learnings_actionable: bool = False
    evidence_based: bool = False


class ReflectorOutput(BaseModel):
    """Structured critique of one interaction outcome."""

    analysis: str = Field(..., description="Detailed diagnostic analysis")
    helpful_skill_ids: List[str] = Field(
        default_factory=list, description="Skills that contributed to a good outcome"
    )
    harmful_skill_ids: List[str] = Field(
        default_factory=list, description="Skills that contributed to a bad outcome"
    )
    new_learnings: List[NewLearning] = Field(
        default_factory=list, description="Candidate skills extracted from the interaction"
    )
    reflection_quality: Optional[ReflectionQuality] = None

    @field_validator("helpful_skill_ids", "harmful_skill_ids", mode="before")
    @classmethod
    def _dedupe(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, list):
            return list(dict.fromkeys(str(v) for v in value))
        return value


class CommitResult(BaseModel):
    """Outcome of the optimistic commit loop for one update batch."""

    committed: bool = Field(..., description="Whether a commit succeeded")
    version: Optional[int] = Field(
        default=None, description="Stored version after the commit"
    )
    attempts: int = Field(default=0, description="Commit attempts made")
    skill_count_before: int = 0
    skill_count_after: int = 0
