"""Shared fixtures for learning-layer tests."""

from __future__ import annotations

import pytest

from pause_ace import (
    DummyLLMClient,
    Interaction,
    MemorySkillbookStore,
    Reflector,
    Skillbook,
    SkillManager,
)


def reflection_json(
    analysis: str = "User waited as suggested; the cooling-off nudge worked.",
    helpful: list[str] | None = None,
    harmful: list[str] | None = None,
    learnings: list[dict] | None = None,
) -> dict:
    return {
        "analysis": analysis,
        "helpful_skill_ids": helpful or [],
        "harmful_skill_ids": harmful or [],
        "new_learnings": learnings or [],
        "reflection_quality": {
            "root_cause_identified": True,
            "learnings_actionable": True,
            "evidence_based": True,
        },
    }


def batch_json(*operations: dict, reasoning: str = "Curated from reflection.") -> dict:
    return {"reasoning": reasoning, "operations": list(operations)}


def make_interaction(
    interaction_id: str = "int-1",
    user_id: str = "user-1",
    outcome: str = "wait",
    **overrides,
) -> Interaction:
    fields = {
        "question": "Should I buy these $180 sneakers on a flash sale?",
        "generator_answer": "Wait 24 hours; flash sales create false urgency.",
    }
    fields.update(overrides)
    return Interaction(
        interaction_id=interaction_id, user_id=user_id, outcome=outcome, **fields
    )


@pytest.fixture
def llm():
    return DummyLLMClient()


@pytest.fixture
def reflector(llm):
    return Reflector(llm)


@pytest.fixture
def skill_manager(llm):
    return SkillManager(llm)


@pytest.fixture
def store():
    return MemorySkillbookStore()


@pytest.fixture
def seeded_skillbook():
    sb = Skillbook()
    sb.add_skill("impulse-control", "Suggest a 24h cooling-off period for sales")
    sb.add_skill("price-comparison", "Check two other retailers before buying")
    return sb
