"""Shared utilities for role implementations."""

from __future__ import annotations

import re
from typing import Any, List, Optional, Sequence


def extract_cited_skill_ids(text: str) -> List[str]:
    """Extract skill IDs cited in text using ``[id-format]`` notation.

    Parses ``[section-00001]`` patterns and returns unique IDs in order
    of first appearance.

    Example::

        >>> extract_cited_skill_ids("Following [impulse-control-00003], wait a day.")
        ['impulse-control-00003']
    """
    matches = re.findall(r"\[([a-zA-Z0-9_-]+-\d+)\]", text)
    return list(dict.fromkeys(matches))


def format_optional(value: Optional[str]) -> str:
    """Return *value* or ``"(none)"`` when falsy."""
    return value or "(none)"


def make_skillbook_excerpt(skillbook: Any, skill_ids: Sequence[str]) -> str:
    """Build a compact excerpt of cited skills.

    Args:
        skillbook: Skillbook (or view) to look up skills in.
        skill_ids: Ordered skill IDs cited by the agent.

    Returns:
        One ``[id] content`` line per unique cited skill found.
    """
    lines: list[str] = []
    seen: set[str] = set()
    for skill_id in skill_ids:
        if skill_id in seen:
            continue
        skill = skillbook.get_skill(skill_id)
        if skill:
            seen.add(skill_id)
            lines.append(f"[{skill.id}] {skill.content}")
    return "\n".join(lines)
