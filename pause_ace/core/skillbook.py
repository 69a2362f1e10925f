"""Skill, Skillbook, and update operations for the learning layer."""

from __future__ import annotations

import copy
import json
import re
from dataclasses import asdict, dataclass, field, fields as dataclass_fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

VALID_TAGS = ("helpful", "harmful", "neutral")


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _as_counter(value: Any) -> int:
    """Stored id counter, or 0 when missing or unreadable."""
    if isinstance(value, bool):
        return 0
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


# ---------------------------------------------------------------------------
# Update operations
# ---------------------------------------------------------------------------


class AddOperation(BaseModel):
    """Create a new skill with a freshly generated id."""

    type: Literal["ADD"] = "ADD"
    section: str
    content: str


class _CounterMetadata(BaseModel):
    """Operations carrying ``{tag: count}`` metadata for skill counters."""

    metadata: Dict[str, int] = Field(default_factory=dict)

    @field_validator("metadata", mode="before")
    @classmethod
    def _only_known_tags(cls, value: Any) -> Dict[str, int]:
        if not isinstance(value, dict):
            return {}
        # Models occasionally add bookkeeping keys; only counters are kept
        return {str(k): v for k, v in value.items() if str(k) in VALID_TAGS}

    @field_validator("metadata")
    @classmethod
    def _non_negative(cls, value: Dict[str, int]) -> Dict[str, int]:
        for tag, count in value.items():
            if count < 0:
                raise ValueError(f"Counter value for {tag!r} must be >= 0")
        return value


class UpdateOperation(_CounterMetadata):
    """Rewrite an existing skill.

    ``content`` replaces the text when given; ``metadata`` overwrites the
    named counters with absolute values (TAG increments them instead).
    """

    type: Literal["UPDATE"] = "UPDATE"
    section: str = ""
    skill_id: str
    content: Optional[str] = None


class TagOperation(_CounterMetadata):
    """Increment helpful/harmful/neutral counters on an existing skill."""

    type: Literal["TAG"] = "TAG"
    section: str = ""
    skill_id: str


class RemoveOperation(BaseModel):
    """Delete a skill by id."""

    type: Literal["REMOVE"] = "REMOVE"
    section: str = ""
    skill_id: str


Operation = Annotated[
    Union[AddOperation, UpdateOperation, TagOperation, RemoveOperation],
    Field(discriminator="type"),
]
OperationType = Literal["ADD", "UPDATE", "TAG", "REMOVE"]


class UpdateBatch(BaseModel):
    """Bundle of skill manager reasoning and operations.

    ``operations`` is a closed union discriminated on ``type``: an unknown
    kind is a validation error, never a silently skipped entry.
    """

    reasoning: str = ""
    operations: List[Operation] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalise_types(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        ops = data.get("operations")
        if isinstance(ops, list):
            normalised = []
            for op in ops:
                if isinstance(op, dict) and "type" in op:
                    op = {**op, "type": str(op["type"]).upper()}
                normalised.append(op)
            data = {**data, "operations": normalised}
        if data.get("reasoning") is None:
            data = {**data, "reasoning": ""}
        return data

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "UpdateBatch":
        return cls.model_validate(payload)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def __len__(self) -> int:
        return len(self.operations)


# ---------------------------------------------------------------------------
# Skill
# ---------------------------------------------------------------------------


@dataclass
class Skill:
    """Single skillbook entry."""

    id: str
    section: str
    content: str
    helpful: int = 0
    harmful: int = 0
    neutral: int = 0
    created_at: str = field(default_factory=_utcnow)
    updated_at: str = field(default_factory=_utcnow)

    def apply_metadata(self, metadata: Dict[str, int]) -> None:
        for key, value in metadata.items():
            if key in VALID_TAGS:
                setattr(self, key, int(value))

    def tag(self, tag: str, increment: int = 1) -> None:
        if tag not in VALID_TAGS:
            raise ValueError(f"Unsupported tag: {tag}")
        current = getattr(self, tag)
        setattr(self, tag, current + increment)
        self.updated_at = _utcnow()

    def to_llm_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "section": self.section,
            "content": self.content,
            "helpful": self.helpful,
            "harmful": self.harmful,
            "neutral": self.neutral,
        }


# ---------------------------------------------------------------------------
# Skillbook
# ---------------------------------------------------------------------------


class Skillbook:
    """Per-user collection of learned strategies.

    The version counter used for optimistic commits is owned by the
    storage layer and is deliberately absent from the serialized payload.
    """

    def __init__(self) -> None:
        self._skills: Dict[str, Skill] = {}
        self._sections: Dict[str, List[str]] = {}
        self._next_id = 0
        self._metadata: Dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"Skillbook(skills={len(self._skills)}, sections={list(self._sections.keys())})"

    def __str__(self) -> str:
        if not self._skills:
            return "Skillbook(empty)"
        return self._as_markdown_debug()

    def __len__(self) -> int:
        return len(self._skills)

    # ------------------------------------------------------------------ #
    # CRUD
    # ------------------------------------------------------------------ #

    def add_skill(
        self,
        section: str,
        content: str,
        metadata: Optional[Dict[str, int]] = None,
    ) -> Skill:
        skill_id = self._generate_id(section)
        skill = Skill(id=skill_id, section=section, content=content)
        if metadata:
            skill.apply_metadata(metadata)
        self._skills[skill_id] = skill
        self._sections.setdefault(section, []).append(skill_id)
        return skill

    def update_skill(
        self,
        skill_id: str,
        *,
        content: Optional[str] = None,
        metadata: Optional[Dict[str, int]] = None,
    ) -> Optional[Skill]:
        skill = self._skills.get(skill_id)
        if skill is None:
            return None
        if content is not None:
            skill.content = content
        if metadata:
            skill.apply_metadata(metadata)
        skill.updated_at = _utcnow()
        return skill

    def tag_skill(
        self, skill_id: str, tag: str, increment: int = 1
    ) -> Optional[Skill]:
        skill = self._skills.get(skill_id)
        if skill is None:
            return None
        skill.tag(tag, increment=increment)
        return skill

    def remove_skill(self, skill_id: str) -> None:
        skill = self._skills.pop(skill_id, None)
        if skill is None:
            return
        section_list = self._sections.get(skill.section)
        if section_list is not None:
            remaining = [sid for sid in section_list if sid != skill_id]
            if remaining:
                self._sections[skill.section] = remaining
            else:
                del self._sections[skill.section]

    def get_skill(self, skill_id: str) -> Optional[Skill]:
        return self._skills.get(skill_id)

    def skills(self) -> List[Skill]:
        return list(self._skills.values())

    def sections(self) -> Dict[str, List[str]]:
        return {section: list(ids) for section, ids in self._sections.items()}

    def copy(self) -> "Skillbook":
        """Return an independent deep copy."""
        return copy.deepcopy(self)

    # ------------------------------------------------------------------ #
    # Serialization
    # ------------------------------------------------------------------ #

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skills": {skill_id: asdict(skill) for skill_id, skill in self._skills.items()},
            "sections": self.sections(),
            "metadata": {**self._metadata, "next_id": self._next_id},
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Skillbook":
        instance = cls()
        valid_fields = {f.name for f in dataclass_fields(Skill)}
        skills_payload = payload.get("skills") or {}
        if isinstance(skills_payload, dict):
            for skill_id, skill_value in skills_payload.items():
                if not isinstance(skill_value, dict):
                    continue
                skill_data = {k: v for k, v in skill_value.items() if k in valid_fields}
                skill_data["id"] = skill_id
                skill = Skill(**skill_data)
                instance._skills[skill_id] = skill
                # The section index is derived, never trusted from the payload
                instance._sections.setdefault(skill.section, []).append(skill_id)

        metadata = payload.get("metadata")
        if isinstance(metadata, dict):
            instance._metadata = {k: v for k, v in metadata.items() if k != "next_id"}
            next_id = metadata.get("next_id")
        else:
            # Payloads written before metadata existed kept the counter top-level
            next_id = payload.get("next_id")
        instance._next_id = max(_as_counter(next_id), instance._highest_id_suffix())
        return instance

    def dumps(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @classmethod
    def loads(cls, data: str) -> "Skillbook":
        payload = json.loads(data)
        if not isinstance(payload, dict):
            raise ValueError("Skillbook serialization must be a JSON object.")
        return cls.from_dict(payload)

    def save_to_file(self, path: str) -> None:
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with file_path.open("w", encoding="utf-8") as f:
            f.write(self.dumps())

    @classmethod
    def load_from_file(cls, path: str) -> "Skillbook":
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Skillbook file not found: {path}")
        with file_path.open("r", encoding="utf-8") as f:
            return cls.loads(f.read())

    # ------------------------------------------------------------------ #
    # Update application
    # ------------------------------------------------------------------ #

    def apply_update(self, update: UpdateBatch) -> None:
        for operation in update.operations:
            self._apply_operation(operation)

    def _apply_operation(self, operation: Operation) -> None:
        # Dangling ids are skipped: a batch may have been derived from an
        # older state of this skillbook.
        if isinstance(operation, AddOperation):
            self.add_skill(section=operation.section, content=operation.content)
        elif isinstance(operation, UpdateOperation):
            self.update_skill(
                operation.skill_id,
                content=operation.content,
                metadata=operation.metadata,
            )
        elif isinstance(operation, TagOperation):
            for tag, increment in operation.metadata.items():
                self.tag_skill(operation.skill_id, tag, increment)
        elif isinstance(operation, RemoveOperation):
            self.remove_skill(operation.skill_id)
        else:
            raise TypeError(f"Unknown operation: {type(operation).__name__}")

    # ------------------------------------------------------------------ #
    # Presentation
    # ------------------------------------------------------------------ #

    def as_prompt(self) -> str:
        try:
            from toon import encode
        except ImportError:
            raise ImportError(
                "TOON compression requires python-toon. "
                "Install with: pip install python-toon>=0.1.0"
            )
        skills_data = [s.to_llm_dict() for s in self.skills()]
        return encode({"skills": skills_data}, {"delimiter": "\t"})

    def _as_markdown_debug(self) -> str:
        parts: List[str] = []
        for section, skill_ids in sorted(self._sections.items()):
            parts.append(f"## {section}")
            for skill_id in skill_ids:
                skill = self._skills[skill_id]
                counters = f"(helpful={skill.helpful}, harmful={skill.harmful}, neutral={skill.neutral})"
                parts.append(f"- [{skill.id}] {skill.content} {counters}")
        return "\n".join(parts)

    def stats(self) -> Dict[str, object]:
        return {
            "sections": len(self._sections),
            "skills": len(self._skills),
            "tags": {
                "helpful": sum(s.helpful for s in self._skills.values()),
                "harmful": sum(s.harmful for s in self._skills.values()),
                "neutral": sum(s.neutral for s in self._skills.values()),
            },
        }

    # ------------------------------------------------------------------ #
    # Internal
    # ------------------------------------------------------------------ #

    def _generate_id(self, section: str) -> str:
        words = section.split()
        section_prefix = words[0].lower() if words else "general"
        while True:
            self._next_id += 1
            skill_id = f"{section_prefix}-{self._next_id:05d}"
            if skill_id not in self._skills:
                return skill_id

    def _highest_id_suffix(self) -> int:
        highest = 0
        for skill_id in self._skills:
            match = re.search(r"-(\d+)$", skill_id)
            if match:
                highest = max(highest, int(match.group(1)))
        return highest
