"""Unit tests for pipeline.StepContext and the subclassing pattern."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import pytest

from pipeline import StepContext


@dataclass(frozen=True)
class ScoredContext(StepContext):
    """Minimal subclass used only in these tests."""

    verdict: Any = None
    score: float = 0.0


@pytest.mark.unit
class TestStepContextBase:
    def test_only_two_fields_on_base_class(self):
        field_names = {f.name for f in dataclasses.fields(StepContext)}
        assert field_names == {"sample", "metadata"}

    def test_metadata_defaults_to_empty_mappingproxy(self):
        ctx = StepContext(sample="s")
        assert ctx.metadata == MappingProxyType({})

    def test_plain_dict_metadata_coerced(self):
        ctx = StepContext(sample="s", metadata={"x": 1})
        assert isinstance(ctx.metadata, MappingProxyType)
        assert ctx.metadata["x"] == 1

    def test_existing_mappingproxy_not_double_wrapped(self):
        mp = MappingProxyType({"x": 1})
        assert StepContext(metadata=mp).metadata is mp

    def test_fields_cannot_be_reassigned(self):
        ctx = StepContext(sample="s")
        with pytest.raises(dataclasses.FrozenInstanceError):
            ctx.sample = "other"  # type: ignore[misc]

    def test_metadata_cannot_be_mutated(self):
        ctx = StepContext(sample="s", metadata={"k": "v"})
        with pytest.raises(TypeError):
            ctx.metadata["k"] = "overwrite"  # type: ignore[index]


@pytest.mark.unit
class TestStepContextReplace:
    def test_replace_leaves_original_untouched(self):
        ctx = StepContext(sample="s", metadata={"k": 1})
        ctx2 = ctx.replace(sample="t")
        assert ctx.sample == "s"
        assert ctx2.sample == "t"
        assert ctx2.metadata["k"] == 1

    def test_subclass_replace_returns_same_type(self):
        ctx = ScoredContext(sample="s")
        ctx2 = ctx.replace(verdict="wait", score=0.9)
        assert isinstance(ctx2, ScoredContext)
        assert ctx2.verdict == "wait"
        assert ctx2.score == 0.9

    def test_subclass_keeps_base_coercion(self):
        ctx = ScoredContext(sample="s", metadata={"x": 1})
        assert isinstance(ctx.metadata, MappingProxyType)

    def test_different_subclasses_not_equal(self):
        @dataclass(frozen=True)
        class OtherContext(StepContext):
            verdict: Any = None

        assert ScoredContext(sample="s", verdict="x") != OtherContext(
            sample="s", verdict="x"
        )
