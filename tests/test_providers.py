"""Unit tests for the LLM providers (no network: completions are patched)."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from pause_ace import (
    InstructorClient,
    LiteLLMClient,
    ReflectorOutput,
    UpdateBatch,
    wrap_with_instructor,
)
from pause_ace.providers import instructor as instructor_module
from pause_ace.providers import litellm as litellm_module


def _fake_response(text: str):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        model="gpt-4o-mini",
        usage=None,
    )


@pytest.fixture
def patched_acompletion(monkeypatch):
    calls: list[dict] = []
    replies: list[str] = []

    async def fake_acompletion(**params):
        calls.append(params)
        return _fake_response(replies.pop(0))

    monkeypatch.setattr(litellm_module, "acompletion", fake_acompletion)
    return calls, replies


@pytest.mark.unit
class TestExtractJson:
    def test_plain_json(self):
        assert LiteLLMClient._extract_json('{"a": 1}') == {"a": 1}

    def test_markdown_fenced(self):
        assert LiteLLMClient._extract_json('```json\n{"a": 1}\n```') == {"a": 1}

    def test_preamble_and_braces_in_strings(self):
        text = 'Here you go: {"analysis": "use {braces}", "n": {"x": 2}} thanks'
        assert LiteLLMClient._extract_json(text) == {
            "analysis": "use {braces}",
            "n": {"x": 2},
        }

    def test_no_json_raises(self):
        with pytest.raises(ValueError):
            LiteLLMClient._extract_json("no json here")


@pytest.mark.unit
class TestSamplingParams:
    def test_non_claude_untouched(self):
        params = {"temperature": 0.5, "top_p": 0.9}
        assert LiteLLMClient._resolve_sampling_params(params, "gpt-4o") == params

    def test_claude_keeps_temperature_by_default(self):
        resolved = LiteLLMClient._resolve_sampling_params(
            {"temperature": 0.5, "top_p": 0.9}, "claude-sonnet"
        )
        assert resolved == {"temperature": 0.5}

    def test_claude_top_p_priority(self):
        resolved = LiteLLMClient._resolve_sampling_params(
            {"temperature": 0.5, "top_p": 0.9}, "claude-sonnet", "top_p"
        )
        assert resolved == {"top_p": 0.9}

    def test_invalid_priority_rejected(self):
        with pytest.raises(ValueError):
            LiteLLMClient._resolve_sampling_params({}, "claude-sonnet", "beam")


@pytest.mark.unit
class TestCompleteStructured:
    def test_one_call_validated(self, patched_acompletion):
        calls, replies = patched_acompletion
        replies.append('```json\n{"analysis": "Waiting worked."}\n```')
        client = LiteLLMClient(model="gpt-4o-mini", api_key="sk-test")

        out = asyncio.run(client.complete_structured("prompt", ReflectorOutput))

        assert out.analysis == "Waiting worked."
        assert len(calls) == 1
        assert calls[0]["messages"] == [{"role": "user", "content": "prompt"}]
        assert calls[0]["api_key"] == "sk-test"
        assert calls[0]["temperature"] == 0.0

    def test_schema_mismatch_raises(self, patched_acompletion):
        _, replies = patched_acompletion
        replies.append('{"operations": [{"type": "MERGE"}]}')
        client = LiteLLMClient(model="gpt-4o-mini")
        with pytest.raises(ValidationError):
            asyncio.run(client.complete_structured("prompt", UpdateBatch))

    def test_extra_kwargs_forwarded(self, patched_acompletion):
        calls, replies = patched_acompletion
        replies.append('{"analysis": "ok"}')
        client = LiteLLMClient(model="gpt-4o-mini", reasoning_effort="low")
        asyncio.run(client.complete_structured("p", ReflectorOutput, max_tokens=64))
        assert calls[0]["reasoning_effort"] == "low"
        assert calls[0]["max_tokens"] == 64

    def test_model_required(self):
        with pytest.raises(ValueError):
            LiteLLMClient()


@pytest.fixture
def patched_instructor(monkeypatch):
    """Replace ``instructor.from_litellm`` with a recorder of create() calls."""
    calls: list[dict] = []
    wrapped: list = []
    replies: list = []

    async def create(**params):
        calls.append(params)
        reply = replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def fake_from_litellm(completion, mode=None):
        wrapped.append((completion, mode))
        return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))

    monkeypatch.setattr(instructor_module.instructor, "from_litellm", fake_from_litellm)
    return calls, wrapped, replies


@pytest.mark.unit
class TestInstructorClient:
    def test_single_attempt_with_base_params(self, patched_instructor):
        calls, wrapped, replies = patched_instructor
        replies.append(ReflectorOutput(analysis="Waiting worked."))
        base = LiteLLMClient(model="gpt-4o-mini", api_key="sk-test")
        client = InstructorClient(base)

        out = asyncio.run(client.complete_structured("prompt", ReflectorOutput))

        assert out.analysis == "Waiting worked."
        assert len(calls) == 1
        assert calls[0]["max_retries"] == 0
        assert calls[0]["response_model"] is ReflectorOutput
        assert calls[0]["model"] == "gpt-4o-mini"
        assert calls[0]["api_key"] == "sk-test"
        assert calls[0]["messages"] == [{"role": "user", "content": "prompt"}]
        assert wrapped[0][0] is litellm_module.acompletion

    def test_failure_propagates(self, patched_instructor):
        calls, _, replies = patched_instructor
        replies.append(ValueError("reply did not validate"))
        client = wrap_with_instructor(LiteLLMClient(model="gpt-4o-mini"))
        with pytest.raises(ValueError):
            asyncio.run(client.complete_structured("prompt", UpdateBatch))
        assert len(calls) == 1

    def test_kwargs_override_base_config(self, patched_instructor):
        calls, _, replies = patched_instructor
        replies.append(UpdateBatch())
        client = InstructorClient(LiteLLMClient(model="gpt-4o-mini", temperature=0.3))
        asyncio.run(client.complete_structured("p", UpdateBatch, temperature=0.9))
        assert calls[0]["temperature"] == 0.9
        assert client.model == "gpt-4o-mini"
