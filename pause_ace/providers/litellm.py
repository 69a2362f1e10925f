"""LiteLLM client for unified access to 100+ LLM providers.

Satisfies the ``LLMClientLike`` protocol used by the Reflector and
SkillManager.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel

logger = logging.getLogger(__name__)

try:
    from litellm import acompletion

    LITELLM_AVAILABLE = True
except ImportError:
    LITELLM_AVAILABLE = False
    logger.warning("LiteLLM not installed. Install with: pip install litellm")

T = TypeVar("T", bound=BaseModel)

SAMPLING_KEYS = ("temperature", "top_p", "top_k")
_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


@dataclass
class LLMResponse:
    """Container for LLM outputs."""

    text: str
    raw: Optional[Dict[str, Any]] = None


@dataclass
class LiteLLMConfig:
    """Configuration for LiteLLM client."""

    model: str
    api_key: Optional[str] = None
    api_base: Optional[str] = None
    temperature: float = 0.0
    max_tokens: int = 2048
    top_p: Optional[float] = None
    timeout: int = 60
    # Transport retries inside litellm; a bad reply is never re-asked
    max_retries: int = 3
    sampling_priority: str = "temperature"  # "temperature" | "top_p" | "top_k"
    extra_headers: Optional[Dict[str, str]] = None
    ssl_verify: Optional[Union[bool, str]] = None
    # Model-specific parameters (reasoning_effort, budget_tokens, ...)
    extra_params: Optional[Dict[str, Any]] = None


class LiteLLMClient:
    """Production LLM client using LiteLLM's async completion API.

    ``complete_structured`` issues exactly one completion per call, extracts
    the JSON object from the reply and validates it against the requested
    Pydantic model.  A reply that does not parse or validate raises.

    Anthropic models reject requests carrying more than one sampling
    parameter; ``sampling_priority`` decides which one is sent.

    Example::

        client = LiteLLMClient(model="gemini/gemini-2.5-flash")
        reflection = await client.complete_structured(prompt, ReflectorOutput)
    """

    _CONFIG_KWARGS = frozenset(
        {"top_p", "timeout", "max_retries", "extra_headers", "ssl_verify"}
    )

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        temperature: float = 0.0,
        max_tokens: int = 2048,
        sampling_priority: str = "temperature",
        config: Optional[LiteLLMConfig] = None,
        **kwargs: Any,
    ) -> None:
        if not LITELLM_AVAILABLE:
            raise ImportError(
                "LiteLLM is not installed. Install with: pip install litellm"
            )
        if config is None:
            if model is None:
                raise ValueError(
                    "Either 'model' parameter or 'config' with model must be provided"
                )
            extra = {k: v for k, v in kwargs.items() if k not in self._CONFIG_KWARGS}
            config = LiteLLMConfig(
                model=model,
                api_key=api_key,
                api_base=api_base,
                temperature=temperature,
                max_tokens=max_tokens,
                sampling_priority=sampling_priority,
                extra_params=extra or None,
                **{k: v for k, v in kwargs.items() if k in self._CONFIG_KWARGS},
            )
        self.config = config
        self.model = config.model

    @staticmethod
    def _resolve_sampling_params(
        params: Dict[str, Any], model: str, sampling_priority: str = "temperature"
    ) -> Dict[str, Any]:
        """Keep a single sampling parameter for Claude models.

        A zero temperature is the default rather than a choice, so it only
        wins when nothing else is set.
        """
        if "claude" not in model.lower():
            return params
        if sampling_priority not in SAMPLING_KEYS:
            raise ValueError(
                f"Invalid sampling_priority: {sampling_priority}. "
                f"Must be one of: {', '.join(SAMPLING_KEYS)}"
            )

        resolved = {
            k: v for k, v in params.items() if not (k in SAMPLING_KEYS and v is None)
        }
        present = [k for k in SAMPLING_KEYS if k in resolved]
        if len(present) <= 1:
            return resolved

        def chosen(key: str) -> bool:
            return key in resolved and (key != "temperature" or resolved[key] > 0)

        keep = next(
            (k for k in (sampling_priority, *SAMPLING_KEYS) if chosen(k)), present[0]
        )
        dropped = [k for k in present if k != keep]
        for key in dropped:
            resolved.pop(key)
        logger.info("Claude model %s: using %s, ignoring %s", model, keep, dropped)
        return resolved

    def _build_call_params(
        self, messages: List[Dict[str, str]], **kwargs: Any
    ) -> Dict[str, Any]:
        """Build the keyword arguments for one ``acompletion()`` call."""
        cfg = self.config
        params: Dict[str, Any] = {
            "model": cfg.model,
            "messages": messages,
            "temperature": kwargs.pop("temperature", cfg.temperature),
            "max_tokens": kwargs.pop("max_tokens", cfg.max_tokens),
            "timeout": kwargs.pop("timeout", cfg.timeout),
            "num_retries": kwargs.pop("num_retries", cfg.max_retries),
            "drop_params": True,
            "top_p": kwargs.pop("top_p", cfg.top_p),
            "top_k": kwargs.pop("top_k", None),
        }
        params = self._resolve_sampling_params(params, cfg.model, cfg.sampling_priority)
        for key in ("top_p", "top_k"):
            if params.get(key, 0) is None:
                del params[key]

        optional = {
            "api_key": cfg.api_key,
            "api_base": cfg.api_base,
            "extra_headers": cfg.extra_headers,
            "ssl_verify": cfg.ssl_verify,
        }
        params.update({k: v for k, v in optional.items() if v is not None})
        params.update(cfg.extra_params or {})
        params.update({k: v for k, v in kwargs.items() if k not in params})
        return params

    async def acomplete(self, prompt: str, **kwargs: Any) -> LLMResponse:
        """Generate a completion for the given prompt."""
        params = self._build_call_params([{"role": "user", "content": prompt}], **kwargs)
        try:
            response = await acompletion(**params)
        except Exception as e:
            logger.error("LiteLLM completion failed for %s: %s", self.model, e)
            raise

        hidden = getattr(response, "_hidden_params", None) or {}
        return LLMResponse(
            text=response.choices[0].message.content or "",
            raw={
                "model": response.model,
                "usage": response.usage.model_dump() if response.usage else None,
                "cost": hidden.get("response_cost"),
            },
        )

    @staticmethod
    def _extract_json(text: str) -> Any:
        """Parse the JSON object in *text*, tolerating code fences and prose."""
        text = text.strip()
        fenced = _FENCE_RE.match(text)
        if fenced:
            text = fenced.group(1)
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            pass

        decoder = json.JSONDecoder()
        for match in re.finditer(r"\{", text):
            try:
                value, _ = decoder.raw_decode(text, match.start())
            except json.JSONDecodeError:
                continue
            if isinstance(value, dict):
                return value
        raise ValueError(f"Could not extract JSON from LLM response: {text[:200]}...")

    async def complete_structured(
        self,
        prompt: str,
        response_model: Type[T],
        **kwargs: Any,
    ) -> T:
        """Structured output: one completion, JSON extraction, Pydantic validation."""
        response = await self.acomplete(prompt, **kwargs)
        return response_model.model_validate(self._extract_json(response.text))
