"""Deterministic LLM client for tests and offline demos."""

from __future__ import annotations

import asyncio
import json
from collections import deque
from typing import Any, Deque, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)

Response = Union[str, Dict[str, Any]]


class DummyLLMClient:
    """Replays pre-seeded responses in FIFO order.

    Each response is a JSON string or a dict; it is validated against the
    ``response_model`` the caller asks for, exactly like a real reply.

    Args:
        responses: Initial queue of responses.
        delay: Seconds to sleep before answering, for exercising timeouts.

    Example::

        llm = DummyLLMClient()
        llm.queue({"analysis": "User waited as suggested."})
        reflector = Reflector(llm)
    """

    def __init__(
        self,
        responses: Optional[List[Response]] = None,
        delay: float = 0.0,
    ) -> None:
        self._responses: Deque[Response] = deque(responses or [])
        self.delay = delay
        self.prompts: List[str] = []

    def queue(self, *responses: Response) -> None:
        self._responses.extend(responses)

    @property
    def pending(self) -> int:
        return len(self._responses)

    async def complete_structured(
        self,
        prompt: str,
        response_model: Type[T],
        **kwargs: Any,
    ) -> T:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self._responses:
            raise RuntimeError("DummyLLMClient ran out of queued responses")
        response = self._responses.popleft()
        data = json.loads(response) if isinstance(response, str) else response
        return response_model.model_validate(data)
