"""Chat-completions client with a bounded tool-calling loop.

Talks to any OpenAI-compatible endpoint (Gemini by default) through the
`openai` SDK on top of an explicit `httpx` client.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Sequence

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI

from ..config import LLMSettings
from ..errors import (
    AssistantAuthError,
    AssistantConnectionError,
    AssistantError,
    AssistantRateLimitError,
    AssistantTimeoutError,
)
from ..logging import get_logger
from .tools import ToolHandler, dispatch

LOG = get_logger("assistant-client")

MAX_TOOL_ROUNDS = 5

SYSTEM_PROMPT = (
    "You are the assistant of a small command-line tool. Answer briefly. "
    "Always use the provided tools for arithmetic and product data instead of guessing, "
    "and base your answer only on what the tools return."
)


def build_openai_client(settings: LLMSettings) -> OpenAI:
    http_client = httpx.Client(
        timeout=httpx.Timeout(settings.timeout, connect=10.0),
    )
    return OpenAI(
        api_key=settings.api_key,
        base_url=settings.base_url,
        http_client=http_client,
        max_retries=0,
    )


def _assistant_message(message: Any) -> Dict[str, Any]:
    return {
        "role": "assistant",
        "content": getattr(message, "content", None),
        "tool_calls": [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.function.name, "arguments": call.function.arguments},
            }
            for call in message.tool_calls
        ],
    }


class Assistant:
    """Answers one natural-language query using a fixed set of tools."""

    def __init__(self, settings: LLMSettings, tools: Sequence[Any], client: Optional[Any] = None) -> None:
        self.settings = settings
        self._client = client
        self._definitions: List[Dict[str, Any]] = []
        self._handlers: Dict[str, ToolHandler] = {}
        for tool in tools:
            self._definitions.extend(tool.definitions())
            self._handlers.update(tool.handlers())

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = build_openai_client(self.settings)
        return self._client

    def close(self) -> None:
        closer = getattr(self._client, "close", None)
        if callable(closer):
            closer()

    def _complete(self, messages: List[Dict[str, Any]]) -> Any:
        request: Dict[str, Any] = {"model": self.settings.model, "messages": messages}
        if self._definitions:
            request["tools"] = self._definitions
        try:
            return self.client.chat.completions.create(**request)
        except APITimeoutError as e:
            raise AssistantTimeoutError("The API took too long to respond.") from e
        except APIConnectionError as e:
            raise AssistantConnectionError("Unable to connect to the language model API.") from e
        except APIStatusError as e:
            status = getattr(e, "status_code", None)
            LOG.debug("LLM API returned %s: %s", status, e)
            if status in (401, 403):
                raise AssistantAuthError("Invalid or expired API key.") from e
            if status == 429:
                raise AssistantRateLimitError("Too many requests to the language model API.") from e
            raise AssistantError(f"API returned status {status}: {e}") from e

    def ask(self, query: str) -> str:
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": query},
        ]
        for round_no in range(1, MAX_TOOL_ROUNDS + 1):
            t0 = time.perf_counter()
            completion = self._complete(messages)
            LOG.info(
                "Completion round %d finished in %.2fs id=%s",
                round_no, time.perf_counter() - t0, getattr(completion, "id", None),
            )
            choices = getattr(completion, "choices", None) or []
            if not choices:
                raise AssistantError("The model returned no choices.")
            message = choices[0].message
            calls = getattr(message, "tool_calls", None) or []
            if not calls:
                return (message.content or "").strip()

            messages.append(_assistant_message(message))
            for call in calls:
                result = dispatch(self._handlers, call.function.name, call.function.arguments)
                LOG.debug("Tool %s(%s) -> %r", call.function.name, call.function.arguments, result)
                messages.append({"role": "tool", "tool_call_id": call.id, "content": result})
        raise AssistantError(f"No final answer after {MAX_TOOL_ROUNDS} tool rounds.")
