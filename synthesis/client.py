"""
client.py -- The text-generation provider boundary.

The pipeline only needs ``await client.generate(prompt) -> str``. This module
defines that protocol, an Anthropic implementation, and an adapter for a
plain function supplied by the hosting application.

Client implementations report failures as ProviderError; ``transient`` marks
the ones worth retrying.
"""

from __future__ import annotations

import inspect
import logging
import os
from typing import Any, Awaitable, Callable, Optional, Protocol, Union, runtime_checkable

import anthropic
import httpx

from synthesis.config import GenerationSettings
from synthesis.errors import ProviderError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT: str = (
    "You are a careful clinical writing assistant for a mental health practice. "
    "You write warm, evidence-based material for clients and objective syntheses "
    "for therapists. You never diagnose, never give medication advice, and always "
    "encourage professional support for anyone at risk. Follow the requested "
    "FORMAT exactly: every section label at the start of its own line, list items "
    "starting with '- '."
)

GenerateFn = Callable[[str], Union[str, Awaitable[str]]]


@runtime_checkable
class GenerativeClient(Protocol):
    async def generate(self, prompt: str) -> str: ...


class FunctionClient:
    """Wrap a plain ``generate(prompt)`` function, sync or async."""

    def __init__(self, fn: GenerateFn) -> None:
        self._fn = fn

    async def generate(self, prompt: str) -> str:
        result = self._fn(prompt)
        if inspect.isawaitable(result):
            result = await result
        if not isinstance(result, str):
            raise ProviderError(
                f"Provider function returned {type(result).__name__}, expected str"
            )
        return result


def as_client(provider: Any) -> GenerativeClient:
    """Accept a GenerativeClient or a bare callable."""
    if isinstance(provider, GenerativeClient):
        return provider
    if callable(provider):
        return FunctionClient(provider)
    raise TypeError(f"Not a generative client: {type(provider).__name__}")


class AnthropicClient:
    """GenerativeClient backed by the Anthropic Messages API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        settings: Optional[GenerationSettings] = None,
        client: Optional[anthropic.AsyncAnthropic] = None,
    ) -> None:
        self.settings = settings or GenerationSettings()
        if client is None:
            key = api_key or os.environ.get("ANTHROPIC_API_KEY", "")
            if not key:
                raise ValueError(
                    "ANTHROPIC_API_KEY is required. Set it as an environment variable "
                    "or pass api_key to AnthropicClient()."
                )
            # Retries are owned by the pipeline.
            client = anthropic.AsyncAnthropic(
                api_key=key,
                max_retries=0,
                timeout=httpx.Timeout(self.settings.timeout_seconds, connect=10.0),
            )
        self._client = client

    async def generate(self, prompt: str) -> str:
        logger.info(
            "Calling Claude (model=%s, prompt_len=%d)", self.settings.model, len(prompt)
        )
        try:
            response = await self._client.messages.create(
                model=self.settings.model,
                max_tokens=self.settings.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.RateLimitError as exc:
            raise ProviderError(f"Rate limited: {exc}", transient=True) from exc
        except anthropic.APIConnectionError as exc:
            # Includes APITimeoutError.
            raise ProviderError(f"Connection error: {exc}", transient=True) from exc
        except anthropic.InternalServerError as exc:
            raise ProviderError(
                f"Provider error {exc.status_code}: {exc}", transient=True
            ) from exc
        except anthropic.APIStatusError as exc:
            raise ProviderError(
                f"Provider rejected request ({exc.status_code}): {exc}"
            ) from exc
        except anthropic.APIError as exc:
            raise ProviderError(f"Provider error: {exc}") from exc

        text_blocks = [block.text for block in response.content if block.type == "text"]
        if not text_blocks:
            raise ProviderError("Provider response contained no text content")
        return chr(10).join(text_blocks)

    async def aclose(self) -> None:
        await self._client.close()
