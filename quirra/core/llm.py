"""Chat model construction and provider error mapping."""

import asyncio
from collections.abc import Sequence

import httpx
import openai
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_openai import ChatOpenAI

from quirra.core.exceptions import (
    AppException,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from quirra.core.settings import LLMConfig

JSON_RESPONSE_FORMAT = {"type": "json_object"}


def build_chat_model(config: LLMConfig, *, json_mode: bool = False) -> BaseChatModel:
    """Build a chat model for one call site.

    Retries are disabled: every call is a single best-effort request.
    """
    model_kwargs: dict = {}
    if json_mode:
        model_kwargs["response_format"] = JSON_RESPONSE_FORMAT
    return ChatOpenAI(
        model=config.model,
        api_key=config.api_key,
        base_url=config.base_url,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.timeout_seconds,
        max_retries=0,
        default_headers=config.default_headers or None,
        model_kwargs=model_kwargs,
    )


async def invoke_with_timeout(
    llm: BaseChatModel,
    messages: Sequence[BaseMessage],
    timeout_seconds: float,
) -> AIMessage:
    """Invoke the model once, bounded by ``timeout_seconds``."""
    response = await asyncio.wait_for(llm.ainvoke(list(messages)), timeout=timeout_seconds)
    return response  # type: ignore[return-value]


def response_text(response: BaseMessage) -> str:
    """Extract the stripped text content of a model response."""
    content = response.content
    if isinstance(content, list):
        parts = [
            part.get("text", "") if isinstance(part, dict) else str(part)
            for part in content
        ]
        content = "".join(parts)
    return str(content or "").strip()


def map_provider_error(exc: Exception, action: str) -> AppException | None:
    """Translate a provider/network exception into an HTTP-facing error.

    Returns None for exceptions that are not provider failures so the caller
    can re-raise them unchanged.
    """
    # APITimeoutError subclasses APIConnectionError, check it first.
    if isinstance(exc, (TimeoutError, openai.APITimeoutError, httpx.TimeoutException)):
        return ProviderTimeoutError(f"{action} request timed out.")
    if isinstance(exc, (openai.APIConnectionError, httpx.TransportError)):
        return ProviderUnavailableError(
            f"Network error connecting to the {action.lower()} service."
        )
    if isinstance(exc, openai.APIStatusError):
        return ProviderError(f"Provider error during {action.lower()}: {exc.message}")
    return None
