"""
Upstream Providers — Chat Completion Backends

OpenRouter (default), OpenAI and AWS Bedrock as interchangeable upstream
callers. Each exposes ``provider_name`` and an async ``call(messages)``
that never raises for upstream trouble: failures come back inside an
UpstreamResult so the orchestrator can classify them.

Selection via LLM_PROVIDER env var (default: "openrouter").
"""

import asyncio
import logging
import os
from dataclasses import dataclass

from botocore.exceptions import BotoCoreError, ClientError
from openai import (
    APIConnectionError,
    APIError,
    APIStatusError,
    AsyncOpenAI,
    InternalServerError,
    RateLimitError,
)

from complai.retry import retry_with_backoff

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (APIConnectionError, RateLimitError, InternalServerError)


@dataclass(frozen=True)
class UpstreamResult:
    """What came back from the model: reply text, HTTP status, or an error string."""
    text: str | None = None
    status_code: int | None = None
    error: str | None = None


def _strip_bearer(api_key: str) -> str:
    # The SDK adds the scheme itself
    if api_key.lower().startswith("bearer "):
        return api_key[len("bearer "):].strip()
    return api_key.strip()


def _first_choice_text(response) -> str | None:
    choices = getattr(response, "choices", None)
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    return getattr(message, "content", None)


class ChatCompletionsProvider:
    """Shared call path for OpenAI-compatible chat completion endpoints."""

    provider_name = "OpenAI-compatible"
    chat_model = None

    def __init__(self, client: AsyncOpenAI, chat_model: str,
                 temperature: float = 0.2, max_tokens: int = 1500):
        self.client = client
        self.chat_model = chat_model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @retry_with_backoff(max_retries=2, base_delay=1.0, retryable_exceptions=TRANSIENT_ERRORS)
    async def _complete(self, messages: list[dict]):
        return await self.client.chat.completions.create(
            model=self.chat_model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

    async def call(self, messages: list[dict]) -> UpstreamResult:
        logger.debug("Chat request to %s model=%s (%d messages)",
                     self.provider_name, self.chat_model, len(messages))
        try:
            response = await self._complete(messages)
        except APIStatusError as e:
            logger.warning("%s returned status %d", self.provider_name, e.status_code)
            return UpstreamResult(
                text=e.response.text if e.response is not None else None,
                status_code=e.status_code,
                error=f"{self.provider_name} non-2xx response: {e.status_code}",
            )
        except APIError as e:
            logger.warning("%s request failed: %s", self.provider_name, e)
            return UpstreamResult(error=str(e))
        return UpstreamResult(text=_first_choice_text(response), status_code=200)


class OpenRouterProvider(ChatCompletionsProvider):
    """OpenRouter through its OpenAI-compatible API."""

    provider_name = "OpenRouter"

    def __init__(self):
        api_key = os.environ.get("OPENROUTER_API_KEY", "")
        if not api_key.strip():
            raise ValueError("OpenRouter requires the OPENROUTER_API_KEY env var")

        base_url = os.environ.get("OPENROUTER_URL", "https://openrouter.ai/api/v1")
        client = AsyncOpenAI(
            api_key=_strip_bearer(api_key),
            base_url=base_url,
            max_retries=0,
            default_headers={
                "HTTP-Referer": "https://complai.cat",
                "X-Title": "Complai",
            },
        )
        super().__init__(client, os.environ.get("OPENROUTER_MODEL", "minimax/minimax-m2.5"))
        logger.info("Initialized OpenRouter provider (url=%s, model=%s)", base_url, self.chat_model)


class OpenAIProvider(ChatCompletionsProvider):
    """Direct OpenAI API provider."""

    provider_name = "OpenAI"

    def __init__(self):
        api_key = os.environ.get("OPENAI_API_KEY", "")
        if not api_key.strip():
            raise ValueError("OpenAI requires the OPENAI_API_KEY env var")

        client = AsyncOpenAI(api_key=_strip_bearer(api_key), max_retries=0)
        super().__init__(client, os.environ.get("OPENAI_CHAT_MODEL", "gpt-4o-mini"))
        logger.info("Initialized OpenAI provider (model=%s)", self.chat_model)


class BedrockProvider:
    """AWS Bedrock provider using the Converse API."""

    provider_name = "AWS Bedrock"

    def __init__(self, temperature: float = 0.2, max_tokens: int = 1500):
        import boto3

        region = os.environ.get("AWS_REGION", "us-east-1")
        self.bedrock = boto3.client("bedrock-runtime", region_name=region)
        self.chat_model = os.environ.get(
            "BEDROCK_CHAT_MODEL", "anthropic.claude-3-haiku-20240307-v1:0"
        )
        self.temperature = temperature
        self.max_tokens = max_tokens
        logger.info("Initialized Bedrock provider (region=%s)", region)

    def build_converse_request(self, messages: list[dict]) -> dict:
        system_parts = []
        converse_messages = []

        for msg in messages:
            if msg["role"] == "system":
                system_parts.append({"text": msg["content"]})
            else:
                converse_messages.append({
                    "role": msg["role"],
                    "content": [{"text": msg["content"]}],
                })

        kwargs = {
            "modelId": self.chat_model,
            "messages": converse_messages,
            "inferenceConfig": {
                "temperature": self.temperature,
                "maxTokens": self.max_tokens,
            },
        }
        if system_parts:
            kwargs["system"] = system_parts
        return kwargs

    @retry_with_backoff(max_retries=2, base_delay=1.0, retryable_exceptions=(BotoCoreError,))
    def _converse(self, messages: list[dict]) -> dict:
        return self.bedrock.converse(**self.build_converse_request(messages))

    async def call(self, messages: list[dict]) -> UpstreamResult:
        logger.debug("Chat request to Bedrock model=%s", self.chat_model)
        try:
            response = await asyncio.to_thread(self._converse, messages)
        except ClientError as e:
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            message = e.response.get("Error", {}).get("Message")
            logger.warning("Bedrock returned status %s", status)
            return UpstreamResult(
                text=message,
                status_code=status,
                error=f"{self.provider_name} non-2xx response: {status}",
            )
        except BotoCoreError as e:
            logger.warning("Bedrock request failed: %s", e)
            return UpstreamResult(error=str(e))

        content = response.get("output", {}).get("message", {}).get("content") or []
        text = content[0].get("text") if content else None
        status = response.get("ResponseMetadata", {}).get("HTTPStatusCode", 200)
        return UpstreamResult(text=text, status_code=status)


_PROVIDERS = {
    "openrouter": OpenRouterProvider,
    "openai": OpenAIProvider,
    "bedrock": BedrockProvider,
}


def create_provider():
    """
    Create an upstream provider based on the LLM_PROVIDER env var.
    Defaults to "openrouter" if not set.
    """
    name = os.environ.get("LLM_PROVIDER", "openrouter").lower()
    if name not in _PROVIDERS:
        available = ", ".join(_PROVIDERS)
        raise ValueError(
            f"Unknown LLM_PROVIDER '{name}'. Choose from: {available}"
        )
    return _PROVIDERS[name]()
