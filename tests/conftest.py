"""Shared test fixtures for the Complai test suite."""

import asyncio

import pytest

from complai.conversation_store import ConversationStore
from complai.orchestrator import ComplaintOrchestrator
from complai.provider import UpstreamResult
from complai.renderer import PdfRenderer


LETTER = "Dear Ajuntament,\n\nI am writing to complain about noise...\n\nSincerely,\nResident"
REFUSAL = ("I'm sorry, I can't help with that request because it's not "
           "about El Prat de Llobregat.")


def last_user_message(messages: list[dict]) -> str | None:
    for message in reversed(messages or []):
        if message.get("role") == "user":
            return message.get("content")
    return None


class ScenarioProvider:
    """
    Deterministic upstream fake.

    Picks a canned reply from a marker in the last user message, e.g.
    "[REFUSE]" or "[HEADER]". Records every conversation it receives.
    """

    provider_name = "ScenarioProvider"
    chat_model = "mock-chat"

    def __init__(self):
        self.calls = []

    async def call(self, messages: list[dict]) -> UpstreamResult:
        self.calls.append(messages)
        prompt = last_user_message(messages) or ""

        if "[REFUSE]" in prompt:
            return UpstreamResult(text=REFUSAL, status_code=200)
        if "[UPSTREAM]" in prompt:
            return UpstreamResult(text='{"error": "boom"}', status_code=500, error="Upstream error")
        if "[STATUS503]" in prompt:
            return UpstreamResult(text="<html>503 Service Unavailable</html>", status_code=503)
        if "[EMPTY]" in prompt:
            return UpstreamResult(text="   ", status_code=200)
        if "[SLOW]" in prompt:
            await asyncio.sleep(5)
            return UpstreamResult(text="too late", status_code=200)
        if "[CRASH]" in prompt:
            raise RuntimeError("socket exploded")
        if "[HEADER_LONG]" in prompt:
            body = "This is a long complaint sentence to generate many pages. " * 800
            return UpstreamResult(
                text='{"format": "pdf"}\n\nDear Ajuntament,\n\n' + body + "\n\nSincerely,\nResident",
                status_code=200,
            )
        if "[HEADER_INVALID]" in prompt:
            return UpstreamResult(
                text='{"format": "xml"}\n\nThis body should not be rendered.',
                status_code=200,
            )
        if "[HEADER_JSON]" in prompt:
            return UpstreamResult(text='{"format": "json"}\n\n' + LETTER, status_code=200)
        if "[HEADER]" in prompt:
            return UpstreamResult(text='{"format": "pdf"}\n\n' + LETTER, status_code=200)
        if "[NOHEADER]" in prompt:
            return UpstreamResult(text=LETTER, status_code=200)
        if "recycling center" in prompt:
            return UpstreamResult(text="Hello from El Prat AI", status_code=200)
        return UpstreamResult(text=LETTER, status_code=200)


class FailingRenderer:
    media_type = "application/pdf"

    def render(self, text: str) -> bytes:
        from complai.renderer import RenderError
        raise RenderError("font missing")


@pytest.fixture
def scenario_provider():
    return ScenarioProvider()


@pytest.fixture
def conversation_store():
    return ConversationStore(max_entries=10, ttl_seconds=60, max_messages=6)


@pytest.fixture
def orchestrator(scenario_provider, conversation_store):
    return ComplaintOrchestrator(
        provider=scenario_provider,
        renderer=PdfRenderer(),
        store=conversation_store,
        timeout=0.5,
    )


@pytest.fixture
def letter():
    return LETTER


@pytest.fixture
def refusal_text():
    return REFUSAL


@pytest.fixture
def failing_renderer():
    return FailingRenderer()
