"""
Complaint Orchestrator — Ask and Redact flows

Sequences one request end to end:
Validate → call upstream (bounded wait) → classify refusal → parse header
→ resolve format → optionally render a PDF → ComplaintResponse.

Every path ends in a ComplaintResponse; nothing escapes to the transport
layer. There is one upstream call and at most one render per request.
"""

import asyncio
import logging
import os

from complai.conversation_store import ConversationStore, create_conversation_store
from complai.format_resolver import Degrade, Proceed, Reject, resolve
from complai.header_parser import parse_header
from complai.prompts import build_ask_prompt, build_messages, build_redact_prompt
from complai.provider import create_provider
from complai.refusal import RefusalClassifier, create_classifier
from complai.renderer import PdfRenderer, RenderError
from complai.schemas import ComplaintResponse, ErrorKind, OutputFormat

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

EMPTY_QUESTION = "Question must not be empty."
EMPTY_COMPLAINT = "Complaint must not be empty."
REFUSAL_ERROR = "Request is not about El Prat de Llobregat."
TIMEOUT_ERROR = "AI service timed out."
NO_MESSAGE_ERROR = "AI returned no message."
RENDER_ERROR = "Failed to generate PDF document."
INTERNAL_ERROR = "Internal error."


class ComplaintOrchestrator:
    """
    Runs the ask and redact flows against an upstream provider.

    Collaborators are injected: ``provider`` needs an async
    ``call(messages)``, ``renderer`` a ``render(text) -> bytes``.
    """

    def __init__(
        self,
        provider,
        renderer=None,
        store: ConversationStore | None = None,
        classifier: RefusalClassifier | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.provider = provider
        self.renderer = renderer or PdfRenderer()
        self.store = store if store is not None else ConversationStore()
        self.classifier = classifier if classifier is not None else RefusalClassifier()
        self.timeout = timeout

    async def ask(self, question: str | None, conversation_id: str | None = None) -> ComplaintResponse:
        """Answer a question about El Prat. Refusals fail with ErrorKind.REFUSAL."""
        if question is None or not question.strip():
            return ComplaintResponse.failure(ErrorKind.VALIDATION, EMPTY_QUESTION)

        try:
            prompt = build_ask_prompt(question)
            reply, failure = await self._call_upstream(prompt, conversation_id)
            if failure is not None:
                return failure

            self._remember(conversation_id, prompt, reply)
            logger.info("ask: answered (%d chars)", len(reply))
            return ComplaintResponse.ok(reply)
        except Exception:
            logger.exception("ask: unexpected error")
            return ComplaintResponse.failure(ErrorKind.INTERNAL, INTERNAL_ERROR)

    async def redact(
        self,
        complaint: str | None,
        requested_format: OutputFormat | None = None,
        conversation_id: str | None = None,
    ) -> ComplaintResponse:
        """
        Draft a complaint letter to the Ajuntament.

        Returns the letter as text or as PDF bytes depending on the
        requested format and the header the model put on its reply.
        """
        if complaint is None or not complaint.strip():
            return ComplaintResponse.failure(ErrorKind.VALIDATION, EMPTY_COMPLAINT)

        requested = requested_format or OutputFormat.AUTO
        try:
            prompt = build_redact_prompt(complaint, requested)
            reply, failure = await self._call_upstream(prompt, conversation_id)
            if failure is not None:
                return failure

            parsed = parse_header(reply)
            outcome = resolve(requested, parsed, parsed.present)
            logger.debug(
                "redact: requested=%s declared=%s header=%s outcome=%s",
                requested.value,
                parsed.declared_format.value if parsed.declared_format else None,
                parsed.present,
                type(outcome).__name__,
            )

            if isinstance(outcome, Reject):
                logger.warning("redact: rejected (%s)", outcome.reason)
                return ComplaintResponse.failure(outcome.error_kind, outcome.reason)

            if isinstance(outcome, Degrade):
                logger.info("redact: no usable header, returning raw reply")
                self._remember(conversation_id, prompt, reply)
                return ComplaintResponse.ok(outcome.body)

            if outcome.format is OutputFormat.PDF:
                return await self._render(outcome, conversation_id, prompt, reply)

            self._remember(conversation_id, prompt, reply)
            logger.info("redact: returning letter as text")
            return ComplaintResponse.ok(outcome.body)
        except Exception:
            logger.exception("redact: unexpected error")
            return ComplaintResponse.failure(ErrorKind.INTERNAL, INTERNAL_ERROR)

    async def _call_upstream(self, prompt: str, conversation_id: str | None):
        """
        Make the single upstream call and screen the reply.

        Returns ``(reply, None)`` on usable content or ``(None, failure)``.
        """
        messages = build_messages(prompt, self.store.get(conversation_id))
        try:
            result = await asyncio.wait_for(self.provider.call(messages), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Upstream call timed out after %.1fs", self.timeout)
            return None, ComplaintResponse.failure(ErrorKind.TIMEOUT, TIMEOUT_ERROR)

        if result is None:
            return None, ComplaintResponse.failure(ErrorKind.UPSTREAM, NO_MESSAGE_ERROR)
        if result.error and result.error.strip():
            logger.warning("Upstream error (status=%s): %s", result.status_code, result.error)
            return None, ComplaintResponse.failure(ErrorKind.UPSTREAM, result.error, message=result.text)
        if result.status_code is not None and not 200 <= result.status_code < 300:
            logger.warning("Upstream returned status %d without an error", result.status_code)
            return None, ComplaintResponse.failure(
                ErrorKind.UPSTREAM,
                f"Upstream non-2xx response: {result.status_code}",
                message=result.text,
            )
        if result.text is None or not result.text.strip():
            logger.warning("Upstream returned no message (status=%s)", result.status_code)
            return None, ComplaintResponse.failure(ErrorKind.UPSTREAM, NO_MESSAGE_ERROR)

        if self.classifier.is_refusal(result.text):
            logger.info("Upstream refused the request as out of scope")
            return None, ComplaintResponse.failure(ErrorKind.REFUSAL, REFUSAL_ERROR, message=result.text)

        return result.text, None

    async def _render(self, outcome: Proceed, conversation_id, prompt, reply) -> ComplaintResponse:
        try:
            document = await asyncio.to_thread(self.renderer.render, outcome.body)
        except RenderError:
            logger.exception("redact: PDF rendering failed")
            return ComplaintResponse.failure(ErrorKind.INTERNAL, RENDER_ERROR)

        self._remember(conversation_id, prompt, reply)
        logger.info("redact: returning PDF (%d bytes)", len(document))
        return ComplaintResponse.with_document(document)

    def _remember(self, conversation_id, prompt: str, reply: str):
        self.store.append(
            conversation_id,
            {"role": "user", "content": prompt},
            {"role": "assistant", "content": reply},
        )


def create_orchestrator() -> ComplaintOrchestrator:
    """Wire the orchestrator from environment configuration."""
    timeout = float(os.environ.get("UPSTREAM_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)))
    return ComplaintOrchestrator(
        provider=create_provider(),
        renderer=PdfRenderer(),
        store=create_conversation_store(),
        classifier=create_classifier(),
        timeout=timeout,
    )
