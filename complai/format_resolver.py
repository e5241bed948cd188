"""
Format Resolver — Decide what to do with a parsed model reply.

Reconciles the format the client asked for with the format the model
declared in its header:

- An explicit client format always decides whether a document is rendered.
- The model's declared format only fills in for a client that sent AUTO.
- Without a usable header the reply degrades to plain text, except when
  the client explicitly demanded a PDF, which is rejected.
"""

from dataclasses import dataclass

from complai.header_parser import ParsedHeader
from complai.schemas import ErrorKind, OutputFormat

MISSING_BODY_REASON = "Cannot produce document without a structured body."


@dataclass(frozen=True)
class Proceed:
    """Use the cleaned body in the given format (JSON or PDF)."""
    format: OutputFormat
    body: str


@dataclass(frozen=True)
class Degrade:
    """Return the unprocessed reply as plain successful content."""
    body: str


@dataclass(frozen=True)
class Reject:
    """Fail the request."""
    reason: str
    error_kind: ErrorKind = ErrorKind.UPSTREAM


ResolutionOutcome = Proceed | Degrade | Reject


def resolve(
    requested: OutputFormat | None,
    parsed: ParsedHeader,
    header_was_present: bool,
) -> ResolutionOutcome:
    effective = requested or OutputFormat.AUTO
    declared = parsed.declared_format

    if effective is OutputFormat.AUTO and declared not in (None, OutputFormat.AUTO):
        effective = declared

    # A header naming an unknown format gives no more signal than no header
    if not header_was_present or declared in (None, OutputFormat.AUTO):
        if effective is OutputFormat.PDF:
            return Reject(reason=MISSING_BODY_REASON)
        return Degrade(body=parsed.raw or parsed.body)

    if effective is OutputFormat.PDF:
        return Proceed(format=OutputFormat.PDF, body=parsed.body)
    return Proceed(format=OutputFormat.JSON, body=parsed.body)
