"""
Core Types — Output Formats, Error Kinds, and the Orchestrator Response

Defines the value types shared by the header parser, the format resolver,
the orchestrator and the HTTP layer.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum


class OutputFormat(str, Enum):
    """Output format requested by a client or declared by the model."""

    JSON = "json"
    PDF = "pdf"
    AUTO = "auto"  # no preference: defer to the header or a safe default

    @classmethod
    def from_string(cls, value) -> "OutputFormat | None":
        """
        Map a format string to an OutputFormat, case-insensitively.

        Returns None for anything unrecognised (including the empty
        string), which is distinct from AUTO: callers must decide what an
        unknown value means for them instead of silently defaulting.
        """
        if value is None:
            return None
        normalized = str(value).strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return None

    @classmethod
    def is_client_supported(cls, fmt) -> bool:
        """True for the values a client may send. PDF is the only document type."""
        return fmt in (cls.JSON, cls.PDF, cls.AUTO)


CLIENT_FORMATS_HELP = (
    "Supported formats are 'json', 'pdf' and 'auto'; "
    "PDF is the only supported document format."
)


class ErrorKind(IntEnum):
    """
    Authoritative classification of a response.

    The integer values are part of the public wire format (``errorCode``).
    The human-readable ``error`` string may change; these codes do not.
    """

    NONE = 0
    VALIDATION = 1
    REFUSAL = 2
    UPSTREAM = 3
    TIMEOUT = 4
    INTERNAL = 5


@dataclass(frozen=True)
class ComplaintResponse:
    """
    Final result of an ask or redact request.

    On success exactly one of ``message`` / ``document`` is set. On failure
    ``document`` is never set, while ``message`` may carry upstream text
    the caller can display (for example the raw refusal).
    """

    success: bool
    message: str | None = None
    document: bytes | None = None
    error: str | None = None
    error_kind: ErrorKind = ErrorKind.NONE

    def __post_init__(self):
        if self.success:
            if (self.message is None) == (self.document is None):
                raise ValueError("Successful response needs exactly one of message or document")
            if self.error_kind is not ErrorKind.NONE:
                raise ValueError("Successful response cannot carry an error kind")
        else:
            if self.document is not None:
                raise ValueError("Failed response cannot carry a document")
            if self.error_kind is ErrorKind.NONE:
                raise ValueError("Failed response needs an error kind")

    @classmethod
    def ok(cls, message: str) -> "ComplaintResponse":
        return cls(success=True, message=message)

    @classmethod
    def with_document(cls, document: bytes) -> "ComplaintResponse":
        return cls(success=True, document=document)

    @classmethod
    def failure(cls, kind: ErrorKind, error: str, message: str | None = None) -> "ComplaintResponse":
        return cls(success=False, message=message, error=error, error_kind=kind)
