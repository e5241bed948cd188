"""
Header Parser — Extract the metadata header from a model reply.

The redact prompt asks the model to open its reply with a one-line JSON
object such as ``{"format": "pdf"}`` followed by the letter body. Models
drop the header, break it, or put braces in the body, so extraction is
lenient: anything that is not a clean leading JSON object is reported as
"no header" and the original text is handed back untouched.
"""

import json
from dataclasses import dataclass

from complai.schemas import OutputFormat


@dataclass(frozen=True)
class ParsedHeader:
    """
    Result of header extraction.

    ``present`` is True only when a leading JSON object was found and
    decoded. ``declared_format`` is None when there was no header or when
    the header named a format we do not recognise; it is AUTO when the
    header had no ``format`` field. ``raw`` is the reply as received.
    """

    declared_format: OutputFormat | None
    body: str
    present: bool = False
    raw: str = ""


def find_header_end(text: str) -> int:
    """
    Return the index of the brace closing the JSON object that opens ``text``.

    Tracks nesting depth and skips braces inside JSON string literals.
    Returns -1 if the object never closes.
    """
    start = text.find("{")
    if start == -1:
        return -1

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _extract_body(header: dict, rest: str) -> str:
    # An explicit body wins; otherwise the letter is whatever follows the header
    candidate = header.get("body")
    if candidate is None:
        candidate = header.get("message")
    if candidate is not None:
        candidate = candidate if isinstance(candidate, str) else json.dumps(candidate)
        if candidate.strip():
            return candidate.strip()
    return rest.strip()


def parse_header(text: str | None) -> ParsedHeader:
    """
    Split a model reply into its declared format and body.

    Never raises: a missing, unterminated or malformed header all come
    back as ``present=False`` with ``body`` equal to the original text.
    """
    if text is None:
        return ParsedHeader(declared_format=None, body="")

    missing = ParsedHeader(declared_format=None, body=text, raw=text)

    if not text.strip().startswith("{"):
        return missing

    end = find_header_end(text)
    if end < 0:
        return missing

    try:
        header = json.loads(text[:end + 1])
    except (json.JSONDecodeError, TypeError):
        return missing
    if not isinstance(header, dict):
        return missing

    raw_format = header.get("format")
    if raw_format is None:
        declared = OutputFormat.AUTO
    else:
        declared = OutputFormat.from_string(raw_format)

    return ParsedHeader(
        declared_format=declared,
        body=_extract_body(header, text[end + 1:]),
        present=True,
        raw=text,
    )
