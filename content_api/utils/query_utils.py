"""
General request utilities: query cleaning, body parsing, script tag check
and the uniform error response.

Every function here is pure apart from `error_response`, which only builds
a response object.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Union

from fastapi import status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

SCRIPT_MARKER = "<script"

# Characters removed from the text on each side of the first slash
_FIELD_PUNCTUATION = str.maketrans("", "", '{":<')
_PATTERN_PUNCTUATION = str.maketrans("", "", '/">')


class MalformedQueryError(ValueError):
    """Raised when a query or request body is not usable JSON"""

    def __init__(self, raw: str, reason: str):
        self.raw = raw
        self.reason = reason
        super().__init__(f"Invalid JSON object passed in query: {raw}. {reason}")


@dataclass(frozen=True)
class RegexCondition:
    """A filter value that matches by pattern instead of equality."""
    pattern: str
    case_insensitive: bool = True


def clean_query(raw: str) -> Any:
    """
    Convert a raw `q=` query string into a filter usable by the content provider.

    The string is expected to be a JSON object. One field may carry a regex
    written between slashes, e.g. {"@subject":"/abc/"} or {"@subject":/abc/};
    that field becomes a case-insensitive RegexCondition. Only the first
    slash is looked at, and the regex field has to be the first field of the
    object since everything left of the slash is reduced to the field name.

    Stripping removes every occurrence of the punctuation characters, so a
    field name or pattern containing them is mangled. The character right
    before the first slash is dropped as well. A single trailing "}" is
    taken to close the object and removed from the pattern.

    :param raw: Raw query string taken from the request
    :return: Decoded query, with the regex field replaced by a RegexCondition
    :raises MalformedQueryError: If the string is not JSON and holds no regex
    """
    decoded = None
    reason = None
    try:
        decoded = json.loads(raw)
    except ValueError as e:
        # A regex literal is not valid JSON, so this is only fatal without one
        reason = str(e)

    index = raw.find("/")
    if index == -1:
        if reason is not None:
            raise MalformedQueryError(raw, reason)
        return decoded

    left = raw[:max(index - 1, 0)]
    right = raw[index:]

    field = left.translate(_FIELD_PUNCTUATION).strip()
    pattern = right.translate(_PATTERN_PUNCTUATION).strip()
    # Only the closing brace of the object itself is dropped
    if pattern.endswith("}"):
        pattern = pattern[:-1].rstrip()

    cleaned = dict(decoded) if isinstance(decoded, dict) else {}
    cleaned[field] = RegexCondition(pattern=pattern)

    logger.debug(f"Query cleaned: '{raw}' -> {cleaned}")
    return cleaned


def try_parse_json(data: Union[bytes, str]) -> Any:
    """
    Decode a JSON request body.

    :param data: Raw body as read off the request
    :return: Decoded JSON value
    :raises MalformedQueryError: If the body is not valid JSON
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedQueryError(repr(data), str(e))

    try:
        return json.loads(data)
    except ValueError as e:
        raise MalformedQueryError(data, str(e))


def is_script_injection(payload: Any, allow_scripts: bool = False) -> bool:
    """
    Check a decoded payload for a script tag.

    This is a plain substring search over the serialized payload, nothing
    more. Callers pass allow_scripts when the request explicitly opted out.

    :param payload: Decoded JSON payload
    :param allow_scripts: Skip the check entirely
    :return: True if the write must be rejected
    """
    if allow_scripts:
        return False
    return SCRIPT_MARKER in json.dumps(payload).lower()


def error_response(message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> JSONResponse:
    """Build the `{"error": message}` response used by every failing route."""
    return JSONResponse(status_code=status_code, content={"error": message})
