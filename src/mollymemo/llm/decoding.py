"""Two-stage decoding of AI output: strip fences, then validate the shape.

Generated text is untrusted. Anything that does not validate completely
raises ParseFailure; partially present fields are never used.
"""

import re
from typing import TypeVar

from pydantic import TypeAdapter, ValidationError

from mollymemo.errors import ParseFailure

T = TypeVar("T")

_OPEN_FENCE = re.compile(r"^\s*```[a-zA-Z]*\s*\n?")
_CLOSE_FENCE = re.compile(r"\n?\s*```\s*$")


def strip_fences(text: str) -> str:
    """Remove a leading ```lang and a trailing ``` marker, if present."""
    text = _OPEN_FENCE.sub("", text, count=1)
    text = _CLOSE_FENCE.sub("", text, count=1)
    return text.strip()


def decode_json(text: str, adapter: TypeAdapter[T]) -> T:
    """Parse fenced or bare JSON text into the adapter's type.

    Raises:
        ParseFailure: empty text, invalid JSON, or a shape mismatch.
    """
    body = strip_fences(text or "")
    if not body:
        raise ParseFailure("AI response was empty")
    try:
        return adapter.validate_json(body)
    except ValidationError as exc:
        raise ParseFailure(
            f"AI response did not match expected shape ({exc.error_count()} error(s))"
        ) from exc
