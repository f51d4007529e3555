"""Typed parsing of JSON objects embedded in free-text model replies.

Models wrap their JSON in prose or markdown fences often enough that a plain
``json.loads`` is not usable. ``parse_model_json`` locates the first balanced
object (aware of strings and escapes), decodes it with a light repair pass and
validates it against a pydantic schema. It never raises for bad model output:
the outcome is a ``ParseResult`` that callers branch on.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Generic, Iterator, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)

_TRAILING_COMMA = re.compile(r",\s*([}\]])")


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Either a validated value or the reason parsing failed."""
    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.value is not None

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "ParseResult[T]":
        return cls(error=error)

    def unwrap_or(self, default: T) -> T:
        return self.value if self.ok else default


def _strip_code_fence(text: str) -> str:
    """Return the body of a ```json fence when it holds an object."""
    for marker in ("```json", "```JSON", "```"):
        if marker in text:
            body = text.split(marker, 1)[1].split("```", 1)[0]
            if "{" in body:
                return body
    return text


def iter_balanced_objects(text: str) -> Iterator[str]:
    """Yield top-level ``{...}`` spans in order of appearance.

    Braces inside JSON strings do not count towards nesting. An unterminated
    object ends the scan.
    """
    i = 0
    length = len(text)
    while i < length:
        start = text.find("{", i)
        if start == -1:
            return
        depth = 0
        in_string = False
        escaped = False
        end = -1
        for pos in range(start, length):
            char = text[pos]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    end = pos
                    break
        if end == -1:
            return
        yield text[start:end + 1]
        i = end + 1


def _decode(candidate: str) -> dict[str, Any] | None:
    for attempt in (candidate, _TRAILING_COMMA.sub(r"\1", candidate)):
        try:
            data = json.loads(attempt)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None


def extract_first_object(text: str) -> dict[str, Any] | None:
    """Decode the first balanced JSON object in ``text``, or None."""
    for candidate in iter_balanced_objects(_strip_code_fence(text)):
        data = _decode(candidate)
        if data is not None:
            return data
    return None


def parse_model_json(text: str | None, schema: type[T]) -> ParseResult[T]:
    """Parse a model reply into ``schema``.

    Args:
        text: Raw reply content.
        schema: Pydantic model the object must satisfy.

    Returns:
        ParseResult holding the validated model or an error description.
    """
    if not text or not text.strip():
        return ParseResult.failure("empty response")

    data = extract_first_object(text)
    if data is None:
        return ParseResult.failure("no JSON object found in response")

    try:
        return ParseResult.success(schema.model_validate(data))
    except ValidationError as e:
        return ParseResult.failure(f"schema validation failed: {e.error_count()} error(s)")
