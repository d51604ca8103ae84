from __future__ import annotations  # Tolerant parsing of structured generation output

import json
from dataclasses import dataclass
from typing import Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)


class MalformedGenerationOutput(ValueError):  # Reply text did not match the expected structure
    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


@dataclass(frozen=True)
class ParseResult(Generic[T]):  # Either a parsed value or the parse error
    value: Optional[T] = None
    error: Optional[MalformedGenerationOutput] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.value is not None

    def unwrap_or(self, fallback: T) -> T:  # Parsed value, or the caller-supplied fallback
        if self.ok:
            return self.value  # type: ignore[return-value]
        return fallback


def parse(raw: str, schema: Type[T]) -> ParseResult[T]:  # Parse reply text into ``schema`` without raising
    text = strip_code_fences(raw or "")
    candidates = [text]
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start and (start, end) != (0, len(text) - 1):
        candidates.append(text[start : end + 1])
    last_error: Exception | None = None
    for candidate in candidates:
        try:
            return ParseResult(value=schema.model_validate_json(candidate))
        except (json.JSONDecodeError, ValidationError) as exc:
            last_error = exc
    reason = str(last_error).splitlines()[0] if last_error else "empty reply"
    return ParseResult(error=MalformedGenerationOutput(f"{schema.__name__}: {reason}", raw or ""))


def strip_code_fences(content: str) -> str:  # Remove common markdown fences from LLM output
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()
        if lines:
            lines = lines[1:]
            while lines and lines[0].strip() == "":
                lines = lines[1:]
            while lines and lines[-1].strip() == "":
                lines = lines[:-1]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            text = "\n".join(lines).strip()
    return text


__all__ = ["MalformedGenerationOutput", "ParseResult", "parse", "strip_code_fences"]
