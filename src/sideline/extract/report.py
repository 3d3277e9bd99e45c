"""Recover a structured report from free-form model output."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Iterator, Tuple

from pydantic import ValidationError

from sideline.models import AnalysisReport


logger = logging.getLogger(__name__)

_FENCE_PATTERN = re.compile(r"^\s*```[A-Za-z0-9_-]*[ \t]*\n?|\n?[ \t]*```\s*$")


@dataclass(frozen=True)
class ExtractionError:
    """Explicit extraction failure kept as a value so callers can inspect it."""

    reason: str
    raw_text: str

    def __str__(self) -> str:
        return self.reason


def _strip_fences(text: str) -> str:
    return _FENCE_PATTERN.sub("", text.strip()).strip()


def _balanced_spans(text: str) -> Iterator[Tuple[int, int]]:
    """Yield ``(start, end)`` for each top-level brace-balanced span.

    Braces inside JSON string literals are ignored; string state is only
    tracked while inside a span so quotes in surrounding prose are harmless.
    An opening brace that never closes is skipped and the scan resumes just
    after it, so a stray ``{`` in prose cannot hide a later payload.
    """

    position = 0
    while position < len(text):
        depth = 0
        start = -1
        in_string = False
        escaped = False
        index = position
        while index < len(text):
            char = text[index]
            index += 1
            if depth and in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == "{":
                if depth == 0:
                    start = index - 1
                depth += 1
            elif char == "}" and depth:
                depth -= 1
                if depth == 0:
                    yield start, index
            elif char == '"' and depth:
                in_string = True
        if not depth:
            return
        position = start + 1


def extract_report(raw_text: str) -> AnalysisReport | ExtractionError:
    """Parse model output into an :class:`AnalysisReport`.

    Never raises: anything that cannot be turned into a report comes back as
    an :class:`ExtractionError` carrying the raw text.
    """

    if not isinstance(raw_text, str) or not raw_text.strip():
        return ExtractionError(reason="empty model output", raw_text=raw_text or "")

    text = _strip_fences(raw_text)
    first_failure: str | None = None
    for start, end in _balanced_spans(text):
        fragment = text[start:end]
        try:
            payload = json.loads(fragment)
        except json.JSONDecodeError as exc:
            first_failure = first_failure or f"invalid JSON payload: {exc}"
            continue
        if not isinstance(payload, dict):
            continue
        try:
            return AnalysisReport.model_validate(payload)
        except ValidationError as exc:
            missing = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
            first_failure = first_failure or f"report is missing or has invalid fields: {', '.join(missing)}"

    reason = first_failure or "no complete JSON object found in model output"
    logger.warning("Could not extract report: %s", reason)
    return ExtractionError(reason=reason, raw_text=raw_text)
