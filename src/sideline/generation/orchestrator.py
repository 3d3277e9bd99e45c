"""Sequential fallback across configured model candidates."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol, Sequence, Tuple, Union

from sideline.config import ModelCandidate


logger = logging.getLogger(__name__)

_POLICY_ENV = "SIDELINE_FALLBACK_POLICY"
_QUOTA_MARKERS = ("quota", "billing", "resource_exhausted", "rate limit")


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class MediaPart:
    """Clip reference: inline bytes or the URI of an already uploaded file."""

    mime_type: str
    data: Optional[bytes] = None
    file_uri: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.data is None) == (self.file_uri is None):
            raise ValueError("MediaPart needs exactly one of data or file_uri")


PromptPart = Union[TextPart, MediaPart]


class GenerationBackend(Protocol):
    async def generate(self, candidate: ModelCandidate, prompt_parts: Sequence[PromptPart]) -> str:
        ...


class FailureKind(str, Enum):
    UNAVAILABLE = "unavailable"
    QUOTA = "quota"
    TIMEOUT = "timeout"
    OTHER = "other"


class FallbackPolicy(str, Enum):
    PERMISSIVE = "permissive"
    FAIL_FAST_ON_QUOTA = "fail_fast_on_quota"


class GenerationError(Exception):
    """Failure raised by a backend for one candidate."""

    def __init__(self, candidate_id: str, message: str):
        super().__init__(message)
        self.candidate_id = candidate_id
        self.message = message


class CandidateUnavailable(GenerationError):
    pass


class QuotaExceeded(GenerationError):
    pass


class EmptyResponse(GenerationError):
    pass


@dataclass(frozen=True)
class CandidateAttempt:
    candidate_id: str
    kind: FailureKind
    reason: str


@dataclass(frozen=True)
class GenerationResult:
    text: str
    candidate_id: str
    failed_attempts: Tuple[CandidateAttempt, ...] = field(default_factory=tuple)


class AllCandidatesExhausted(Exception):
    def __init__(self, attempts: Sequence[CandidateAttempt], last_cause: BaseException | None, *, aborted: bool = False):
        self.attempts = list(attempts)
        self.last_cause = last_cause
        self.aborted = aborted
        if self.attempts:
            last = self.attempts[-1]
            prefix = "Stopped after quota failure" if aborted else f"All {len(self.attempts)} model candidates failed"
            message = f"{prefix}; last error from {last.candidate_id}: {last.reason}"
        else:
            message = "No model candidates configured"
        super().__init__(message)
        self.message = message


def classify_failure(exc: BaseException) -> FailureKind:
    if isinstance(exc, CandidateUnavailable):
        return FailureKind.UNAVAILABLE
    if isinstance(exc, QuotaExceeded):
        return FailureKind.QUOTA
    if isinstance(exc, asyncio.TimeoutError):
        return FailureKind.TIMEOUT
    code = getattr(exc, "code", None)
    if code == 404:
        return FailureKind.UNAVAILABLE
    if code in (402, 429):
        return FailureKind.QUOTA
    text = str(exc).lower()
    if any(marker in text for marker in _QUOTA_MARKERS):
        return FailureKind.QUOTA
    return FailureKind.OTHER


def _describe(exc: BaseException) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return "timed out"
    return str(exc) or exc.__class__.__name__


class Orchestrator:
    """Try each candidate once, in order, returning the first success.

    Stateless apart from its configuration, so one instance can serve every
    request.
    """

    def __init__(
        self,
        backend: GenerationBackend,
        *,
        policy: FallbackPolicy = FallbackPolicy.PERMISSIVE,
        timeout: float | None = None,
    ):
        self.backend = backend
        self.policy = policy
        self.timeout = timeout

    async def _call(self, candidate: ModelCandidate, prompt_parts: Sequence[PromptPart]) -> str:
        call = self.backend.generate(candidate, prompt_parts)
        if self.timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=self.timeout)

    async def generate(
        self,
        prompt_parts: Sequence[PromptPart],
        candidates: Sequence[ModelCandidate],
    ) -> GenerationResult:
        attempts: List[CandidateAttempt] = []
        last_cause: BaseException | None = None
        for candidate in candidates:
            try:
                text = await self._call(candidate, prompt_parts)
            except Exception as exc:
                kind = classify_failure(exc)
                attempts.append(CandidateAttempt(candidate.model_id, kind, _describe(exc)))
                last_cause = exc
                logger.warning("Candidate %s failed (%s): %s", candidate.model_id, kind.value, _describe(exc))
                if kind is FailureKind.QUOTA and self.policy is FallbackPolicy.FAIL_FAST_ON_QUOTA:
                    raise AllCandidatesExhausted(attempts, last_cause, aborted=True) from exc
                continue
            logger.info("Candidate %s succeeded after %d failed attempt(s)", candidate.model_id, len(attempts))
            return GenerationResult(text=text, candidate_id=candidate.model_id, failed_attempts=tuple(attempts))

        error = AllCandidatesExhausted(attempts, last_cause)
        if last_cause is not None:
            raise error from last_cause
        raise error


def configured_policy() -> FallbackPolicy:
    raw = os.getenv(_POLICY_ENV)
    if not raw:
        return FallbackPolicy.PERMISSIVE
    try:
        return FallbackPolicy(raw.strip().lower())
    except ValueError:
        logger.warning("Invalid fallback policy %s; using %s", raw, FallbackPolicy.PERMISSIVE.value)
        return FallbackPolicy.PERMISSIVE
