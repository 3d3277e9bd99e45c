"""Model invocation with ordered fallback across candidates."""

from .media import MediaNotReady, MediaProcessingFailed, wait_for_media_ready
from .orchestrator import (
    AllCandidatesExhausted,
    CandidateAttempt,
    CandidateUnavailable,
    EmptyResponse,
    FailureKind,
    FallbackPolicy,
    GenerationBackend,
    GenerationError,
    GenerationResult,
    MediaPart,
    Orchestrator,
    PromptPart,
    QuotaExceeded,
    TextPart,
    classify_failure,
    configured_policy,
)

__all__ = [
    "AllCandidatesExhausted",
    "CandidateAttempt",
    "CandidateUnavailable",
    "EmptyResponse",
    "FailureKind",
    "FallbackPolicy",
    "GenerationBackend",
    "GenerationError",
    "GenerationResult",
    "MediaNotReady",
    "MediaPart",
    "MediaProcessingFailed",
    "Orchestrator",
    "PromptPart",
    "QuotaExceeded",
    "TextPart",
    "classify_failure",
    "configured_policy",
    "wait_for_media_ready",
]
