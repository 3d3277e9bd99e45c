"""Pydantic models for API I/O."""

from .analysis import ClipAnalysisResponse, ClipSummaryResponse, FailedAttemptResponse
from .session import SessionSummaryResponse

__all__ = [
    "ClipAnalysisResponse",
    "ClipSummaryResponse",
    "FailedAttemptResponse",
    "SessionSummaryResponse",
]
