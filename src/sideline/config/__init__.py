"""Configuration helpers for model candidates and generation settings."""

from .candidates import (
    DEFAULT_MODEL_IDS,
    GenerationSettings,
    ModelCandidate,
    build_candidates,
    default_settings,
    generation_timeout,
    get_candidates,
    media_poll_attempts,
    media_poll_interval,
)

__all__ = [
    "DEFAULT_MODEL_IDS",
    "GenerationSettings",
    "ModelCandidate",
    "build_candidates",
    "default_settings",
    "generation_timeout",
    "get_candidates",
    "media_poll_attempts",
    "media_poll_interval",
]
