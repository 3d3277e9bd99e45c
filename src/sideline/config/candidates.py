"""Model candidate configuration for the generation orchestrator."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, Sequence, Tuple


logger = logging.getLogger(__name__)

_CANDIDATES_ENV = "SIDELINE_MODEL_CANDIDATES"
_TEMPERATURE_ENV = "SIDELINE_TEMPERATURE"
_TOP_P_ENV = "SIDELINE_TOP_P"
_TOP_K_ENV = "SIDELINE_TOP_K"
_TIMEOUT_ENV = "SIDELINE_GENERATION_TIMEOUT"
_POLL_INTERVAL_ENV = "SIDELINE_MEDIA_POLL_INTERVAL"
_POLL_ATTEMPTS_ENV = "SIDELINE_MEDIA_POLL_ATTEMPTS"

_TEMPERATURE_DEFAULT = 0.1
_TOP_P_DEFAULT = 0.8
_TOP_K_DEFAULT = 20
_TIMEOUT_DEFAULT = 120.0
_POLL_INTERVAL_DEFAULT = 2.0
_POLL_ATTEMPTS_DEFAULT = 60

# Most capable first, most available last.
DEFAULT_MODEL_IDS: Tuple[str, ...] = (
    "gemini-2.5-pro",
    "gemini-2.5-flash",
    "gemini-2.0-flash",
)


def _env_float(name: str, default: float, *, clamp_min: float | None = None, clamp_max: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    if clamp_max is not None:
        value = min(clamp_max, value)
    return value


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


@dataclass(frozen=True)
class GenerationSettings:
    temperature: float = _TEMPERATURE_DEFAULT
    top_p: float = _TOP_P_DEFAULT
    top_k: int = _TOP_K_DEFAULT
    response_mime_type: str = "application/json"


@dataclass(frozen=True)
class ModelCandidate:
    model_id: str
    settings: GenerationSettings = field(default_factory=GenerationSettings)

    def __str__(self) -> str:
        return self.model_id


def default_settings() -> GenerationSettings:
    """Generation settings with environment overrides applied."""

    return GenerationSettings(
        temperature=_env_float(_TEMPERATURE_ENV, _TEMPERATURE_DEFAULT, clamp_min=0.0, clamp_max=0.5),
        top_p=_env_float(_TOP_P_ENV, _TOP_P_DEFAULT, clamp_min=0.0, clamp_max=1.0),
        top_k=_env_int(_TOP_K_ENV, _TOP_K_DEFAULT, min_value=1),
    )


def build_candidates(
    model_ids: Iterable[str],
    *,
    settings: GenerationSettings | None = None,
) -> Tuple[ModelCandidate, ...]:
    """Build an ordered candidate tuple, dropping blanks and duplicates."""

    settings = settings or default_settings()
    seen: set[str] = set()
    candidates: list[ModelCandidate] = []
    for model_id in model_ids:
        model_id = model_id.strip()
        if not model_id or model_id in seen:
            continue
        seen.add(model_id)
        candidates.append(ModelCandidate(model_id=model_id, settings=settings))
    return tuple(candidates)


def get_candidates() -> Tuple[ModelCandidate, ...]:
    """Resolve the configured candidate list, falling back to the defaults."""

    raw = os.getenv(_CANDIDATES_ENV)
    model_ids: Sequence[str] = DEFAULT_MODEL_IDS
    if raw is not None:
        parsed = [part for part in raw.split(",") if part.strip()]
        if parsed:
            model_ids = parsed
        else:
            logger.warning("%s is empty; using default candidates", _CANDIDATES_ENV)
    return build_candidates(model_ids)


def generation_timeout() -> float | None:
    """Per-candidate timeout in seconds; ``0`` disables it."""

    value = _env_float(_TIMEOUT_ENV, _TIMEOUT_DEFAULT, clamp_min=0.0)
    return value or None


def media_poll_interval() -> float:
    return _env_float(_POLL_INTERVAL_ENV, _POLL_INTERVAL_DEFAULT, clamp_min=0.0)


def media_poll_attempts() -> int:
    return _env_int(_POLL_ATTEMPTS_ENV, _POLL_ATTEMPTS_DEFAULT, min_value=1)
