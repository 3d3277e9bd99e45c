"""Gemini backend built on the google-genai SDK."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Sequence

from google import genai
from google.genai import errors, types

from sideline.config import ModelCandidate, media_poll_attempts, media_poll_interval

from .media import wait_for_media_ready
from .orchestrator import (
    CandidateUnavailable,
    EmptyResponse,
    GenerationError,
    MediaPart,
    PromptPart,
    QuotaExceeded,
    TextPart,
)


logger = logging.getLogger(__name__)

_API_KEY_ENV = "GEMINI_API_KEY"
_UNAVAILABLE_STATUSES = {"NOT_FOUND"}
_QUOTA_STATUSES = {"RESOURCE_EXHAUSTED"}


def _translate_api_error(candidate: ModelCandidate, exc: errors.APIError) -> GenerationError:
    message = getattr(exc, "message", None) or str(exc)
    status = (getattr(exc, "status", None) or "").upper()
    code = getattr(exc, "code", None)
    if code == 404 or status in _UNAVAILABLE_STATUSES:
        return CandidateUnavailable(candidate.model_id, f"model {candidate.model_id} unavailable: {message}")
    lowered = message.lower()
    if code in (402, 429) or status in _QUOTA_STATUSES or "quota" in lowered or "billing" in lowered:
        return QuotaExceeded(candidate.model_id, f"quota exceeded for {candidate.model_id}: {message}")
    return GenerationError(candidate.model_id, f"{candidate.model_id} error {code}: {message}")


def _to_part(part: PromptPart) -> types.Part:
    if isinstance(part, TextPart):
        return types.Part.from_text(text=part.text)
    if isinstance(part, MediaPart):
        if part.file_uri is not None:
            return types.Part.from_uri(file_uri=part.file_uri, mime_type=part.mime_type)
        return types.Part.from_bytes(data=part.data, mime_type=part.mime_type)
    raise TypeError(f"Unsupported prompt part: {part!r}")


def _config_for(candidate: ModelCandidate) -> types.GenerateContentConfig:
    settings = candidate.settings
    return types.GenerateContentConfig(
        temperature=settings.temperature,
        top_p=settings.top_p,
        top_k=settings.top_k,
        response_mime_type=settings.response_mime_type,
    )


def _file_state(file: Any) -> str | None:
    state = getattr(file, "state", None)
    if state is None:
        return None
    return getattr(state, "name", None) or str(state)


class GeminiBackend:
    """Generation backend calling ``generate_content`` on the async client."""

    def __init__(self, client: Any | None = None, *, api_key: str | None = None):
        if client is None:
            api_key = api_key or os.getenv(_API_KEY_ENV)
            if not api_key:
                raise RuntimeError(f"{_API_KEY_ENV} is not configured")
            client = genai.Client(api_key=api_key)
        self.client = client

    async def generate(self, candidate: ModelCandidate, prompt_parts: Sequence[PromptPart]) -> str:
        try:
            response = await self.client.aio.models.generate_content(
                model=candidate.model_id,
                contents=[_to_part(part) for part in prompt_parts],
                config=_config_for(candidate),
            )
        except errors.APIError as exc:
            raise _translate_api_error(candidate, exc) from exc
        text = getattr(response, "text", None)
        if not text or not text.strip():
            raise EmptyResponse(candidate.model_id, f"{candidate.model_id} returned an empty response")
        return text

    async def upload_media(
        self,
        path: Path,
        mime_type: str,
        *,
        interval: float | None = None,
        max_attempts: int | None = None,
    ) -> MediaPart:
        """Upload a clip and wait until the service has processed it."""

        uploaded = await self.client.aio.files.upload(
            file=str(path),
            config=types.UploadFileConfig(mime_type=mime_type),
        )
        logger.info("Uploaded %s as %s", path, uploaded.name)

        async def fetch() -> Any:
            return await self.client.aio.files.get(name=uploaded.name)

        ready = await wait_for_media_ready(
            uploaded.name,
            fetch,
            _file_state,
            interval=media_poll_interval() if interval is None else interval,
            max_attempts=max_attempts or media_poll_attempts(),
        )
        return MediaPart(mime_type=ready.mime_type or mime_type, file_uri=ready.uri)
