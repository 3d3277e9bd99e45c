from types import SimpleNamespace

import pytest
from google.genai import errors

from sideline.config import GenerationSettings, ModelCandidate
from sideline.generation import CandidateUnavailable, EmptyResponse, MediaPart, QuotaExceeded, TextPart
from sideline.generation.gemini import GeminiBackend


class FakeModels:
    def __init__(self, outcome):
        self.outcome = outcome
        self.requests: list[dict] = []

    async def generate_content(self, *, model, contents, config):
        self.requests.append({"model": model, "contents": contents, "config": config})
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return SimpleNamespace(text=self.outcome)


class FakeFiles:
    def __init__(self, states: list[str]):
        self.states = list(states)

    async def upload(self, *, file, config):
        return SimpleNamespace(name="files/abc", uri=None, mime_type=config.mime_type, state=SimpleNamespace(name="PROCESSING"))

    async def get(self, *, name):
        state = self.states.pop(0) if len(self.states) > 1 else self.states[0]
        return SimpleNamespace(name=name, uri="https://files/abc", mime_type="video/mp4", state=SimpleNamespace(name=state))


def _backend(outcome=None, states=None) -> tuple[GeminiBackend, FakeModels]:
    models = FakeModels(outcome)
    client = SimpleNamespace(aio=SimpleNamespace(models=models, files=FakeFiles(states or ["ACTIVE"])))
    return GeminiBackend(client=client), models


CANDIDATE = ModelCandidate("gemini-test", GenerationSettings(temperature=0.0, top_p=0.5, top_k=8))


@pytest.mark.anyio
async def test_generate_passes_pinned_settings():
    backend, models = _backend('{"title": "x"}')

    text = await backend.generate(CANDIDATE, [MediaPart(mime_type="video/mp4", data=b"\x00\x01"), TextPart("go")])

    assert text == '{"title": "x"}'
    request = models.requests[0]
    assert request["model"] == "gemini-test"
    assert request["config"].temperature == 0.0
    assert request["config"].top_k == 8
    assert request["config"].response_mime_type == "application/json"
    assert len(request["contents"]) == 2


@pytest.mark.anyio
async def test_not_found_maps_to_candidate_unavailable():
    error = errors.ClientError(404, {"error": {"code": 404, "message": "models/gemini-test is not found", "status": "NOT_FOUND"}})
    backend, _ = _backend(error)

    with pytest.raises(CandidateUnavailable) as info:
        await backend.generate(CANDIDATE, [TextPart("go")])

    assert info.value.__cause__ is error


@pytest.mark.anyio
async def test_resource_exhausted_maps_to_quota():
    error = errors.ClientError(429, {"error": {"code": 429, "message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}})
    backend, _ = _backend(error)

    with pytest.raises(QuotaExceeded):
        await backend.generate(CANDIDATE, [TextPart("go")])


@pytest.mark.anyio
async def test_empty_text_is_a_failure():
    backend, _ = _backend("   ")

    with pytest.raises(EmptyResponse):
        await backend.generate(CANDIDATE, [TextPart("go")])


@pytest.mark.anyio
async def test_upload_media_waits_for_active(tmp_path):
    clip = tmp_path / "clip.mp4"
    clip.write_bytes(b"\x00" * 16)
    backend, _ = _backend(states=["PROCESSING", "ACTIVE"])

    part = await backend.upload_media(clip, "video/mp4", interval=0, max_attempts=3)

    assert part.file_uri == "https://files/abc"
    assert part.data is None


def test_missing_api_key_raises(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(RuntimeError):
        GeminiBackend()
