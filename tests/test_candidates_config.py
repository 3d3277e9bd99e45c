import pytest

from sideline.config import DEFAULT_MODEL_IDS, GenerationSettings, build_candidates, generation_timeout, get_candidates


def test_default_candidates_keep_priority_order(monkeypatch):
    monkeypatch.delenv("SIDELINE_MODEL_CANDIDATES", raising=False)
    candidates = get_candidates()
    assert tuple(c.model_id for c in candidates) == DEFAULT_MODEL_IDS
    assert all(c.settings.response_mime_type == "application/json" for c in candidates)


def test_candidates_env_override_drops_blanks_and_duplicates(monkeypatch):
    monkeypatch.setenv("SIDELINE_MODEL_CANDIDATES", "v-a, v-b,,v-a")
    candidates = get_candidates()
    assert [c.model_id for c in candidates] == ["v-a", "v-b"]


def test_settings_env_override_is_clamped(monkeypatch):
    monkeypatch.setenv("SIDELINE_TEMPERATURE", "0.9")
    monkeypatch.setenv("SIDELINE_TOP_K", "nope")
    (candidate,) = build_candidates(["v-a"])
    assert candidate.settings.temperature == pytest.approx(0.5)
    assert candidate.settings.top_k == 20


def test_settings_are_frozen():
    settings = GenerationSettings()
    with pytest.raises(AttributeError):
        settings.temperature = 1.0  # type: ignore[misc]


def test_generation_timeout_zero_disables(monkeypatch):
    monkeypatch.setenv("SIDELINE_GENERATION_TIMEOUT", "0")
    assert generation_timeout() is None
