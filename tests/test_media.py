import pytest

from sideline.generation import MediaNotReady, MediaPart, MediaProcessingFailed, wait_for_media_ready


class StateSequence:
    def __init__(self, states: list[str]):
        self.states = list(states)
        self.polls = 0

    async def fetch(self) -> str:
        self.polls += 1
        if len(self.states) > 1:
            return self.states.pop(0)
        return self.states[0]


@pytest.mark.anyio
async def test_returns_once_active():
    seq = StateSequence(["PROCESSING", "PROCESSING", "ACTIVE"])

    state = await wait_for_media_ready("files/1", seq.fetch, lambda s: s, interval=0, max_attempts=5)

    assert state == "ACTIVE"
    assert seq.polls == 3


@pytest.mark.anyio
async def test_gives_up_after_attempt_ceiling():
    seq = StateSequence(["PROCESSING"])

    with pytest.raises(MediaNotReady) as info:
        await wait_for_media_ready("files/1", seq.fetch, lambda s: s, interval=0, max_attempts=4)

    assert seq.polls == 4
    assert info.value.state == "PROCESSING"


@pytest.mark.anyio
async def test_failed_state_raises():
    seq = StateSequence(["PROCESSING", "FAILED"])

    with pytest.raises(MediaProcessingFailed):
        await wait_for_media_ready("files/1", seq.fetch, lambda s: s, interval=0, max_attempts=4)


def test_media_part_requires_single_source():
    with pytest.raises(ValueError):
        MediaPart(mime_type="video/mp4")
    with pytest.raises(ValueError):
        MediaPart(mime_type="video/mp4", data=b"x", file_uri="https://example/file")
