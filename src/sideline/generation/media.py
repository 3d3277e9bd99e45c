"""Polling helpers for remote media that needs processing before use."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")

READY_STATE = "ACTIVE"
FAILED_STATE = "FAILED"


class MediaNotReady(Exception):
    def __init__(self, name: str, attempts: int, state: str | None):
        super().__init__(f"media {name} not ready after {attempts} poll(s) (last state: {state})")
        self.name = name
        self.attempts = attempts
        self.state = state


class MediaProcessingFailed(Exception):
    def __init__(self, name: str):
        super().__init__(f"remote processing failed for media {name}")
        self.name = name


async def wait_for_media_ready(
    name: str,
    fetch: Callable[[], Awaitable[T]],
    state_of: Callable[[T], str | None],
    *,
    interval: float,
    max_attempts: int,
) -> T:
    """Poll ``fetch`` until the media reports ``ACTIVE``.

    Sleeps ``interval`` seconds between polls and gives up after
    ``max_attempts`` polls.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    state: str | None = None
    for attempt in range(1, max_attempts + 1):
        item = await fetch()
        state = state_of(item)
        if state == READY_STATE:
            return item
        if state == FAILED_STATE:
            raise MediaProcessingFailed(name)
        logger.debug("Media %s in state %s (poll %d/%d)", name, state, attempt, max_attempts)
        if attempt < max_attempts:
            await asyncio.sleep(interval)
    raise MediaNotReady(name, max_attempts, state)
