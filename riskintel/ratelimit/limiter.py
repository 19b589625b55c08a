from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from riskintel.config.settings import RateLimitConfig

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]


@dataclass
class _WindowState:
    window_start: float | None = None
    count: int = 0
    last_request: float | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class RateLimiter:
    """Per-provider request budget with a fixed minimum spacing.

    Each provider key gets at most ``max_requests`` permits per window and
    consecutive permits are at least ``min_interval`` seconds apart.
    ``acquire`` never rejects a caller, it only delays it.
    """

    def __init__(
        self,
        max_requests: int = 30,
        window_seconds: float = 60.0,
        min_interval: float = 2.0,
        overrides: dict[str, int] | None = None,
        clock: Clock = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        if max_requests < 1:
            msg = "max_requests must be >= 1"
            raise ValueError(msg)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.min_interval = min_interval
        self.overrides = dict(overrides or {})
        self._clock = clock
        self._sleep = sleep
        self._states: dict[str, _WindowState] = {}

    @classmethod
    def from_config(cls, config: RateLimitConfig) -> RateLimiter:
        return cls(
            max_requests=config.max_requests_per_window,
            window_seconds=config.window_seconds,
            min_interval=config.min_interval_seconds,
            overrides=config.provider_overrides,
        )

    def budget_for(self, key: str) -> int:
        return max(1, self.overrides.get(key, self.max_requests))

    def _state(self, key: str) -> _WindowState:
        # No await between lookup and insert, so this is atomic under asyncio.
        state = self._states.get(key)
        if state is None:
            state = _WindowState()
            self._states[key] = state
        return state

    async def acquire(self, key: str) -> float:
        """Wait until ``key`` may issue a request. Returns the seconds waited."""
        state = self._state(key)
        budget = self.budget_for(key)
        waited = 0.0

        async with state.lock:
            while True:
                now = self._clock()

                if state.window_start is None or now - state.window_start >= self.window_seconds:
                    state.window_start = now
                    state.count = 0

                if state.count >= budget:
                    delay = self.window_seconds - (now - state.window_start)
                    logger.info(
                        "rate_limit_window_exhausted",
                        provider=key,
                        budget=budget,
                        wait_seconds=round(delay, 3),
                    )
                    await self._sleep(delay)
                    waited += delay
                    continue

                if state.last_request is not None:
                    since_last = now - state.last_request
                    if since_last < self.min_interval:
                        delay = self.min_interval - since_last
                        await self._sleep(delay)
                        waited += delay
                        continue

                state.count += 1
                state.last_request = self._clock()
                break

        if waited > 0:
            logger.debug("rate_limit_delayed", provider=key, waited_seconds=round(waited, 3))
        return waited

    def snapshot(self, key: str) -> dict[str, float | int | None]:
        state = self._states.get(key)
        if state is None:
            return {"count": 0, "window_start": None, "last_request": None}
        return {
            "count": state.count,
            "window_start": state.window_start,
            "last_request": state.last_request,
        }
