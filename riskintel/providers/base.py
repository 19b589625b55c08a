from __future__ import annotations

import abc
import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Generic, TypeVar

import httpx
import structlog

from riskintel.domain.errors import ProviderError

if TYPE_CHECKING:
    from riskintel.domain.models import Subject
    from riskintel.ratelimit.limiter import RateLimiter

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Everything an adapter may hit while calling out or parsing a response.
DEGRADABLE_ERRORS: tuple[type[BaseException], ...] = (
    httpx.HTTPError,
    ProviderError,
    ValueError,
    KeyError,
    TypeError,
    AttributeError,
)


async def guarded_call(
    provider: str,
    limiter: RateLimiter,
    call: Callable[[], Awaitable[T]],
    timeout: float,
    **context: object,
) -> tuple[T | None, str | None]:
    """Run one rate-limited, time-bounded provider call.

    Returns ``(value, None)`` on success and ``(None, reason)`` on any
    transport, timeout or parse failure. Cancellation propagates.
    """
    await limiter.acquire(provider)
    start = time.perf_counter()
    try:
        value = await asyncio.wait_for(call(), timeout=timeout)
    except asyncio.TimeoutError:
        reason = f"timed out after {timeout:.1f}s"
    except DEGRADABLE_ERRORS as exc:
        reason = f"{type(exc).__name__}: {exc}"
    else:
        logger.debug(
            "provider_call_complete",
            provider=provider,
            elapsed_ms=int((time.perf_counter() - start) * 1000),
            **context,
        )
        return value, None

    logger.warning(
        "provider_degraded",
        provider=provider,
        reason=reason,
        elapsed_ms=int((time.perf_counter() - start) * 1000),
        **context,
    )
    return None, reason


class ProviderAdapter(abc.ABC, Generic[T]):
    """One external intelligence source behind a degrade-on-error contract."""

    name: str = "provider"

    def __init__(self, limiter: RateLimiter, timeout: float = 15.0) -> None:
        self.limiter = limiter
        self.timeout = timeout

    async def fetch(self, subject: Subject) -> tuple[T, bool]:
        value, reason = await guarded_call(
            self.name,
            self.limiter,
            lambda: self._fetch(subject),
            self.timeout,
            subject_id=subject.subject_id,
        )
        if reason is not None or value is None:
            return self.default(), False

        if self.is_empty(value):
            logger.info("provider_empty_result", provider=self.name, subject_id=subject.subject_id)
        return value, True

    @abc.abstractmethod
    async def _fetch(self, subject: Subject) -> T:
        """Call the provider and return its normalized result."""
        ...

    @abc.abstractmethod
    def default(self) -> T: ...

    @abc.abstractmethod
    def is_empty(self, value: T) -> bool: ...
