"""Outbound HTTP helpers: configured httpx clients, retries and a circuit breaker."""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, TypeVar

import httpx

from landing.config import settings

T = TypeVar("T")


class CircuitBreakerOpenError(RuntimeError):
    """Raised when the circuit breaker is open and rejects a call."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Circuit breaker '{name}' is open")
        self.name = name


class RetryableStatusError(httpx.HTTPError):
    """Marks responses whose status code should be retried."""

    def __init__(self, response: httpx.Response) -> None:
        super().__init__(f"Retryable response: {response.status_code}")
        self.response = response


@dataclass(frozen=True)
class RetryPolicy:
    retries: int = 1
    backoff_initial: float = 0.5
    backoff_max: float = 8.0
    statuses: frozenset[int] = field(default_factory=frozenset)

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            retries=settings.HTTP_RETRY_ATTEMPTS,
            backoff_initial=settings.HTTP_RETRY_BACKOFF_INITIAL,
            backoff_max=settings.HTTP_RETRY_BACKOFF_MAX,
            statuses=frozenset(settings.HTTP_RETRY_STATUS_CODES),
        )

    def delays(self) -> list[float]:
        """Sleep before each retry, doubling up to ``backoff_max``."""

        result: list[float] = []
        delay = max(0.0, self.backoff_initial)
        for _ in range(max(0, self.retries)):
            result.append(delay)
            delay = delay * 2
            if self.backoff_max > 0:
                delay = min(delay, self.backoff_max)
        return result


class AsyncCircuitBreaker:
    """Opens after ``max_failures`` consecutive failures, half-opens after a backoff."""

    def __init__(self, *, max_failures: int, base_delay: float, max_delay: float, name: str) -> None:
        if max_failures <= 0:
            raise ValueError("max_failures must be positive")
        if base_delay < 0 or max_delay < 0:
            raise ValueError("delay values must be non-negative")
        self.name = name
        self._max_failures = max_failures
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._lock = asyncio.Lock()
        self._failures = 0
        self._trips = 0
        self._state = "closed"  # closed, open, half-open
        self._open_until = 0.0
        self._probe_in_flight = False

    @classmethod
    def from_settings(cls, name: str) -> "AsyncCircuitBreaker":
        return cls(
            max_failures=settings.HTTP_CIRCUIT_BREAKER_MAX_FAILURES,
            base_delay=settings.HTTP_CIRCUIT_BREAKER_BASE_DELAY,
            max_delay=settings.HTTP_CIRCUIT_BREAKER_MAX_DELAY,
            name=name,
        )

    @property
    def state(self) -> str:
        return self._state

    async def call(self, func: Callable[[], Awaitable[T]]) -> T:
        await self._acquire()
        try:
            result = await func()
        except Exception:
            await self._on_failure()
            raise
        await self._on_success()
        return result

    async def _acquire(self) -> None:
        async with self._lock:
            if self._state == "open":
                if time.monotonic() < self._open_until:
                    raise CircuitBreakerOpenError(self.name)
                self._state = "half-open"
                self._probe_in_flight = False
            if self._state == "half-open":
                if self._probe_in_flight:
                    raise CircuitBreakerOpenError(self.name)
                self._probe_in_flight = True

    async def _on_failure(self) -> None:
        async with self._lock:
            self._failures += 1
            if self._state == "half-open" or self._failures >= self._max_failures:
                self._trip()

    async def _on_success(self) -> None:
        async with self._lock:
            self._failures = 0
            self._trips = 0
            self._state = "closed"
            self._probe_in_flight = False

    def _trip(self) -> None:
        self._trips += 1
        delay = self._base_delay * (2 ** (self._trips - 1))
        if self._max_delay:
            delay = min(delay, self._max_delay)
        self._state = "open"
        self._open_until = time.monotonic() + delay
        self._probe_in_flight = False

    async def reset(self) -> None:
        """Forcefully close the breaker (useful in tests)."""

        await self._on_success()


@asynccontextmanager
async def async_http_client(
    *,
    base_url: str | httpx.URL | None = None,
    headers: dict[str, str] | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """AsyncClient with the configured timeouts and proxy."""

    timeout = httpx.Timeout(
        timeout=settings.HTTP_TIMEOUT_TOTAL,
        connect=settings.HTTP_TIMEOUT_CONNECT,
        read=settings.HTTP_TIMEOUT_READ,
        write=settings.HTTP_TIMEOUT_WRITE,
    )
    options: dict[str, Any] = {"timeout": timeout}
    if base_url is not None:
        options["base_url"] = base_url
    if headers:
        options["headers"] = headers
    if settings.HTTP_PROXY_URL:
        options["proxy"] = settings.HTTP_PROXY_URL

    async with httpx.AsyncClient(**options) as client:
        yield client


async def request_with_retries(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    breaker: AsyncCircuitBreaker,
    policy: RetryPolicy | None = None,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request, retrying timeouts, network errors and retryable statuses."""

    policy = policy or RetryPolicy.from_settings()
    delays = policy.delays()

    async def _attempt() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        if response.status_code in policy.statuses:
            raise RetryableStatusError(response)
        return response

    for attempt in range(len(delays) + 1):
        try:
            return await breaker.call(_attempt)
        except (RetryableStatusError, httpx.TimeoutException, httpx.NetworkError):
            if attempt >= len(delays):
                raise
        if delays[attempt] > 0:
            await asyncio.sleep(delays[attempt])
    raise AssertionError("unreachable")  # pragma: no cover


__all__ = [
    "AsyncCircuitBreaker",
    "CircuitBreakerOpenError",
    "RetryPolicy",
    "RetryableStatusError",
    "async_http_client",
    "request_with_retries",
]
