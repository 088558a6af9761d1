"""Per-client rate limiting middleware.

Fixed-window counters keyed by client IP: at most ``requests`` requests per
``window_seconds`` per key. Counters live in memory only and are spread over
independently locked shards; expired keys are swept lazily.
"""

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from gardensite.http.request import Request
from gardensite.http.response import Response
from gardensite.middleware.protocol import Next


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """Configuration for the rate limiter.

    ``key_header`` names a proxy header (e.g. ``x-forwarded-for``) whose first
    hop identifies the client. ``None`` keys on the connection's peer address.
    """

    requests: int = 120
    window_seconds: float = 60.0
    key_header: str | None = None
    shards: int = 16
    message: str = "Rate limit exceeded"


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Outcome of counting one request against a key."""

    allowed: bool
    remaining: int
    reset_after: float


class _Shard:
    __slots__ = ("last_sweep", "lock", "state")

    def __init__(self, now: float) -> None:
        self.lock = threading.Lock()
        # key -> (count, window_start)
        self.state: dict[str, tuple[int, float]] = {}
        self.last_sweep = now


class RateLimiter:
    """Thread-safe fixed-window counter store.

    Each key hashes to one shard; the increment-and-check for a key runs
    under that shard's lock only.
    """

    __slots__ = ("_clock", "_config", "_shards")

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or RateLimitConfig()
        self._clock = clock
        now = clock()
        self._shards = tuple(_Shard(now) for _ in range(max(1, self._config.shards)))

    def _shard_for(self, key: str) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def hit(self, key: str) -> RateLimitDecision:
        """Count one request for *key* and decide whether it may proceed."""
        cfg = self._config
        now = self._clock()
        shard = self._shard_for(key)
        with shard.lock:
            if now - shard.last_sweep >= cfg.window_seconds:
                self._sweep(shard, now)

            count, window_start = shard.state.get(key, (0, now))
            if now - window_start >= cfg.window_seconds:
                count = 0
                window_start = now

            count += 1
            shard.state[key] = (count, window_start)

        reset_after = max(0.0, window_start + cfg.window_seconds - now)
        return RateLimitDecision(
            allowed=count <= cfg.requests,
            remaining=max(0, cfg.requests - count),
            reset_after=reset_after,
        )

    def _sweep(self, shard: _Shard, now: float) -> None:
        """Drop keys whose window has expired. Caller holds the shard lock."""
        window = self._config.window_seconds
        expired = [key for key, (_, start) in shard.state.items() if now - start >= window]
        for key in expired:
            del shard.state[key]
        shard.last_sweep = now

    def __len__(self) -> int:
        """Number of tracked keys (including ones not yet swept)."""
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.state)
        return total


class RateLimitMiddleware:
    """Reject clients that exceed the request budget with 429.

    Rejections carry a JSON body ``{"error": "Rate limit exceeded"}`` and a
    ``Retry-After`` header. Allowed responses report the budget through
    ``X-RateLimit-Limit``, ``X-RateLimit-Remaining`` and ``X-RateLimit-Reset``.

    Usage::

        app.add_middleware(RateLimitMiddleware(RateLimitConfig(requests=120)))
    """

    __slots__ = ("_config", "limiter")

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or RateLimitConfig()
        self.limiter = RateLimiter(self._config, clock=clock)

    def _identity_key(self, request: Request) -> str:
        header_name = self._config.key_header
        if header_name:
            raw = request.headers.get(header_name)
            if raw:
                # Proxy chain is comma-separated; the first hop is the client
                forwarded = raw.split(",")[0].strip()
                if forwarded:
                    return forwarded
        return request.client_ip

    async def __call__(self, request: Request, next: Next) -> Response:
        decision = self.limiter.hit(self._identity_key(request))
        reset = str(math.ceil(decision.reset_after))

        if not decision.allowed:
            return Response.json({"error": self._config.message}, status=429).with_header(
                "Retry-After", reset
            )

        response = await next(request)
        return response.with_headers(
            {
                "X-RateLimit-Limit": str(self._config.requests),
                "X-RateLimit-Remaining": str(decision.remaining),
                "X-RateLimit-Reset": reset,
            }
        )
