"""
Rate Limiter for TMDb lookups.

Hey future me - this is a token bucket with adaptive backoff!
Enrichment fires lookups concurrently, so without a limiter a cold run over
a few hundred historical films would hammer TMDb and collect 429s.

ALGORITHM: Token Bucket
- Bucket holds max_tokens
- Tokens refill at refill_rate per second
- Every request consumes 1 token
- Empty bucket: wait until a token is available

ADAPTIVE BACKOFF on 429:
- First 429: initial_backoff_seconds
- Each further 429: multiplied by backoff_multiplier
- A Retry-After header always wins (capped at max_backoff_seconds)
- After a success: backoff resets

USAGE:
    limiter = RateLimiter.for_tmdb()

    async with limiter:
        response = await client.get(url)

    # On 429:
    await limiter.handle_rate_limit_response(retry_after)

One limiter per client instance. There are no module-level singletons, two
pipeline runs in one process never share bucket state.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class RateLimiterConfig:
    """Configuration for rate limiter."""

    max_tokens: int = 10  # Bucket size
    refill_rate: float = 2.0  # Tokens per second
    max_backoff_seconds: float = 60.0  # Max wait on 429
    initial_backoff_seconds: float = 1.0  # First 429 wait
    backoff_multiplier: float = 2.0  # Exponential backoff factor


@dataclass
class RateLimiter:
    """Token Bucket Rate Limiter with adaptive backoff.

    Attributes:
        config: Rate limiter configuration
        _tokens: Current available tokens
        _last_refill: Last time tokens were refilled
        _current_backoff: Current backoff delay (resets on success)
        _lock: Async lock guarding the bucket
    """

    config: RateLimiterConfig = field(default_factory=RateLimiterConfig)

    _tokens: float = field(default=0.0, init=False)
    _last_refill: float = field(default_factory=time.monotonic, init=False)
    _current_backoff: float = field(default=0.0, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)
    _name: str = field(default="default", init=False)

    def __post_init__(self) -> None:
        """Initialize tokens to max capacity."""
        self._tokens = float(self.config.max_tokens)
        self._current_backoff = self.config.initial_backoff_seconds

    @classmethod
    def for_tmdb(cls) -> "RateLimiter":
        """Create rate limiter for the TMDb API.

        Hey future me - TMDb allows roughly 40 requests per second per IP.
        A calendar build needs a few hundred lookups at most, so we stay far
        below that: 4 req/sec sustained, bursts of 20.
        """
        limiter = cls(
            config=RateLimiterConfig(
                max_tokens=20,
                refill_rate=4.0,
                max_backoff_seconds=30.0,
                initial_backoff_seconds=1.0,
            )
        )
        limiter._name = "tmdb"
        return limiter

    def _refill_tokens(self) -> None:
        """Refill tokens based on elapsed time."""
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self.config.max_tokens, self._tokens + elapsed * self.config.refill_rate)
        self._last_refill = now

    async def acquire(self) -> None:
        """Acquire one token, waiting if necessary."""
        async with self._lock:
            self._refill_tokens()

            while self._tokens < 1.0:
                wait_time = (1.0 - self._tokens) / self.config.refill_rate
                logger.debug(
                    f"RateLimiter[{self._name}]: No tokens available, waiting {wait_time:.2f}s"
                )

                # Release lock while waiting
                self._lock.release()
                try:
                    await asyncio.sleep(wait_time)
                finally:
                    await self._lock.acquire()

                self._refill_tokens()

            self._tokens -= 1.0

    async def handle_rate_limit_response(self, retry_after: float | None = None) -> float:
        """Handle a 429 rate limit response with adaptive backoff.

        Args:
            retry_after: Retry-After header from API response (seconds)

        Returns:
            The actual wait time used
        """
        async with self._lock:
            wait_time = float(retry_after) if retry_after is not None else self._current_backoff
            wait_time = min(wait_time, self.config.max_backoff_seconds)

            logger.warning(
                f"RateLimiter[{self._name}]: 429 Rate Limited! "
                f"Waiting {wait_time:.1f}s before retry "
                f"(backoff level: {self._current_backoff:.1f}s)"
            )

            self._current_backoff = min(
                self._current_backoff * self.config.backoff_multiplier,
                self.config.max_backoff_seconds,
            )
            # Clear tokens (force the next acquire to wait)
            self._tokens = 0.0

        # Wait outside lock
        await asyncio.sleep(wait_time)
        return wait_time

    def reset_backoff(self) -> None:
        """Reset backoff after a successful request."""
        self._current_backoff = self.config.initial_backoff_seconds

    async def __aenter__(self) -> "RateLimiter":
        """Enter async context - acquire token."""
        await self.acquire()
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: Exception | None, exc_tb: object
    ) -> None:
        """Exit async context, resetting backoff on success."""
        if exc_type is None:
            self.reset_backoff()

    @property
    def available_tokens(self) -> float:
        """Get current available tokens (for debugging)."""
        self._refill_tokens()
        return self._tokens

    @property
    def current_backoff(self) -> float:
        """Backoff the next 429 without Retry-After would wait."""
        return self._current_backoff

    @property
    def name(self) -> str:
        """Get limiter name for logging."""
        return self._name


__all__ = ["RateLimiter", "RateLimiterConfig"]
