"""Fixed-window request limiter for the chat concierge."""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from traveltrek.services.stores.ephemeral import EphemeralStore


@dataclass
class Window:
    count: int


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_at: datetime | None


class RateLimiter:
    """
    At most `limit` requests per owner per `window_seconds`.

    Fixed windows: a burst of up to twice the limit can straddle a window
    boundary, which is fine for authenticated members.
    """

    def __init__(
        self,
        limit: int = 10,
        window_seconds: int = 60,
        backend: EphemeralStore[Window] | None = None,
    ):
        self.limit = limit
        self.window = timedelta(seconds=window_seconds)
        self.backend = backend if backend is not None else EphemeralStore("rate-limit")

    def check(self, owner: str) -> RateLimitDecision:
        """Count one request for `owner` if the window still has room."""
        entry = self.backend.get(owner)

        if entry is None:
            reset_at = self.backend.clock() + self.window
            self.backend.set(owner, Window(count=1), reset_at)
            return RateLimitDecision(allowed=True, remaining=self.limit - 1, reset_at=reset_at)

        if entry.value.count >= self.limit:
            return RateLimitDecision(allowed=False, remaining=0, reset_at=entry.expires_at)

        entry.value.count += 1
        return RateLimitDecision(
            allowed=True,
            remaining=self.limit - entry.value.count,
            reset_at=entry.expires_at,
        )

    def peek(self, owner: str) -> RateLimitDecision:
        """Remaining allowance without counting a request."""
        entry = self.backend.get(owner)
        if entry is None:
            return RateLimitDecision(allowed=True, remaining=self.limit, reset_at=None)
        remaining = max(self.limit - entry.value.count, 0)
        return RateLimitDecision(allowed=remaining > 0, remaining=remaining, reset_at=entry.expires_at)

    def retry_after(self, decision: RateLimitDecision) -> int:
        """Whole seconds until the window behind `decision` resets."""
        if decision.reset_at is None:
            return 0
        return max(math.ceil((decision.reset_at - self.backend.clock()).total_seconds()), 0)

    def start(self) -> None:
        self.backend.start()

    def stop(self) -> None:
        self.backend.stop()
