"""Process-local ephemeral stores."""

from traveltrek.services.stores.ephemeral import EphemeralStore
from traveltrek.services.stores.otp import OtpStore, OtpVerification
from traveltrek.services.stores.rate_limit import RateLimiter, RateLimitDecision

__all__ = [
    "EphemeralStore",
    "OtpStore",
    "OtpVerification",
    "RateLimiter",
    "RateLimitDecision",
]
