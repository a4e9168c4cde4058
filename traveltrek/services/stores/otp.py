"""One-time codes for account recovery and profile changes."""

import secrets
from dataclasses import dataclass
from datetime import timedelta

from traveltrek.services.stores.ephemeral import EphemeralStore

OTP_MIN = 100000
OTP_MAX = 999999


@dataclass(frozen=True)
class PendingOtp:
    code: str
    purpose: str
    pending_value: str


@dataclass(frozen=True)
class OtpVerification:
    valid: bool
    pending_value: str | None = None


class OtpStore:
    """
    Six-digit codes keyed by (owner, purpose), valid for `ttl_seconds`.

    Storing a new code for the same pair replaces the outstanding one. A
    successful verification consumes the code and hands back the value the
    caller asked to apply (a new phone number, a password hash, ...).
    """

    def __init__(self, ttl_seconds: int = 300, backend: EphemeralStore[PendingOtp] | None = None):
        self.ttl = timedelta(seconds=ttl_seconds)
        self.backend = backend if backend is not None else EphemeralStore("otp")

    @staticmethod
    def generate() -> str:
        return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))

    def store(self, owner: str, purpose: str, pending_value: str, code: str) -> None:
        expires_at = self.backend.clock() + self.ttl
        self.backend.set(
            (owner, purpose),
            PendingOtp(code=code, purpose=purpose, pending_value=pending_value),
            expires_at,
        )

    def verify(self, owner: str, purpose: str, code: str) -> OtpVerification:
        key = (owner, purpose)
        entry = self.backend.get(key)
        if entry is None:
            return OtpVerification(valid=False)
        if not secrets.compare_digest(entry.value.code, str(code)):
            return OtpVerification(valid=False)

        self.backend.delete(key)
        return OtpVerification(valid=True, pending_value=entry.value.pending_value)

    def start(self) -> None:
        self.backend.start()

    def stop(self) -> None:
        self.backend.stop()
