"""Tests for the ephemeral, OTP and rate-limit stores."""

import time
from datetime import timedelta

from traveltrek.services.stores import EphemeralStore, OtpStore, OtpVerification, RateLimiter


class TestEphemeralStore:
    def test_get_returns_live_entry(self, clock):
        store = EphemeralStore("test", clock=clock)
        store.set("k", "v", clock() + timedelta(seconds=10))

        entry = store.get("k")
        assert entry.value == "v"

    def test_expired_entry_is_deleted_on_read(self, clock):
        store = EphemeralStore("test", clock=clock)
        store.set("k", "v", clock() + timedelta(seconds=10))

        clock.advance(seconds=11)
        assert store.get("k") is None
        assert len(store) == 0

    def test_sweep_removes_only_expired(self, clock):
        store = EphemeralStore("test", clock=clock)
        store.set("short", 1, clock() + timedelta(seconds=5))
        store.set("long", 2, clock() + timedelta(minutes=5))

        clock.advance(seconds=6)
        assert store.sweep() == 1
        assert store.get("short") is None
        assert store.get("long").value == 2

    def test_delete_missing_key_is_a_no_op(self, clock):
        store = EphemeralStore("test", clock=clock)
        store.delete("nope")
        assert len(store) == 0

    def test_sweeper_thread_lifecycle(self, clock):
        store = EphemeralStore("test", sweep_interval=60, clock=clock)
        assert not store.running

        store.start()
        try:
            assert store.running
            store.start()  # idempotent
            assert store.running
        finally:
            store.stop()
        assert not store.running

    def test_sweep_job_is_scheduled_while_running(self, clock):
        store = EphemeralStore("test", sweep_interval=60, clock=clock)

        store.start()
        try:
            store.start()
            [job] = store._scheduler.jobs
            assert job.interval == 60
            assert job.unit == "seconds"
        finally:
            store.stop()
        assert store._scheduler.jobs == []

    def test_running_sweeper_removes_expired_entries(self, clock):
        store = EphemeralStore("test", sweep_interval=0.05, clock=clock)
        store.set("stale", 1, clock() - timedelta(seconds=1))
        store.set("fresh", 2, clock() + timedelta(minutes=5))

        store.start()
        try:
            deadline = time.monotonic() + 5
            while len(store) > 1 and time.monotonic() < deadline:
                time.sleep(0.02)
        finally:
            store.stop()

        assert len(store) == 1
        assert store.get("fresh").value == 2

    def test_failed_sweep_keeps_the_sweeper_alive(self, clock, monkeypatch):
        store = EphemeralStore("test", sweep_interval=0.05, clock=clock)
        calls = []

        def broken_sweep():
            calls.append(1)
            raise RuntimeError("boom")

        monkeypatch.setattr(store, "sweep", broken_sweep)
        store.start()
        try:
            deadline = time.monotonic() + 5
            while len(calls) < 2 and time.monotonic() < deadline:
                time.sleep(0.02)
            assert store.running
        finally:
            store.stop()

        assert len(calls) >= 2


class TestOtpStore:
    def test_generate_is_six_digits(self):
        for _ in range(50):
            code = OtpStore.generate()
            assert len(code) == 6
            assert code.isdigit()
            assert 100000 <= int(code) <= 999999

    def test_round_trip_returns_pending_value(self, otp_store):
        otp_store.store("user-1", "phone", "+919876543210", "123456")

        result = otp_store.verify("user-1", "phone", "123456")
        assert result.valid
        assert result.pending_value == "+919876543210"

    def test_code_is_single_use(self, otp_store):
        otp_store.store("user-1", "phone", "+919876543210", "123456")

        assert otp_store.verify("user-1", "phone", "123456").valid
        assert not otp_store.verify("user-1", "phone", "123456").valid

    def test_wrong_code_keeps_the_outstanding_one(self, otp_store):
        otp_store.store("user-1", "name", "New Name", "123456")

        assert not otp_store.verify("user-1", "name", "654321").valid
        assert otp_store.verify("user-1", "name", "123456").valid

    def test_expires_after_five_minutes(self, otp_store, clock):
        otp_store.store("user-1", "name", "New Name", "123456")

        clock.advance(minutes=5, seconds=1)
        result = otp_store.verify("user-1", "name", "123456")
        assert not result.valid
        assert result.pending_value is None

    def test_still_valid_just_inside_the_window(self, otp_store, clock):
        otp_store.store("user-1", "name", "New Name", "123456")

        clock.advance(minutes=4, seconds=59)
        assert otp_store.verify("user-1", "name", "123456").valid

    def test_purposes_are_independent(self, otp_store):
        otp_store.store("user-1", "name", "New Name", "111111")
        otp_store.store("user-1", "phone", "9999999999", "222222")

        assert not otp_store.verify("user-1", "name", "222222").valid
        assert otp_store.verify("user-1", "phone", "222222").pending_value == "9999999999"
        assert otp_store.verify("user-1", "name", "111111").pending_value == "New Name"

    def test_new_code_replaces_previous(self, otp_store):
        otp_store.store("user-1", "name", "First", "111111")
        otp_store.store("user-1", "name", "Second", "222222")

        assert not otp_store.verify("user-1", "name", "111111").valid
        assert otp_store.verify("user-1", "name", "222222").pending_value == "Second"


class TestRateLimiter:
    def test_allows_limit_then_denies(self, rate_limiter):
        decisions = [rate_limiter.check("user-1") for _ in range(10)]
        assert all(d.allowed for d in decisions)
        assert [d.remaining for d in decisions] == list(range(9, -1, -1))

        denied = rate_limiter.check("user-1")
        assert not denied.allowed
        assert denied.remaining == 0
        assert denied.reset_at == decisions[0].reset_at

    def test_denied_requests_do_not_extend_the_window(self, rate_limiter, clock):
        first = rate_limiter.check("user-1")
        for _ in range(9):
            rate_limiter.check("user-1")

        clock.advance(seconds=30)
        assert rate_limiter.check("user-1").reset_at == first.reset_at
        assert rate_limiter.peek("user-1").remaining == 0

    def test_window_resets_after_reset_at(self, rate_limiter, clock):
        for _ in range(11):
            rate_limiter.check("user-1")

        clock.advance(seconds=61)
        decisions = [rate_limiter.check("user-1") for _ in range(10)]
        assert all(d.allowed for d in decisions)
        assert not rate_limiter.check("user-1").allowed

    def test_owners_are_counted_separately(self, rate_limiter):
        for _ in range(10):
            rate_limiter.check("user-1")

        assert not rate_limiter.check("user-1").allowed
        assert rate_limiter.check("user-2").allowed

    def test_peek_does_not_count(self, rate_limiter):
        assert rate_limiter.peek("user-1").remaining == 10
        rate_limiter.check("user-1")
        assert rate_limiter.peek("user-1").remaining == 9
        assert rate_limiter.peek("user-1").remaining == 9

    def test_custom_limit(self, clock):
        limiter = RateLimiter(limit=2, window_seconds=10, backend=EphemeralStore("rl", clock=clock))
        assert limiter.check("u").allowed
        assert limiter.check("u").allowed
        assert not limiter.check("u").allowed

    def test_retry_after_counts_down_with_the_clock(self, rate_limiter, clock):
        for _ in range(10):
            rate_limiter.check("user-1")
        denied = rate_limiter.check("user-1")
        assert rate_limiter.retry_after(denied) == 60

        clock.advance(seconds=45, milliseconds=500)
        assert rate_limiter.retry_after(rate_limiter.check("user-1")) == 15


class TestInjectedBackends:
    def test_empty_backend_is_kept(self, clock):
        backend = EphemeralStore("otp", sweep_interval=7, clock=clock)

        assert len(backend) == 0
        assert OtpStore(backend=backend).backend is backend
        assert RateLimiter(backend=backend).backend is backend

    def test_injected_clock_drives_expiry(self, clock):
        store = OtpStore(ttl_seconds=60, backend=EphemeralStore("otp", clock=clock))
        store.store("user-1", "name", "New Name", "123456")

        clock.advance(seconds=61)
        assert store.verify("user-1", "name", "123456") == OtpVerification(valid=False)
