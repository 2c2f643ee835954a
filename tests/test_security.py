"""Tests for tokens, password hashing and the rate limiter."""

from datetime import timedelta

from bakery_app.core.security import (
    RateLimiter,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_password_hash_round_trip():
    hashed = get_password_hash("croissant")
    assert hashed != "croissant"
    assert verify_password("croissant", hashed)
    assert not verify_password("baguette", hashed)


def test_token_carries_claims():
    payload = decode_access_token(create_access_token(7, "Ana Admin", "admin"))
    assert payload.sub == 7
    assert payload.user_name == "Ana Admin"
    assert payload.role == "admin"
    assert payload.exp is not None


def test_expired_token_is_rejected():
    token = create_access_token(7, "Ana Admin", "admin", expires_delta=timedelta(seconds=-5))
    assert decode_access_token(token) is None


def test_tampered_token_is_rejected():
    token = create_access_token(7, "Ana Admin", "admin")
    assert decode_access_token(token[:-2] + "xx") is None


class TestRateLimiter:
    def test_blocks_after_limit_within_window(self):
        limiter = RateLimiter(requests_per_window=2, window_seconds=60)
        assert limiter.is_allowed("1.2.3.4", now=0)
        assert limiter.is_allowed("1.2.3.4", now=1)
        assert not limiter.is_allowed("1.2.3.4", now=2)
        assert limiter.remaining("1.2.3.4", now=2) == 0

    def test_window_slides(self):
        limiter = RateLimiter(requests_per_window=1, window_seconds=10)
        assert limiter.is_allowed("a", now=0)
        assert not limiter.is_allowed("a", now=5)
        assert limiter.is_allowed("a", now=10.5)

    def test_identifiers_are_independent(self):
        limiter = RateLimiter(requests_per_window=1, window_seconds=60)
        assert limiter.is_allowed("a", now=0)
        assert limiter.is_allowed("b", now=0)

    def test_store_is_bounded(self):
        limiter = RateLimiter(requests_per_window=5, window_seconds=60, max_keys=2)
        for identifier in ("a", "b", "c"):
            limiter.is_allowed(identifier, now=0)
        assert len(limiter) == 2
        assert "a" not in limiter.requests

    def test_sweep_evicts_idle_identifiers(self):
        limiter = RateLimiter(requests_per_window=5, window_seconds=10)
        limiter.is_allowed("idle", now=0)
        limiter.is_allowed("busy", now=8)

        assert limiter.sweep(now=12) == 1
        assert list(limiter.requests) == ["busy"]
