"""Tests for the rate limiter, client IP resolution and token helpers."""

from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import JWTError

from api.middleware.security import InMemoryRateLimiter, get_client_ip, get_identity, is_trusted_proxy
from api.services.token import create_token, decode_token, should_refresh_token


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def fake_request(host="203.0.113.9", headers=None, user=None):
    return SimpleNamespace(
        client=SimpleNamespace(host=host),
        headers=headers or {},
        state=SimpleNamespace(user=user),
    )


class TestInMemoryRateLimiter:
    def test_allows_up_to_limit(self):
        limiter = InMemoryRateLimiter(clock=FakeClock())
        results = [limiter.is_rate_limited("ip:1", limit=3, window=60) for _ in range(4)]
        assert results == [False, False, False, True]

    def test_window_slides(self):
        clock = FakeClock()
        limiter = InMemoryRateLimiter(clock=clock)
        for _ in range(2):
            limiter.is_rate_limited("ip:1", limit=2, window=60)
        assert limiter.is_rate_limited("ip:1", limit=2, window=60)

        clock.now += 61
        assert not limiter.is_rate_limited("ip:1", limit=2, window=60)

    def test_keys_are_independent(self):
        limiter = InMemoryRateLimiter(clock=FakeClock())
        limiter.is_rate_limited("user:1", limit=1, window=60)
        assert limiter.is_rate_limited("user:1", limit=1, window=60)
        assert not limiter.is_rate_limited("user:2", limit=1, window=60)

    def test_rejected_requests_are_not_counted(self):
        clock = FakeClock()
        limiter = InMemoryRateLimiter(clock=clock)
        limiter.is_rate_limited("ip:1", limit=1, window=10)
        clock.now += 5
        assert limiter.is_rate_limited("ip:1", limit=1, window=10)
        clock.now += 6
        assert not limiter.is_rate_limited("ip:1", limit=1, window=10)

    def test_periodic_cleanup_drops_stale_keys(self):
        clock = FakeClock()
        limiter = InMemoryRateLimiter(clock=clock)
        limiter.is_rate_limited("ip:old", limit=5, window=60)

        clock.now += limiter.STALE_ENTRY_AGE + 1
        for _ in range(limiter.CLEANUP_INTERVAL):
            limiter.is_rate_limited("ip:new", limit=1000, window=60)

        assert "ip:old" not in limiter._requests


class TestClientIdentity:
    def test_untrusted_peer_ignores_forwarded_header(self):
        request = fake_request(headers={"X-Forwarded-For": "1.2.3.4"})
        assert get_client_ip(request) == "203.0.113.9"

    def test_trusted_proxy_uses_rightmost_untrusted_address(self):
        request = fake_request(host="10.0.0.5", headers={"X-Forwarded-For": "6.6.6.6, 198.51.100.7, 10.0.0.2"})
        assert get_client_ip(request) == "198.51.100.7"

    @pytest.mark.parametrize("ip,trusted", [("127.0.0.1", True), ("192.168.1.20", True), ("8.8.8.8", False), ("nonsense", False)])
    def test_is_trusted_proxy(self, ip, trusted):
        assert is_trusted_proxy(ip) is trusted

    def test_identity_prefers_user(self):
        assert get_identity(fake_request(user={"sub": "7"})) == "user:7"
        assert get_identity(fake_request()) == "ip:203.0.113.9"


class TestTokens:
    def test_round_trip_claims(self):
        token = create_token({"sub": "5", "tenant_id": 2})
        payload = decode_token(token)
        assert payload["sub"] == "5"
        assert payload["tenant_id"] == 2

    def test_expired_token(self):
        token = create_token({"sub": "5"}, expires_delta=timedelta(seconds=-5))
        with pytest.raises(JWTError, match="expired"):
            decode_token(token)

    def test_tampered_token(self):
        token = create_token({"sub": "5"})
        with pytest.raises(JWTError):
            decode_token(token[:-2] + ("AA" if not token.endswith("AA") else "BB"))

    def test_refresh_after_half_lifetime(self):
        assert not should_refresh_token(decode_token(create_token({"sub": "5"})))
        assert should_refresh_token({"iat": 0, "exp": 100})
        assert not should_refresh_token({})
