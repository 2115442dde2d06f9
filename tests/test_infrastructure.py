"""
Infrastructure tests: credential encryption, rate limiting, validators and health endpoints.
"""

import time
from unittest.mock import MagicMock, patch

import pytest
import redis

from shopsite import rate_limiter
from shopsite.rate_limiter import check_rate_limit, get_redis_client
from shopsite.secret_box import SecretDecryptionError, decrypt_secret, encrypt_secret
from shopsite.shared.validators import is_deliverable_email, validate_phone


class TestSecretBox:
    def test_round_trip(self):
        token = encrypt_secret("service-role-secret")
        assert token != "service-role-secret"
        assert decrypt_secret(token) == "service-role-secret"

    def test_tampered_token(self):
        token = encrypt_secret("service-role-secret")
        with pytest.raises(SecretDecryptionError):
            decrypt_secret(token[:-4] + "AAAA")


class TestRateLimit:
    def test_memory_window(self):
        key = "test:rate-limit-window"
        results = [check_rate_limit(key, limit=2, window_seconds=60, client=None)[0] for _ in range(3)]
        assert results == [True, True, False]

    def test_keys_are_independent(self):
        check_rate_limit("test:ip-a", limit=1, window_seconds=60, client=None)
        allowed, count, _ = check_rate_limit("test:ip-b", limit=1, window_seconds=60, client=None)
        assert allowed is True
        assert count == 1

    def test_unreachable_redis_not_retried_on_every_call(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "redis://cache.invalid:6379/0")
        monkeypatch.setattr(rate_limiter, "_redis", None)
        monkeypatch.setattr(rate_limiter, "_redis_retry_at", 0.0)
        unreachable = MagicMock()
        unreachable.ping.side_effect = redis.ConnectionError("connection refused")

        with patch("shopsite.rate_limiter.redis.from_url", return_value=unreachable) as mock_from_url:
            for _ in range(3):
                with pytest.raises(redis.ConnectionError):
                    get_redis_client()

        mock_from_url.assert_called_once()

    def test_connects_again_once_retry_delay_passed(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "redis://cache.invalid:6379/0")
        monkeypatch.setattr(rate_limiter, "_redis", None)
        monkeypatch.setattr(rate_limiter, "_redis_retry_at", time.time() - 1)
        healthy = MagicMock()

        with patch("shopsite.rate_limiter.redis.from_url", return_value=healthy):
            assert get_redis_client() is healthy


class TestValidators:
    @pytest.mark.parametrize(
        "email,expected",
        [
            ("asha@example.com", True),
            (" asha@example.co.in ", True),
            ("asha@example", False),
            ("asha example@x.com", False),
            ("", False),
            (None, False),
        ],
    )
    def test_deliverable_email(self, email, expected):
        assert is_deliverable_email(email) is expected

    def test_phone_keeps_leading_plus(self):
        assert validate_phone("+91 98765-43210") == "+919876543210"

    def test_phone_too_short(self):
        with pytest.raises(ValueError):
            validate_phone("12345")


class TestHealth:
    def test_root(self, client):
        assert client.get("/").json() == {"message": "Shopsite API is running"}

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_redis_health_without_redis(self, client):
        assert client.get("/health/redis").json()["status"] == "disabled"
