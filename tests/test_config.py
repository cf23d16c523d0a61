"""Unit tests for core/config.py -- the SECRET_KEY policy and defaults."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.config import Settings


def test_production_requires_secret_key() -> None:
    with pytest.raises(ValidationError, match="SECRET_KEY is required"):
        Settings(_env_file=None, debug=False, secret_key="")


def test_debug_generates_secret_key() -> None:
    settings = Settings(_env_file=None, debug=True, secret_key="")
    assert len(settings.secret_key) >= 32


def test_short_secret_key_rejected() -> None:
    with pytest.raises(ValidationError, match="at least 32 characters"):
        Settings(_env_file=None, debug=True, secret_key="too-short")


def test_token_defaults() -> None:
    settings = Settings(_env_file=None, secret_key="k" * 32)
    assert settings.token_expire_seconds == 1800
    assert settings.jwt_algorithm == "HS256"
    assert settings.jti_bytes == 16


def test_jti_below_128_bits_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, secret_key="k" * 32, jti_bytes=8)


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SECRET_KEY", "e" * 40)
    monkeypatch.setenv("TOKEN_EXPIRE_SECONDS", "60")
    settings = Settings(_env_file=None)
    assert settings.secret_key == "e" * 40
    assert settings.token_expire_seconds == 60
