"""Tests for main.py -- the purge-denylist and create-account commands."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

import main as cli
from auth.denylist import DenylistStore
from auth.store import AccountStore
from core.config import Settings


@pytest.fixture
def file_db(tmp_path, monkeypatch: pytest.MonkeyPatch) -> str:
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    settings = Settings(_env_file=None, secret_key="c" * 32, database_url=url, bcrypt_rounds=4)
    monkeypatch.setattr(cli, "get_settings", lambda: settings)
    return url


def test_purge_denylist(file_db: str, capsys: pytest.CaptureFixture) -> None:
    now = datetime.now(timezone.utc)
    store = DenylistStore(file_db)
    store.revoke("expired", int((now - timedelta(hours=1)).timestamp()))
    store.revoke("live", int((now + timedelta(hours=1)).timestamp()))
    store.close()

    assert cli.main(["purge-denylist"]) == 0
    assert "Purged 1 expired denylist entry, 1 remaining." in capsys.readouterr().out

    store = DenylistStore(file_db)
    try:
        assert store.is_revoked("live")
        assert not store.is_revoked("expired")
    finally:
        store.close()


def test_create_account(file_db: str, capsys: pytest.CaptureFixture) -> None:
    assert cli.main(["create-account", "a@x.com", "--password", "pw123456"]) == 0
    assert "Created account" in capsys.readouterr().out

    accounts = AccountStore(file_db)
    try:
        account = accounts.get_by_identifier("a@x.com")
        assert account is not None
        assert account.hashed_password != "pw123456"
    finally:
        accounts.close()


def test_create_account_duplicate(file_db: str, capsys: pytest.CaptureFixture) -> None:
    cli.main(["create-account", "a@x.com", "--password", "pw123456"])
    assert cli.main(["create-account", "a@x.com", "--password", "other"]) == 1
    assert "already exists" in capsys.readouterr().out


def test_create_account_prompts_for_password(file_db: str, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli.getpass, "getpass", lambda prompt: "pw123456")
    assert cli.main(["create-account", "b@x.com"]) == 0


def test_no_command_prints_help(capsys: pytest.CaptureFixture) -> None:
    assert cli.main([]) == 0
    assert "usage: tokenauth" in capsys.readouterr().out


def test_create_account_rejects_overlong_password(file_db: str, capsys: pytest.CaptureFixture) -> None:
    assert cli.main(["create-account", "a@x.com", "--password", "é" * 72]) == 1
    assert "exceeds 72 bytes" in capsys.readouterr().out

    accounts = AccountStore(file_db)
    try:
        assert not accounts.account_exists("a@x.com")
    finally:
        accounts.close()
