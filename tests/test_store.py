"""Unit tests for auth/store.py -- AccountStore queries."""

from __future__ import annotations

import pytest

from auth.errors import DuplicateIdentifier
from auth.models import Account
from auth.store import AccountStore


def test_create_and_fetch(accounts: AccountStore) -> None:
    account_id = accounts.create_account(Account(identifier="a@x.com", hashed_password="h"))
    by_id = accounts.get_by_id(account_id)
    by_identifier = accounts.get_by_identifier("a@x.com")
    assert by_id == by_identifier
    assert by_id.identifier == "a@x.com"
    assert by_id.created_at


def test_identifier_is_unique(accounts: AccountStore) -> None:
    accounts.create_account(Account(identifier="a@x.com", hashed_password="h"))
    with pytest.raises(DuplicateIdentifier):
        accounts.create_account(Account(identifier="a@x.com", hashed_password="other"))
    assert accounts.get_by_identifier("a@x.com").hashed_password == "h"


def test_account_exists(accounts: AccountStore) -> None:
    assert not accounts.account_exists("a@x.com")
    accounts.create_account(Account(identifier="a@x.com", hashed_password="h"))
    assert accounts.account_exists("a@x.com")
    assert not accounts.account_exists("A@x.com")


def test_missing_lookups_return_none(accounts: AccountStore) -> None:
    assert accounts.get_by_id(999) is None
    assert accounts.get_by_identifier("nobody@x.com") is None
