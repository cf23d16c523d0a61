#!/usr/bin/env python3
"""
TokenAuth -- JSON API authentication with stateless JWTs and a denylist.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8000
  python main.py purge-denylist
  python main.py create-account a@x.com

Environment variables:
  SECRET_KEY     JWT signing key, at least 32 characters. Required unless DEBUG=true.
  DEBUG          true to auto-generate a throwaway SECRET_KEY for local work.
  DATABASE_URL   SQLAlchemy URL for accounts and the denylist (default: ./tokenauth.db).
"""

import argparse
import getpass
from typing import Optional

from auth.denylist import DenylistStore
from auth.errors import DuplicateIdentifier, PasswordTooLong
from auth.models import Account
from auth.passwords import hash_password
from auth.store import AccountStore
from core.config import get_settings


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _purge_denylist(args: argparse.Namespace) -> int:
    """Remove denylist rows whose tokens have expired. Safe to run while the API is up."""
    settings = get_settings()
    denylist = DenylistStore(settings.database_url)
    try:
        removed = denylist.purge_expired()
        remaining = denylist.count()
    finally:
        denylist.close()
    print(f"  Purged {removed} expired denylist entr{'y' if removed == 1 else 'ies'}, {remaining} remaining.")
    return 0


def _create_account(args: argparse.Namespace) -> int:
    settings = get_settings()
    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("  [!] Password must not be empty.")
        return 1
    accounts = AccountStore(settings.database_url)
    try:
        account_id = accounts.create_account(
            Account(identifier=args.email, hashed_password=hash_password(password, settings.bcrypt_rounds))
        )
    except DuplicateIdentifier:
        print(f"  [!] An account for '{args.email}' already exists.")
        return 1
    except PasswordTooLong as exc:
        print(f"  [!] Password rejected: {exc}.")
        return 1
    finally:
        accounts.close()
    print(f"  Created account {account_id} for {args.email}.")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="tokenauth",
        description="JSON API authentication with stateless JWTs and a server-side denylist.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  DEBUG=true python main.py serve --reload
  python main.py purge-denylist
  python main.py create-account a@x.com
        """,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = subparsers.add_parser("serve", help="Run the API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    serve.set_defaults(func=_serve)

    purge = subparsers.add_parser("purge-denylist", help="Delete denylist entries for tokens that have expired")
    purge.set_defaults(func=_purge_denylist)

    create = subparsers.add_parser("create-account", help="Create an account from the command line")
    create.add_argument("email", help="Account email (the login identifier)")
    create.add_argument(
        "--password",
        default=None,
        help="Password. Prompted for when omitted; prefer the prompt so it stays out of shell history.",
    )
    create.set_defaults(func=_create_account)

    args = parser.parse_args(argv)
    if not getattr(args, "func", None):
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
