#!/usr/bin/env python3
"""Generate bcrypt hashes and SQL updates for provisioning demo accounts.

Reads ``email:password`` lines from a file (or stdin) and prints each hash
followed by the ``UPDATE users ...`` statements to run against the database.

    python hash_passwords.py accounts.txt
    printf 'demo1@example.com:secret\n' | python hash_passwords.py -
"""

from __future__ import annotations

import argparse
import sys
from typing import Iterable, Iterator, TextIO

from core.auth.passwords import SALT_ROUNDS, hash_password


def parse_credentials(lines: Iterable[str]) -> Iterator[tuple[str, str]]:
    """Yield ``(email, password)`` pairs, skipping blanks and ``#`` comments."""

    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        email, sep, password = line.partition(":")
        if not sep or not email.strip() or not password:
            raise ValueError(f"Line {line_number}: expected 'email:password'")
        yield email.strip(), password


def build_update_statement(email: str, password_hash: str, *, table: str = "users") -> str:
    escaped_email = email.replace("'", "''")
    return f"UPDATE {table} SET password_hash = '{password_hash}' WHERE email = '{escaped_email}';"


def run(source: TextIO, out: TextIO, *, rounds: int = SALT_ROUNDS, table: str = "users") -> int:
    statements: list[str] = []
    out.write("Generating password hashes for demo users...\n")
    out.write("-" * 40 + "\n")

    for email, password in parse_credentials(source):
        password_hash = hash_password(password, rounds=rounds)
        out.write(f"{email}:\n  Hash: {password_hash}\n\n")
        statements.append(build_update_statement(email, password_hash, table=table))

    out.write("-" * 40 + "\n")
    out.write("SQL UPDATE statements:\n\n")
    for statement in statements:
        out.write(statement + "\n")
    return len(statements)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("source", nargs="?", default="-", help="file of email:password lines, '-' for stdin")
    parser.add_argument("--rounds", type=int, default=SALT_ROUNDS, help="bcrypt cost factor")
    parser.add_argument("--table", default="users", help="table holding the password_hash column")
    args = parser.parse_args(argv)

    try:
        if args.source == "-":
            count = run(sys.stdin, sys.stdout, rounds=args.rounds, table=args.table)
        else:
            with open(args.source, encoding="utf-8") as handle:
                count = run(handle, sys.stdout, rounds=args.rounds, table=args.table)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"\n{count} statement(s) generated.", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
