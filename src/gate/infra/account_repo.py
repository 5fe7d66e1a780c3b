# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Account documents stored in a YAML file.

Layout::

    version: 1
    accounts:
      alice@example.com:
        name: Alice
        password_hash: $argon2id$...
        created_at: 2026-01-01T00:00:00+00:00
        updated_at: 2026-01-01T00:00:00+00:00

The email (trimmed, lower-cased) is the document key, so it is unique.
Records are only ever inserted.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from gate.errors import DuplicateEmail, InvalidInput

logger = logging.getLogger(__name__)

STORE_VERSION = 1


def normalize_email(email: str) -> str:
    return str(email or "").strip().lower()


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass(frozen=True)
class AccountRecord:
    name: str
    email: str
    password_hash: str
    created_at: str
    updated_at: str


def _parse_accounts(raw: Any) -> Dict[str, AccountRecord]:
    accounts = (raw.get("accounts") or {}) if isinstance(raw, dict) else {}
    out: Dict[str, AccountRecord] = {}
    if not isinstance(accounts, dict):
        return out
    for key, doc in accounts.items():
        if not isinstance(doc, dict):
            continue
        email = normalize_email(key)
        if not email:
            continue
        out[email] = AccountRecord(
            name=str(doc.get("name") or "").strip(),
            email=email,
            password_hash=str(doc.get("password_hash") or "").strip(),
            created_at=str(doc.get("created_at") or ""),
            updated_at=str(doc.get("updated_at") or ""),
        )
    return out


class AccountRepository:
    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._cache: Tuple[float, Dict[str, AccountRecord]] = (0.0, {})

    def _mtime(self) -> float:
        try:
            return self.path.stat().st_mtime
        except FileNotFoundError:
            return 0.0

    def _load(self) -> Dict[str, AccountRecord]:
        mtime = self._mtime()
        cached_mtime, cached = self._cache
        if mtime and mtime == cached_mtime:
            return cached
        if not mtime:
            return {}
        raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        accounts = _parse_accounts(raw)
        self._cache = (mtime, accounts)
        return accounts

    def _write(self, accounts: Dict[str, AccountRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        doc = {
            "version": STORE_VERSION,
            "accounts": {
                email: {k: v for k, v in asdict(rec).items() if k != "email"}
                for email, rec in accounts.items()
            },
        }
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(yaml.safe_dump(doc, sort_keys=False, allow_unicode=True), encoding="utf-8")
        os.replace(tmp, self.path)
        # Drop the cache: mtime resolution may not distinguish two quick writes.
        self._cache = (0.0, {})

    def find_by_email(self, email: str) -> Optional[AccountRecord]:
        key = normalize_email(email)
        if not key:
            return None
        return self._load().get(key)

    def count(self) -> int:
        return len(self._load())

    def insert(self, name: str, email: str, password_hash: str) -> AccountRecord:
        """Create a new account. Raises DuplicateEmail if the email is taken."""
        key = normalize_email(email)
        if not key:
            raise InvalidInput("Account email cannot be empty")
        if not password_hash:
            raise InvalidInput("Account password hash cannot be empty")

        with self._lock:
            self._cache = (0.0, {})
            accounts = dict(self._load())
            if key in accounts:
                raise DuplicateEmail(key)
            now = _utcnow()
            record = AccountRecord(
                name=str(name or "").strip(),
                email=key,
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
            accounts[key] = record
            self._write(accounts)

        logger.info("Account created for %s", key)
        return record
