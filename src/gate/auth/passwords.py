# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Password hashing with a server-side pepper.

The password is first run through HMAC-SHA256 keyed with the pepper, then the
hex digest is hashed with Argon2id. A leaked account store alone (hashes and
salts) is not enough to brute-force passwords without the pepper.

Argon2 is CPU and memory bound. Inside request handlers use the ``*_async``
variants so the work happens in the threadpool instead of the event loop.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from fastapi.concurrency import run_in_threadpool

from gate.errors import ConfigurationMissing, InvalidInput

logger = logging.getLogger(__name__)

# Fixed cost parameters; changing them makes needs_rehash() true for old hashes.
TIME_COST = 3
MEMORY_COST = 64 * 1024  # KiB
PARALLELISM = 4

HASH_ALGORITHM = "sha256"

DEFAULT_TOKEN_BYTES = 32


class CredentialHasher:
    def __init__(self, pepper: str):
        if not pepper:
            raise ConfigurationMissing("Password pepper is not configured")
        self._key = pepper.encode("utf-8")
        self._ph = PasswordHasher(time_cost=TIME_COST, memory_cost=MEMORY_COST, parallelism=PARALLELISM)

    def derive_pepper(self, password: str) -> str:
        """HMAC the plaintext with the pepper key. Same input, same digest."""
        if not isinstance(password, str) or not password:
            raise InvalidInput("Password cannot be empty")
        return hmac.new(self._key, password.encode("utf-8"), getattr(hashlib, HASH_ALGORITHM)).hexdigest()

    def hash_password(self, password: str) -> str:
        return self._ph.hash(self.derive_pepper(password))

    @staticmethod
    def _check_encoded(stored_hash: str) -> None:
        if not isinstance(stored_hash, str) or not stored_hash:
            raise InvalidInput("Stored hash is empty")
        # Encoded argon2 hashes are pure ASCII.
        if not stored_hash.isascii():
            raise InvalidInput("Stored hash is malformed")

    def verify_password(self, password: str, stored_hash: str) -> bool:
        """True iff ``password`` matches ``stored_hash``. Malformed hashes raise InvalidInput."""
        self._check_encoded(stored_hash)
        digest = self.derive_pepper(password)
        try:
            return self._ph.verify(stored_hash, digest)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as exc:
            # Anything other than a plain mismatch means the hash could not be decoded.
            raise InvalidInput("Stored hash is malformed") from exc

    def needs_rehash(self, stored_hash: str) -> bool:
        self._check_encoded(stored_hash)
        try:
            return self._ph.check_needs_rehash(stored_hash)
        except InvalidHashError as exc:
            raise InvalidInput("Stored hash is malformed") from exc

    async def hash_password_async(self, password: str) -> str:
        return await run_in_threadpool(self.hash_password, password)

    async def verify_password_async(self, password: str, stored_hash: str) -> bool:
        return await run_in_threadpool(self.verify_password, password, stored_hash)


def generate_token(byte_length: int = DEFAULT_TOKEN_BYTES) -> str:
    """Hex-encoded random token of ``byte_length`` bytes."""
    if isinstance(byte_length, bool) or not isinstance(byte_length, int) or byte_length <= 0:
        raise InvalidInput("Token length must be a positive integer")
    return secrets.token_hex(byte_length)
