# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Sign-up and login flows: validate, then hash or verify, then store or look up."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from gate.auth.passwords import CredentialHasher
from gate.core.validation import ValidationOutcome, ValidationSettings, validate
from gate.errors import DuplicateEmail
from gate.infra.account_repo import AccountRecord, AccountRepository, normalize_email

logger = logging.getLogger(__name__)

SIGNUP_FIELDS: Sequence[str] = ("nama", "email", "password")
CONFIRM_FIELD = "confirmPassword"

EMAIL_EXISTS = "Email already exists"
EMAIL_NOT_FOUND = "Email not found"
WRONG_PASSWORD = "Incorrect password"


@dataclass(frozen=True)
class AuthResult:
    outcome: ValidationOutcome
    account: Optional[AccountRecord] = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.account is not None

    @property
    def messages(self):
        if self.error:
            return [self.error]
        return list(self.outcome.messages)


def signup_settings(allowed_domains: Sequence[str] = ()) -> ValidationSettings:
    return ValidationSettings(password_match_field=CONFIRM_FIELD, allowed_domains=tuple(allowed_domains))


# Strength is enforced at sign-up; at login only presence and email syntax matter.
LOGIN_SETTINGS = ValidationSettings(validate_password=False)


async def register(
    form: Mapping[str, Any],
    *,
    repo: AccountRepository,
    hasher: CredentialHasher,
    allowed_domains: Sequence[str] = (),
) -> AuthResult:
    outcome = validate(form, SIGNUP_FIELDS, signup_settings(allowed_domains))
    if not outcome.is_valid:
        logger.debug("Sign-up rejected: %d validation message(s)", len(outcome.messages))
        return AuthResult(outcome=outcome)

    email = normalize_email(outcome.data["email"])
    if repo.find_by_email(email) is not None:
        return AuthResult(outcome=outcome, error=EMAIL_EXISTS)

    password_hash = await hasher.hash_password_async(outcome.data["password"])
    try:
        account = repo.insert(outcome.data["nama"], email, password_hash)
    except DuplicateEmail:
        # Lost a race with a concurrent sign-up for the same address.
        return AuthResult(outcome=outcome, error=EMAIL_EXISTS)
    return AuthResult(outcome=outcome, account=account)


async def login(form: Mapping[str, Any], *, repo: AccountRepository, hasher: CredentialHasher) -> AuthResult:
    outcome = validate(form, None, LOGIN_SETTINGS)
    if not outcome.is_valid:
        return AuthResult(outcome=outcome)

    account = repo.find_by_email(outcome.data["email"])
    if account is None:
        return AuthResult(outcome=outcome, error=EMAIL_NOT_FOUND)

    if not await hasher.verify_password_async(str(outcome.data["password"]), account.password_hash):
        logger.info("Failed login for %s", account.email)
        return AuthResult(outcome=outcome, error=WRONG_PASSWORD)

    # Records are never rewritten here.
    if hasher.needs_rehash(account.password_hash):
        logger.warning("Stored hash for %s uses outdated cost parameters", account.email)

    return AuthResult(outcome=outcome, account=account)
