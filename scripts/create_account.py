#!/usr/bin/env python3
from __future__ import annotations

import asyncio
from getpass import getpass

from gate.auth.passwords import CredentialHasher
from gate.auth.users import register
from gate.config import load_settings
from gate.infra.account_repo import AccountRepository


def main() -> None:
    settings = load_settings()
    repo = AccountRepository(settings.accounts_path)
    hasher = CredentialHasher(settings.password_pepper)

    form = {
        "nama": input("Name: "),
        "email": input("Email: "),
        "password": getpass("Password: "),
        "confirmPassword": getpass("Repeat password: "),
    }

    result = asyncio.run(register(form, repo=repo, hasher=hasher, allowed_domains=settings.allowed_domains))
    if not result.ok:
        raise SystemExit("\n".join(result.messages))

    print(f"OK -> {result.account.email} ({settings.accounts_path})")


if __name__ == "__main__":
    main()
