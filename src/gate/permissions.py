# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Request

from gate.auth.session import verify_session
from gate.config import Settings
from gate.infra.account_repo import AccountRepository


@dataclass(frozen=True)
class CurrentUser:
    email: str
    name: str


def load_user_from_request(request: Request) -> Optional[CurrentUser]:
    settings: Settings = request.app.state.settings
    token = request.cookies.get(settings.cookie_name, "")
    sess = verify_session(token, secret=settings.secret_key, max_age=settings.session_max_age)
    if not sess:
        return None
    repo: AccountRepository = request.app.state.accounts
    account = repo.find_by_email(sess.email)
    if not account:
        return None
    return CurrentUser(email=account.email, name=account.name)


def current_user_optional(request: Request) -> Optional[CurrentUser]:
    u = getattr(request.state, "user", None)
    if u is not None:
        return u
    return load_user_from_request(request)


def require_user(request: Request) -> CurrentUser:
    u = current_user_optional(request)
    if u:
        return u
    next_url = str(request.url.path)
    if request.url.query:
        next_url += "?" + request.url.query
    raise HTTPException(status_code=303, headers={"Location": f"/login?next={next_url}"})


def cookie_settings(settings: Settings) -> dict:
    return {"httponly": True, "samesite": "lax", "secure": settings.cookie_secure}
