# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from markupsafe import Markup
from starlette.exceptions import HTTPException as StarletteHTTPException

from gate import __version__
from gate.auth.passwords import CredentialHasher
from gate.auth.session import sign_session
from gate.auth.users import login as login_flow
from gate.auth.users import register
from gate.config import Settings, load_settings
from gate.core.sanitize import FieldKind, field_kind
from gate.infra.account_repo import AccountRecord, AccountRepository
from gate.logging_setup import configure_logging
from gate.permissions import CurrentUser, cookie_settings, current_user_optional, require_user

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "same-origin",
}

router = APIRouter()


def _render(request: Request, template_name: str, ctx: Optional[dict] = None, status_code: int = 200):
    """TemplateResponse wrapper injecting the current user."""
    base_ctx = {"current_user": getattr(request.state, "user", None)}
    return templates.TemplateResponse(request, template_name, {**base_ctx, **(ctx or {})}, status_code=status_code)


def _form_echo(data: Dict[str, Any]) -> Dict[str, str]:
    """Values to refill a form with. Passwords are never sent back."""
    out: Dict[str, str] = {}
    for key, value in (data or {}).items():
        if field_kind(key) is FieldKind.PASSWORD_BEARING or not isinstance(value, str):
            continue
        # Stored values are escaped; the template escapes again on output.
        out[key] = Markup(value).unescape()
    return out


def _safe_next(next_url: str) -> str:
    n = (next_url or "").strip()
    if not n.startswith("/") or n.startswith("//"):
        return "/protected-page"
    return n


async def _read_form(request: Request) -> Dict[str, Any]:
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            logger.debug("Ignoring unparseable JSON body on %s", request.url.path)
            return {}
        if not isinstance(body, dict):
            return {}
        # Forms carry text only; JSON scalars become strings, nested values are dropped.
        return {
            k: v if isinstance(v, str) or v is None else str(v)
            for k, v in body.items()
            if not isinstance(v, (dict, list))
        }
    form = await request.form()
    return {k: v for k, v in form.items() if isinstance(v, str)}


def _start_session(request: Request, account: AccountRecord, url: str) -> RedirectResponse:
    settings: Settings = request.app.state.settings
    token = sign_session(account.email, account.name, secret=settings.secret_key)
    resp = RedirectResponse(url=url, status_code=303)
    resp.set_cookie(
        settings.cookie_name,
        token,
        max_age=settings.session_max_age,
        **cookie_settings(settings),
    )
    return resp


# ------------------ Routes ------------------


@router.get("/", response_class=PlainTextResponse)
def index():
    return "Hello World"


@router.get("/health")
def health():
    return {"status": "UP", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/signup", response_class=HTMLResponse)
def signup_get(request: Request):
    return _render(request, "signup.html", {"title": "Sign Up", "messages": [], "data": {}})


@router.post("/signup")
async def signup_post(request: Request):
    form = await _read_form(request)
    settings: Settings = request.app.state.settings
    result = await register(
        form,
        repo=request.app.state.accounts,
        hasher=request.app.state.hasher,
        allowed_domains=settings.allowed_domains,
    )
    if not result.ok:
        ctx = {"title": "Sign Up", "messages": result.messages, "data": _form_echo(result.outcome.data)}
        return _render(request, "signup.html", ctx, status_code=400)
    return _start_session(request, result.account, "/protected-page")


@router.get("/login", response_class=HTMLResponse)
def login_get(request: Request, next: str = "/protected-page"):
    if getattr(request.state, "user", None):
        return RedirectResponse(url=_safe_next(next), status_code=303)
    return _render(request, "login.html", {"title": "Login", "next": next, "messages": [], "data": {}})


@router.post("/login")
async def login_post(request: Request):
    form = await _read_form(request)
    next_url = str(form.pop("next", "") or "/protected-page")
    result = await login_flow(form, repo=request.app.state.accounts, hasher=request.app.state.hasher)
    if not result.ok:
        ctx = {
            "title": "Login",
            "next": next_url,
            "messages": result.messages,
            "data": _form_echo(result.outcome.data),
        }
        return _render(request, "login.html", ctx, status_code=400)
    return _start_session(request, result.account, _safe_next(next_url))


@router.api_route("/logout", methods=["GET", "POST"])
def logout(request: Request):
    settings: Settings = request.app.state.settings
    resp = RedirectResponse(url="/login", status_code=303)
    resp.delete_cookie(settings.cookie_name)
    return resp


@router.get("/protected-page", response_class=HTMLResponse)
def protected_page(request: Request, user: CurrentUser = Depends(require_user)):
    name = Markup(user.name).unescape()
    return _render(request, "protected_page.html", {"title": "Protected Page", "message": f"Welcome {name}"})


# ------------------ App factory ------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info("gate %s starting (env=%s)", __version__, settings.environment)
    logger.info("  accounts = %s", settings.accounts_path)
    if not settings.is_production and not settings.cookie_secure:
        logger.info("  session cookie is not marked Secure (development)")
    yield
    logger.info("gate shutting down")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application. Settings are loaded from the environment unless given."""
    settings = settings or load_settings()
    configure_logging(settings.log_level, settings.log_file)

    app = FastAPI(title="gate", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.accounts = AccountRepository(settings.accounts_path)
    app.state.hasher = CredentialHasher(settings.password_pepper)

    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

    @app.middleware("http")
    async def _auth_middleware(request: Request, call_next):
        request.state.user = current_user_optional(request)
        return await call_next(request)

    @app.middleware("http")
    async def _security_headers(request: Request, call_next):
        response = await call_next(request)
        for key, value in SECURITY_HEADERS.items():
            response.headers.setdefault(key, value)
        return response

    @app.middleware("http")
    async def _request_log(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and "text/html" in request.headers.get("accept", ""):
            return _render(request, "error.html", {"title": "Page Not Found", "message": "Page not found"}, 404)
        return await http_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        if "application/json" in request.headers.get("accept", ""):
            return JSONResponse({"detail": "Internal error"}, status_code=500)
        return _render(request, "error.html", {"title": "Error", "message": "Internal error"}, 500)

    app.include_router(router)
    return app
