import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from gate.app import create_app
from gate.auth.passwords import CredentialHasher
from gate.config import Settings
from gate.infra.account_repo import AccountRepository

STRONG_PASSWORD = "Str0ng!pass"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        environment="test",
        secret_key="test-secret-key",
        password_pepper="test-pepper",
        accounts_path=tmp_path / "data" / "accounts.yml",
        cookie_secure=False,
        log_level="DEBUG",
    )


@pytest.fixture()
def hasher(settings: Settings) -> CredentialHasher:
    return CredentialHasher(settings.password_pepper)


@pytest.fixture()
def repo(settings: Settings) -> AccountRepository:
    return AccountRepository(settings.accounts_path)


@pytest.fixture()
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app, follow_redirects=False)


@pytest.fixture()
def signup_form() -> dict:
    """A sign-up submission that passes every check."""
    return {
        "nama": "Alice",
        "email": "Alice@Mail.com",
        "password": STRONG_PASSWORD,
        "confirmPassword": STRONG_PASSWORD,
    }
