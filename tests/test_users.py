import asyncio
import logging

from argon2 import PasswordHasher

from gate.auth.users import EMAIL_EXISTS, EMAIL_NOT_FOUND, WRONG_PASSWORD, login, register
from gate.core.password_policy import POLICY_MESSAGE

STRONG_PASSWORD = "Str0ng!pass"


def _register(form, repo, hasher, **kw):
    return asyncio.run(register(form, repo=repo, hasher=hasher, **kw))


def _login(form, repo, hasher):
    return asyncio.run(login(form, repo=repo, hasher=hasher))


def test_register_creates_account(repo, hasher, signup_form):
    result = _register(signup_form, repo, hasher)
    assert result.ok
    assert result.account.email == "alice@mail.com"
    assert result.account.name == "Alice"
    stored = repo.find_by_email("alice@mail.com")
    assert hasher.verify_password(STRONG_PASSWORD, stored.password_hash)


def test_register_requires_name(repo, hasher, signup_form):
    signup_form.pop("nama")
    result = _register(signup_form, repo, hasher)
    assert not result.ok
    assert result.messages == ["Nama is required"]
    assert repo.count() == 0


def test_register_rejects_weak_and_mismatched_password(repo, hasher, signup_form):
    signup_form.update(password="weak", confirmPassword="other")
    result = _register(signup_form, repo, hasher)
    assert result.messages == [POLICY_MESSAGE, "Password confirmation does not match"]


def test_register_duplicate_email(repo, hasher, signup_form):
    assert _register(signup_form, repo, hasher).ok
    signup_form["email"] = "ALICE@mail.com"
    result = _register(signup_form, repo, hasher)
    assert not result.ok
    assert result.messages == [EMAIL_EXISTS]


def test_register_allowed_domains(repo, hasher, signup_form):
    result = _register(signup_form, repo, hasher, allowed_domains=("corp.com",))
    assert result.messages == ["Email must use one of the following domains: corp.com"]


def test_login_success(repo, hasher, signup_form):
    _register(signup_form, repo, hasher)
    result = _login({"email": "alice@mail.com", "password": STRONG_PASSWORD}, repo, hasher)
    assert result.ok
    assert result.account.name == "Alice"


def test_login_requires_fields(repo, hasher):
    result = _login({}, repo, hasher)
    assert result.messages == ["Email is required", "Password is required"]


def test_login_unknown_email(repo, hasher):
    result = _login({"email": "ghost@mail.com", "password": STRONG_PASSWORD}, repo, hasher)
    assert result.messages == [EMAIL_NOT_FOUND]


def test_login_wrong_password(repo, hasher, signup_form):
    _register(signup_form, repo, hasher)
    result = _login({"email": "alice@mail.com", "password": "Wr0ng!pass"}, repo, hasher)
    assert result.messages == [WRONG_PASSWORD]


def test_login_non_string_password_is_compared_as_text(repo, hasher, signup_form):
    _register(signup_form, repo, hasher)
    result = _login({"email": "alice@mail.com", "password": 12345678}, repo, hasher)
    assert result.messages == [WRONG_PASSWORD]


def test_login_flags_outdated_hash_parameters(repo, hasher, caplog):
    cheap = PasswordHasher(time_cost=1, memory_cost=8 * 1024, parallelism=1)
    repo.insert("Alice", "alice@mail.com", cheap.hash(hasher.derive_pepper(STRONG_PASSWORD)))

    with caplog.at_level(logging.WARNING, logger="gate.auth.users"):
        result = _login({"email": "alice@mail.com", "password": STRONG_PASSWORD}, repo, hasher)

    assert result.ok
    assert "outdated cost parameters" in caplog.text
    assert STRONG_PASSWORD not in caplog.text


def test_login_current_hash_is_not_flagged(repo, hasher, signup_form, caplog):
    _register(signup_form, repo, hasher)
    with caplog.at_level(logging.WARNING, logger="gate.auth.users"):
        assert _login({"email": "alice@mail.com", "password": STRONG_PASSWORD}, repo, hasher).ok
    assert "outdated" not in caplog.text
