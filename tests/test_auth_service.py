from unittest.mock import AsyncMock
from uuid import UUID

from core.domain.errors import PersistenceFailure
from core.domain.models import UserRole

PASSWORD = "Passw0rd!"


def register_form(email="new@example.com", **overrides):
    form = {
        "full_name": "New Boxer",
        "email": email,
        "password": PASSWORD,
        "confirm_password": PASSWORD,
    }
    form.update(overrides)
    return form


async def test_sign_in_returns_session(container, make_user):
    user = make_user(email="champ@example.com")
    result = await container.auth_service.sign_in(
        {"email": "Champ@Example.com", "password": PASSWORD}, ip="10.0.0.1"
    )
    assert result.success, result
    assert result.message == "Signed in successfully"
    assert result.data["user"].id == user.id
    assert result.data["access_token"].startswith("token-")


async def test_bad_credentials_are_audited(container, make_user, db):
    make_user(email="champ@example.com")
    result = await container.auth_service.sign_in(
        {"email": "champ@example.com", "password": "WrongPass1"}, ip="10.0.0.2"
    )
    assert result.kind == "unauthenticated"
    assert result.error == "Invalid credentials"

    await container.audit.flush()
    events = [r for r in db.rows("application_logs") if r["level"] == "security"]
    assert events[0]["message"] == "Sign in failed"
    assert events[0]["meta"]["ip"] == "10.0.0.2"


async def test_sign_up_creates_user_profile(container, db):
    result = await container.auth_service.sign_up(register_form(), ip="10.0.0.3")
    assert result.success, result
    assert result.message == "Account created successfully"

    profile = await container.profile_repo.get_by_id(result.data["user"].id)
    assert profile.email == "new@example.com"
    assert profile.role == UserRole.USER


async def test_sign_in_repairs_missing_profile(container, db, monkeypatch):
    monkeypatch.setattr(
        container.profile_repo, "upsert", AsyncMock(side_effect=PersistenceFailure("connection reset"))
    )
    result = await container.auth_service.sign_up(register_form("half@example.com"), ip="10.0.0.5")
    assert result.kind == "persistence_failure"
    assert db.rows("profiles") == []
    monkeypatch.undo()

    result = await container.auth_service.sign_in(
        {"email": "half@example.com", "password": PASSWORD}, ip="10.0.0.5"
    )
    assert result.success, result

    profile = await container.profile_repo.get_by_id(result.data["user"].id)
    assert profile.email == "half@example.com"
    assert profile.role == UserRole.USER


async def test_duplicate_email_conflicts(container, make_user):
    make_user(email="taken@example.com")
    result = await container.auth_service.sign_up(register_form("taken@example.com"), ip="10.0.0.4")
    assert result.kind == "conflict"
    assert result.error == "An account with this email already exists"


async def test_sign_up_validation(container):
    mismatch = await container.auth_service.sign_up(
        register_form(confirm_password="Passw0rd?"), ip="10.0.0.5"
    )
    assert mismatch.kind == "invalid_input"
    assert "confirm_password" in mismatch.details

    weak = await container.auth_service.sign_up(
        register_form(password="password", confirm_password="password"), ip="10.0.0.5"
    )
    assert "password" in weak.details


async def test_sign_out(container, make_user, db):
    user = make_user()
    result = await container.auth_service.sign_out(user.token)
    assert result.success
    assert db.auth.admin.signed_out == [user.token]

    assert (await container.auth_service.sign_out("")).kind == "unauthenticated"


async def test_auth_attempts_limited_per_ip(container, make_user):
    make_user(email="champ@example.com")
    form = {"email": "champ@example.com", "password": "WrongPass1"}

    for _ in range(5):
        result = await container.auth_service.sign_in(form, ip="10.0.0.9")
        assert result.kind == "unauthenticated"

    limited = await container.auth_service.sign_in(form, ip="10.0.0.9")
    assert limited.kind == "rate_limited"
    assert limited.retry_after > 0

    other_ip = await container.auth_service.sign_in(form, ip="10.0.0.10")
    assert other_ip.kind == "unauthenticated"
