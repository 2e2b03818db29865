from datetime import datetime, timedelta, timezone

from core.domain.models import UserRole


async def test_non_admin_is_forbidden(container, make_user):
    moderator = make_user(UserRole.MODERATOR)
    result = await container.admin_service.list_users(moderator.identity)
    assert result.kind == "forbidden"


async def test_list_users_search_and_pages(container, make_user):
    admin = make_user(UserRole.ADMIN, email="boss@example.com")
    make_user(email="jab@example.com")
    make_user(email="hook@example.com")

    first = await container.admin_service.list_users(admin.identity, {"page": "1", "limit": "2"})
    assert first.data["total"] == 3
    assert len(first.data["users"]) == 2
    assert first.data["page"] == 1

    second = await container.admin_service.list_users(admin.identity, {"page": "2", "limit": "2"})
    assert len(second.data["users"]) == 1

    found = await container.admin_service.list_users(admin.identity, {"search": "HOOK"})
    assert [u.email for u in found.data["users"]] == ["hook@example.com"]
    assert found.data["total"] == 1


async def test_update_user_role(container, make_user, db):
    admin = make_user(UserRole.ADMIN)
    target = make_user()

    result = await container.admin_service.update_user_role(
        admin.identity, {"user_id": str(target.id), "role": "moderator"}
    )
    assert result.success
    assert result.message == "User role updated successfully"
    assert result.data.role == UserRole.MODERATOR

    missing = await container.admin_service.update_user_role(
        admin.identity, {"user_id": "00000000-0000-0000-0000-000000000001", "role": "admin"}
    )
    assert missing.kind == "not_found"

    bad_role = await container.admin_service.update_user_role(
        admin.identity, {"user_id": str(target.id), "role": "superuser"}
    )
    assert bad_role.kind == "invalid_input"

    await container.audit.flush()
    assert any(r["message"] == "User role updated" for r in db.rows("application_logs"))


async def test_suspend_user_sets_expiry(container, make_user, db):
    fixed = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    container.admin_service.now = lambda: fixed
    admin = make_user(UserRole.ADMIN)
    target = make_user()

    result = await container.admin_service.suspend_user(admin.identity, {
        "user_id": str(target.id),
        "reason": "Repeated unsportsmanlike conduct",
        "duration_days": "7",
    })
    assert result.success, result
    assert result.data.expires_at == fixed + timedelta(days=7)
    assert result.data.suspended_by == admin.id
    assert db.rows("user_suspensions")[0]["status"] == "active"

    short_reason = await container.admin_service.suspend_user(
        admin.identity, {"user_id": str(target.id), "reason": "rude"}
    )
    assert short_reason.kind == "invalid_input"


async def test_permanent_suspension_has_no_expiry(container, make_user):
    admin = make_user(UserRole.ADMIN)
    target = make_user()
    result = await container.admin_service.suspend_user(
        admin.identity, {"user_id": str(target.id), "reason": "Account sharing confirmed"}
    )
    assert result.data.expires_at is None


async def test_system_stats(container, make_user, make_fighter):
    admin = make_user(UserRole.ADMIN)
    user, _ = await make_fighter()
    await container.dispute_service.create_dispute(user.identity, {
        "title": "Wrong opponent",
        "description": "The record lists the wrong opponent for my last bout.",
        "category": "technical",
    })

    result = await container.admin_service.get_system_stats(admin.identity)
    stats = result.data
    assert stats.total_users == 2
    assert stats.recent_users == 2
    assert stats.total_fighters == 1
    assert stats.total_fights == 0
    assert stats.pending_disputes == 1


async def test_settings_update_controls_registration(container, make_user, db):
    admin = make_user(UserRole.ADMIN)
    form = {
        "maintenance_mode": "false",
        "registration_enabled": "false",
        "max_fighters_per_tournament": "16",
        "points_per_win": "12",
    }

    result = await container.admin_service.update_system_settings(admin.identity, form)
    assert result.success, result
    assert result.data.points_per_win == 12
    assert db.rows("system_settings")[0]["id"] == 1

    blocked = await container.auth_service.sign_up({
        "full_name": "New Boxer",
        "email": "new@example.com",
        "password": "Passw0rd!",
        "confirm_password": "Passw0rd!",
    }, ip="10.0.0.1")
    assert blocked.kind == "forbidden"
    assert blocked.error == "Registration is currently disabled"


async def test_settings_bounds(container, make_user):
    admin = make_user(UserRole.ADMIN)
    result = await container.admin_service.update_system_settings(admin.identity, {
        "maintenance_mode": "false",
        "registration_enabled": "true",
        "max_fighters_per_tournament": "128",
        "points_per_win": "10",
    })
    assert result.kind == "invalid_input"
