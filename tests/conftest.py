"""
Shared fixtures: a container wired over FakeSupabase, users with sessions,
and form payload builders.
"""

from datetime import date, datetime, timezone
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from adapters.web.loader import Container
from config.settings import Settings
from core.domain.models import UserRole
from infrastructure.ratelimit import InMemoryCounterStore
from tests.fakes import FakeClock, FakeSupabase


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(
        supabase_url="https://fake.supabase.co",
        supabase_key="anon-key",
        supabase_service_key="service-key",
        redis_url=None,
        env="test",
    )


@pytest.fixture
async def container(db, settings, clock):
    container = Container(settings, db, InMemoryCounterStore(clock), session_client=db)
    container.rate_limiter.enabled = True
    container.rate_limiter.clock = clock
    yield container
    await container.audit.flush()


@pytest.fixture
def make_user(db, container):
    """Auth account + profiles row + live access token"""

    def _make(role: UserRole = UserRole.USER, email: str = None):
        email = email or f"user-{uuid4().hex[:8]}@example.com"
        account = db.auth.add_user(email)
        db.rows("profiles").append({
            "id": account.id,
            "email": email,
            "full_name": "Test User",
            "role": role.value,
            "created_at": datetime.now(timezone.utc).isoformat(),
        })
        token = db.auth.issue_token(account)
        return SimpleNamespace(
            id=UUID(account.id),
            email=email,
            token=token,
            identity=container.identity_for(token),
        )

    return _make


def years_ago(years: int) -> date:
    today = date.today()
    try:
        return today.replace(year=today.year - years)
    except ValueError:  # Feb 29
        return today.replace(year=today.year - years, day=28)


def fighter_form(**overrides) -> dict:
    form = {
        "name": "Rocky Balboa",
        "handle": f"rocky_{uuid4().hex[:6]}",
        "birthday": years_ago(25).isoformat(),
        "hometown": "Philadelphia",
        "stance": "orthodox",
        "height_feet": "5",
        "height_inches": "10",
        "reach": "70",
        "weight": "180",
        "weight_class": "light_heavyweight",
        "trainer": "Mickey",
        "gym": "Mighty Mick's",
    }
    form.update(overrides)
    return form


def fight_form(**overrides) -> dict:
    form = {
        "opponent_name": "Apollo Creed",
        "result": "Win",
        "method": "KO",
        "round": "3",
        "date": date.today().isoformat(),
        "location": "Philadelphia",
        "weight_class": "light_heavyweight",
        "points_earned": "10",
    }
    form.update(overrides)
    return form


@pytest.fixture
def make_fighter(container, make_user):
    """User with a fighter profile; returns (user, fighter)"""

    async def _make(role: UserRole = UserRole.USER, **overrides):
        user = make_user(role)
        result = await container.fighter_service.create_fighter_profile(user.identity, fighter_form(**overrides))
        assert result.success, result
        return user, result.data

    return _make
