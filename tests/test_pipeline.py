from uuid import uuid4

import pytest

from core.domain.errors import Conflict, ExternalTimeout, PersistenceFailure
from core.domain.models import ActionResult, AuthUser, Profile, UserRole
from core.domain.schemas import DisputeQuery, TournamentJoinForm
from core.services.audit import AuditLogger
from core.services.pipeline import ActionPipeline
from core.services.rate_limiter import RateLimiter
from infrastructure.ratelimit import InMemoryCounterStore
from tests.fakes import FakeClock, StaticIdentity


class ProfileRepo:
    def __init__(self, profiles=()):
        self.profiles = {p.id: p for p in profiles}

    async def get_by_id(self, user_id):
        return self.profiles.get(user_id)


@pytest.fixture
def user():
    return AuthUser(id=uuid4(), email="fighter@example.com")


def make_pipeline(*profiles):
    clock = FakeClock()
    limiter = RateLimiter(InMemoryCounterStore(clock), enabled=True, clock=clock)
    return ActionPipeline(limiter, AuditLogger(None), ProfileRepo(profiles))


async def ok_handler(user, record):
    return ActionResult.ok("done", {"user": str(user.id) if user else None})


async def test_unauthenticated_caller_rejected_before_validation():
    calls = []

    async def handler(user, record):
        calls.append(record)
        return ActionResult.ok("done")

    result = await make_pipeline().run("join", StaticIdentity(None), TournamentJoinForm, {}, "tournament", handler)
    assert not result.success
    assert result.kind == "unauthenticated"
    assert calls == []


async def test_validation_failure_lists_fields(user):
    result = await make_pipeline().run(
        "join", StaticIdentity(user), TournamentJoinForm, {"tournament_id": "nope"}, "tournament", ok_handler
    )
    assert result.kind == "invalid_input"
    assert result.error == "Invalid input"
    assert set(result.details) == {"tournament_id"}


async def test_role_check(user):
    pipeline = make_pipeline(Profile(id=user.id, role=UserRole.USER))
    result = await pipeline.query("stats", ok_handler, identity=StaticIdentity(user), roles=(UserRole.ADMIN,))
    assert result.kind == "forbidden"

    pipeline = make_pipeline(Profile(id=user.id, role=UserRole.ADMIN))
    result = await pipeline.query("stats", ok_handler, identity=StaticIdentity(user), roles=(UserRole.ADMIN,))
    assert result.success


async def test_rate_limit_after_policy_max(user):
    pipeline = make_pipeline()
    raw = {"tournament_id": str(uuid4())}
    for _ in range(3):
        result = await pipeline.run("join", StaticIdentity(user), TournamentJoinForm, raw, "tournament", ok_handler)
        assert result.success

    result = await pipeline.run("join", StaticIdentity(user), TournamentJoinForm, raw, "tournament", ok_handler)
    assert result.kind == "rate_limited"
    assert result.retry_after >= 1


async def test_invalid_input_does_not_consume_rate_limit(user):
    pipeline = make_pipeline()
    for _ in range(5):
        await pipeline.run("join", StaticIdentity(user), TournamentJoinForm, {}, "tournament", ok_handler)
    result = await pipeline.run(
        "join", StaticIdentity(user), TournamentJoinForm, {"tournament_id": str(uuid4())}, "tournament", ok_handler
    )
    assert result.success


@pytest.mark.parametrize("error, kind, message", [
    (Conflict("Already joined this tournament"), "conflict", "Already joined this tournament"),
    (PersistenceFailure("23503: fk violation", "repo.create"), "persistence_failure",
     "A storage error occurred. Please try again later."),
    (ExternalTimeout("repo.create"), "timeout", "The service took too long to respond. Please try again."),
    (KeyError("secret column"), "unexpected_error", "An unexpected error occurred"),
])
async def test_errors_become_results_without_raw_text(user, error, kind, message):
    async def handler(user, record):
        raise error

    result = await make_pipeline().run("act", StaticIdentity(user), None, None, "api", handler)
    assert not result.success
    assert result.kind == kind
    assert result.error == message
    assert "secret" not in result.model_dump_json()
    assert "23503" not in result.model_dump_json()


async def test_query_without_identity_validates_filters():
    result = await make_pipeline().query("list", ok_handler, schema=DisputeQuery, raw={"status": "bogus"})
    assert result.kind == "invalid_input"

    result = await make_pipeline().query("list", ok_handler, schema=DisputeQuery, raw={"status": ""})
    assert result.success


async def test_anonymous_actions_limited_per_identifier():
    pipeline = make_pipeline()
    for _ in range(5):
        assert (await pipeline.run_anonymous("sign_in", "1.2.3.4", None, None, "auth", ok_handler)).success
    assert (await pipeline.run_anonymous("sign_in", "1.2.3.4", None, None, "auth", ok_handler)).kind == "rate_limited"
    assert (await pipeline.run_anonymous("sign_in", "5.6.7.8", None, None, "auth", ok_handler)).success
