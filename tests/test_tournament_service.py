import asyncio
from datetime import date, timedelta
from uuid import uuid4


def tournament_form(**overrides):
    form = {
        "name": "Summer Slam",
        "description": "Single elimination",
        "weight_class": "light_heavyweight",
        "tier": "Amateur",
        "max_participants": "8",
        "start_date": (date.today() + timedelta(days=14)).isoformat(),
        "end_date": (date.today() + timedelta(days=16)).isoformat(),
        "entry_fee": "0",
        "prize_pool": "500",
    }
    form.update(overrides)
    return form


async def create_tournament(container, make_user, **overrides):
    organiser = make_user()
    result = await container.tournament_service.create_tournament(organiser.identity, tournament_form(**overrides))
    assert result.success, result
    return result.data


async def test_create_tournament(container, make_user, db):
    tournament = await create_tournament(container, make_user)
    assert tournament.status.value == "upcoming"
    assert tournament.current_participants == 0
    assert db.rows("tournaments")[0]["created_by"] == str(tournament.created_by)


async def test_join_registers_and_increments(container, make_user, make_fighter, db):
    tournament = await create_tournament(container, make_user)
    user, fighter = await make_fighter()

    result = await container.tournament_service.join_tournament(user.identity, {"tournament_id": str(tournament.id)})
    assert result.success
    assert result.message == "Successfully joined tournament"
    assert result.data.fighter_id == fighter.id
    assert db.rpc_calls == [("increment_tournament_participants", {"tournament_id": str(tournament.id)})]

    details = await container.tournament_service.get_tournament_details({"tournament_id": str(tournament.id)})
    assert details.data["tournament"].current_participants == 1
    assert [p.fighter_id for p in details.data["participants"]] == [fighter.id]


async def test_join_twice_conflicts(container, make_user, make_fighter):
    tournament = await create_tournament(container, make_user)
    user, _ = await make_fighter()
    raw = {"tournament_id": str(tournament.id)}

    assert (await container.tournament_service.join_tournament(user.identity, raw)).success
    result = await container.tournament_service.join_tournament(user.identity, raw)
    assert result.kind == "conflict"
    assert result.error == "Already joined this tournament"


async def test_concurrent_joins_persist_one_participant(container, make_user, make_fighter, db):
    tournament = await create_tournament(container, make_user)
    user, _ = await make_fighter()
    raw = {"tournament_id": str(tournament.id)}

    results = await asyncio.gather(
        container.tournament_service.join_tournament(user.identity, raw),
        container.tournament_service.join_tournament(user.identity, raw),
    )

    assert sorted(r.success for r in results) == [False, True]
    assert [r.kind for r in results if not r.success] == ["conflict"]
    assert len(db.rows("tournament_participants")) == 1


async def test_concurrent_joins_never_overfill(container, make_user, make_fighter, db):
    tournament = await create_tournament(container, make_user, max_participants="4")
    db.rows("tournaments")[0]["current_participants"] = 3
    users = [(await make_fighter())[0] for _ in range(3)]
    raw = {"tournament_id": str(tournament.id)}

    results = await asyncio.gather(*[
        container.tournament_service.join_tournament(user.identity, raw) for user in users
    ])

    assert sum(r.success for r in results) == 1
    assert {r.error for r in results if not r.success} == {"Tournament is full"}
    assert db.rows("tournaments")[0]["current_participants"] == 4
    assert len(db.rows("tournament_participants")) == 1


async def test_lost_slot_removes_participant_row(container, make_user, make_fighter, db):
    tournament = await create_tournament(container, make_user, max_participants="4")
    user, _ = await make_fighter()

    async def no_slot_left(tournament_id):
        return False

    container.tournament_repo.increment_participants = no_slot_left
    result = await container.tournament_service.join_tournament(user.identity, {"tournament_id": str(tournament.id)})

    assert result.error == "Tournament is full"
    assert db.rows("tournament_participants") == []


async def test_full_tournament_rejects(container, make_user, make_fighter, db):
    tournament = await create_tournament(container, make_user, max_participants="4")
    db.rows("tournaments")[0]["current_participants"] = 4
    user, _ = await make_fighter()

    result = await container.tournament_service.join_tournament(user.identity, {"tournament_id": str(tournament.id)})
    assert result.kind == "conflict"
    assert result.error == "Tournament is full"


async def test_closed_tournament_rejects(container, make_user, make_fighter, db):
    tournament = await create_tournament(container, make_user)
    db.rows("tournaments")[0]["status"] = "active"
    user, _ = await make_fighter()

    result = await container.tournament_service.join_tournament(user.identity, {"tournament_id": str(tournament.id)})
    assert result.error == "Tournament is not open for registration"


async def test_unknown_tournament(container, make_fighter):
    user, _ = await make_fighter()
    result = await container.tournament_service.join_tournament(user.identity, {"tournament_id": str(uuid4())})
    assert result.kind == "not_found"

    details = await container.tournament_service.get_tournament_details({"tournament_id": str(uuid4())})
    assert details.kind == "not_found"


async def test_list_filters_by_status(container, make_user, db):
    await create_tournament(container, make_user, name="Spring Open")
    await create_tournament(container, make_user, name="Autumn Open")
    db.rows("tournaments")[1]["status"] = "completed"

    upcoming = await container.tournament_service.list_tournaments({"status": "upcoming"})
    assert [t.name for t in upcoming.data] == ["Spring Open"]
    everything = await container.tournament_service.list_tournaments({})
    assert len(everything.data) == 2


async def test_tournament_creation_rate_limited(container, make_user):
    organiser = make_user()
    for _ in range(3):
        assert (await container.tournament_service.create_tournament(organiser.identity, tournament_form())).success
    result = await container.tournament_service.create_tournament(organiser.identity, tournament_form())
    assert result.kind == "rate_limited"
    assert result.retry_after > 0
