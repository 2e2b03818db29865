from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

from core.domain.models import FighterProfile, FightMethod, FightRecord, FightResult, Tier, WeightClass
from core.services.rankings import build_rankings, current_streak, form_score, recent_form, tier_for_points


def fighter(name, **stats):
    return FighterProfile(
        id=uuid4(),
        user_id=uuid4(),
        name=name,
        handle=name.lower(),
        weight_class=WeightClass.MIDDLEWEIGHT,
        **stats,
    )


def record(fighter_id, result, days_ago, method=FightMethod.DECISION):
    return FightRecord(
        id=uuid4(),
        fighter_id=fighter_id,
        opponent_name="Opponent",
        result=result,
        method=method,
        date=date.today() - timedelta(days=days_ago),
        weight_class=WeightClass.MIDDLEWEIGHT,
        created_at=datetime.now(timezone.utc),
    )


def test_tier_thresholds():
    assert tier_for_points(0) == Tier.AMATEUR
    assert tier_for_points(29) == Tier.AMATEUR
    assert tier_for_points(30) == Tier.SEMI_PRO
    assert tier_for_points(70) == Tier.PRO
    assert tier_for_points(140) == Tier.CONTENDER
    assert tier_for_points(280) == Tier.ELITE
    assert tier_for_points(10_000) == Tier.ELITE


def test_points_rank_first():
    low = fighter("Low", points=10, ko_percentage=100.0)
    high = fighter("High", points=50)
    entries = build_rankings([low, high], [])
    assert [e.name for e in entries] == ["High", "Low"]
    assert [e.rank for e in entries] == [1, 2]


def test_ko_percentage_breaks_points_tie():
    a = fighter("A", points=40, ko_percentage=20.0)
    b = fighter("B", points=40, ko_percentage=60.0)
    assert [e.name for e in build_rankings([a, b], [])] == ["B", "A"]


def test_recent_form_breaks_remaining_tie():
    a = fighter("A", points=30)
    b = fighter("B", points=30)
    records = [
        record(a.id, FightResult.LOSS, 1),
        record(a.id, FightResult.WIN, 10),
        record(b.id, FightResult.WIN, 1),
        record(b.id, FightResult.LOSS, 10),
    ]
    entries = build_rankings([a, b], records)
    assert [e.name for e in entries] == ["B", "A"]
    assert entries[0].recent_form == ["W", "L"]
    assert entries[1].recent_form == ["L", "W"]


def test_win_percentage_is_last_tiebreaker():
    a = fighter("A", points=30, win_percentage=40.0)
    b = fighter("B", points=30, win_percentage=80.0)
    assert [e.name for e in build_rankings([a, b], [])] == ["B", "A"]


def test_records_are_sorted_newest_first_regardless_of_input_order():
    f = fighter("F", points=5)
    records = [
        record(f.id, FightResult.LOSS, 30),
        record(f.id, FightResult.WIN, 2),
        record(f.id, FightResult.WIN, 1),
    ]
    entry = build_rankings([f], records)[0]
    assert entry.recent_form == ["W", "W", "L"]
    assert entry.current_streak == 2


def test_form_and_streak_helpers():
    fid = uuid4()
    losses = [record(fid, FightResult.LOSS, d) for d in range(1, 4)]
    assert current_streak(losses) == -3
    assert current_streak([record(fid, FightResult.DRAW, 1)] + losses) == 0
    assert current_streak([]) == 0
    assert recent_form([record(fid, FightResult.WIN, d) for d in range(1, 8)]) == ["W"] * 5
    assert form_score(["W", "D", "L"]) == 3 * 5 + 1 * 4


def test_earned_tier_reported_alongside_stored_tier():
    f = fighter("F", points=150, tier=Tier.AMATEUR)
    entry = build_rankings([f], [])[0]
    assert entry.tier == Tier.AMATEUR
    assert entry.earned_tier == Tier.CONTENDER
