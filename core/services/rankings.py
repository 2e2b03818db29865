"""
Rankings - leaderboard ordering with tiebreakers.

Order: points, KO %, recent form, win %. Recent form is the last five
results (most recent first) scored W=3, D=1, L=0, with more recent fights
weighted higher.
"""

from collections import defaultdict
from typing import Dict, Iterable, List
from uuid import UUID

from core.domain.constants import RECENT_FORM_SIZE, STREAK_LOOKBACK, TIER_THRESHOLDS
from core.domain.models import FighterProfile, FightRecord, FightResult, RankingEntry, Tier

FORM_LETTER = {FightResult.WIN: "W", FightResult.LOSS: "L", FightResult.DRAW: "D"}
FORM_VALUE = {"W": 3, "D": 1, "L": 0}


def tier_for_points(points: int) -> Tier:
    """Tier earned by points alone. Champion is awarded, never earned."""
    for threshold, tier_name in TIER_THRESHOLDS:
        if points >= threshold:
            return Tier(tier_name)
    return Tier.AMATEUR


def recent_form(records: List[FightRecord]) -> List[str]:
    return [FORM_LETTER[r.result] for r in records[:RECENT_FORM_SIZE]]


def form_score(form: List[str]) -> int:
    return sum(FORM_VALUE[letter] * (RECENT_FORM_SIZE - i) for i, letter in enumerate(form))


def current_streak(records: List[FightRecord]) -> int:
    """+n for n straight wins, -n for n straight losses, 0 when the latest is a draw"""
    streak = 0
    streak_result = None
    for record in records[:STREAK_LOOKBACK]:
        if streak_result is None:
            streak_result = record.result
        elif record.result != streak_result:
            break
        streak += 1

    if streak_result == FightResult.WIN:
        return streak
    if streak_result == FightResult.LOSS:
        return -streak
    return 0


def _sort_key(entry: RankingEntry):
    return (
        -entry.points,
        -entry.ko_percentage,
        -form_score(entry.recent_form),
        -entry.win_percentage,
    )


def build_rankings(fighters: Iterable[FighterProfile], records: Iterable[FightRecord]) -> List[RankingEntry]:
    """
    Rank fighters. ``records`` may come in any order; they are grouped per
    fighter and sorted newest first before form and streak are derived.
    """
    by_fighter: Dict[UUID, List[FightRecord]] = defaultdict(list)
    for record in records:
        by_fighter[record.fighter_id].append(record)
    for fighter_records in by_fighter.values():
        fighter_records.sort(key=lambda r: (r.date, r.created_at is not None, r.created_at), reverse=True)

    entries = []
    for fighter in fighters:
        fighter_records = by_fighter.get(fighter.id, [])
        entries.append(RankingEntry(
            rank=0,
            fighter_id=fighter.id,
            name=fighter.name,
            handle=fighter.handle,
            tier=fighter.tier,
            earned_tier=tier_for_points(fighter.points),
            weight_class=fighter.weight_class,
            points=fighter.points,
            wins=fighter.wins,
            losses=fighter.losses,
            draws=fighter.draws,
            knockouts=fighter.knockouts,
            win_percentage=fighter.win_percentage,
            ko_percentage=fighter.ko_percentage,
            recent_form=recent_form(fighter_records),
            current_streak=current_streak(fighter_records),
        ))

    entries.sort(key=_sort_key)
    for index, entry in enumerate(entries, start=1):
        entry.rank = index
    return entries
