"""
Stat aggregator - folds one fight outcome into a fighter's record.
Pure: no I/O, no clock. The repository stamps updated_at.
"""

from typing import Iterable

from core.domain.models import FighterStats, FightOutcome, FightResult


def percentage(part: int, total: int) -> float:
    """Share of total as a percentage with 2 decimals (0 when total is 0)"""
    if total == 0:
        return 0.0
    return round(part / total * 100, 2)


def apply_fight_outcome(prior: FighterStats, outcome: FightOutcome) -> FighterStats:
    wins = prior.wins + (1 if outcome.result == FightResult.WIN else 0)
    losses = prior.losses + (1 if outcome.result == FightResult.LOSS else 0)
    draws = prior.draws + (1 if outcome.result == FightResult.DRAW else 0)
    knockouts = prior.knockouts + (1 if outcome.method.is_knockout else 0)
    total = wins + losses + draws

    return FighterStats(
        wins=wins,
        losses=losses,
        draws=draws,
        points=prior.points + outcome.points_earned,
        knockouts=knockouts,
        win_percentage=percentage(wins, total),
        ko_percentage=percentage(knockouts, total),
    )


def recompute_stats(outcomes: Iterable[FightOutcome]) -> FighterStats:
    """Rebuild a record from scratch; order does not matter"""
    stats = FighterStats()
    for outcome in outcomes:
        stats = apply_fight_outcome(stats, outcome)
    return stats
