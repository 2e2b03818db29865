#!/usr/bin/env python3
"""
Rebuild every fighter's cumulative record from their fight records.
Run: python scripts/recompute_fighter_stats.py [--apply]

Without --apply only the differences are printed.
"""

import asyncio
import sys
import os

# Add parent dir to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load env
from dotenv import load_dotenv
load_dotenv()

from adapters.web.loader import build_container
from config.settings import settings
from core.domain.constants import RANKINGS_LIMIT
from core.services.stat_aggregator import recompute_stats

# Upper bound on one fighter's history
MAX_FIGHTS_PER_FIGHTER = 10_000


async def recompute(apply: bool):
    container = build_container(settings)
    try:
        fighters = await container.fighter_repo.list_ranked(limit=RANKINGS_LIMIT * 100)
        print(f"Checking {len(fighters)} fighters...")

        drifted = 0
        for fighter in fighters:
            records = await container.fight_record_repo.list_by_fighter(fighter.id, limit=MAX_FIGHTS_PER_FIGHTER)
            expected = recompute_stats(r.outcome for r in records)
            if expected == fighter.stats:
                continue

            drifted += 1
            print(f"  @{fighter.handle}: {fighter.stats.wins}-{fighter.stats.losses}-{fighter.stats.draws} "
                  f"({fighter.stats.points} pts) -> {expected.wins}-{expected.losses}-{expected.draws} "
                  f"({expected.points} pts)")
            if apply:
                await container.fighter_repo.update_stats(fighter.id, expected)

        if not drifted:
            print("All records consistent")
        elif apply:
            print(f"Updated {drifted} fighters")
        else:
            print(f"{drifted} fighters drifted. Re-run with --apply to fix.")
    finally:
        await container.close()


if __name__ == "__main__":
    asyncio.run(recompute(apply="--apply" in sys.argv[1:]))
