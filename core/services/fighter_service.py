"""
Fighter service - profiles, fight records, rankings.
"""

import logging
from typing import Any, Mapping, Optional

from core.domain.constants import RANKINGS_LIMIT, STATS_UPDATE_ATTEMPTS, STREAK_LOOKBACK
from core.domain.errors import Conflict, LeagueError, NotFound
from core.domain.models import (
    ActionResult, AuthUser, FighterProfile, FighterProfileCreate, FightOutcome, FightRecordCreate, OperationClass,
)
from core.domain.schemas import FighterProfileForm, FightRecordForm, RankingsQuery
from core.interfaces.gateways import IIdentityProvider
from core.interfaces.repositories import IFighterRepository, IFightRecordRepository
from core.services.pipeline import ActionPipeline
from core.services.rankings import build_rankings
from core.services.stat_aggregator import apply_fight_outcome

logger = logging.getLogger(__name__)


class FighterService:
    """Service for fighter-related operations"""

    def __init__(
        self,
        pipeline: ActionPipeline,
        fighter_repo: IFighterRepository,
        fight_record_repo: IFightRecordRepository,
    ):
        self.pipeline = pipeline
        self.fighter_repo = fighter_repo
        self.fight_record_repo = fight_record_repo

    async def require_fighter(self, user: AuthUser) -> FighterProfile:
        """The caller's fighter profile, or NotFound"""
        fighter = await self.fighter_repo.get_by_user_id(user.id)
        if not fighter:
            raise NotFound("Fighter profile not found")
        return fighter

    async def create_fighter_profile(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: FighterProfileForm) -> ActionResult:
            # Fast path only: fighter_profiles.user_id is unique in the store
            if await self.fighter_repo.get_by_user_id(user.id):
                raise Conflict("Fighter profile already exists")

            fighter = await self.fighter_repo.create(
                FighterProfileCreate(user_id=user.id, **form.model_dump())
            )
            logger.info(f"Fighter profile created: user={user.id} fighter={fighter.id} handle={fighter.handle}")
            return ActionResult.ok("Fighter profile created successfully", fighter)

        return await self.pipeline.run(
            "create_fighter_profile", identity, FighterProfileForm, raw, OperationClass.API, handler
        )

    async def create_fight_record(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        """
        Insert the record, then fold the outcome into the fighter's counters.
        The record stands even when the counters cannot be written; the
        recompute script repairs that drift.
        """

        async def handler(user: AuthUser, form: FightRecordForm) -> ActionResult:
            fighter = await self.require_fighter(user)

            record = await self.fight_record_repo.create(
                FightRecordCreate(fighter_id=fighter.id, **form.model_dump())
            )
            try:
                updated = await self.apply_outcome(fighter, record.outcome)
            except LeagueError as e:
                logger.error(f"Stats update for fighter {fighter.id} failed after record {record.id}: {e.kind}")
                updated = None

            if updated is None:
                self.pipeline.audit.error(
                    "Fighter stats out of sync",
                    {"fighter_id": str(fighter.id), "fight_record_id": str(record.id)},
                )
            else:
                logger.info(
                    f"Fight record {record.id} logged for fighter {fighter.id}: "
                    f"{record.result.value} by {record.method.value}, {updated.wins}-{updated.losses}-{updated.draws}"
                )
            return ActionResult.ok(
                "Fight record created successfully",
                {"record": record, "fighter": updated or fighter, "stats_updated": updated is not None},
            )

        return await self.pipeline.run(
            "create_fight_record", identity, FightRecordForm, raw, OperationClass.API, handler
        )

    async def apply_outcome(self, fighter: FighterProfile, outcome: FightOutcome) -> Optional[FighterProfile]:
        """
        Compare-and-set the folded counters. A lost race re-reads the fighter
        and folds again; None once every attempt has lost.
        """
        current = fighter
        for _ in range(STATS_UPDATE_ATTEMPTS):
            prior = current.stats
            updated = await self.fighter_repo.update_stats(
                current.id, apply_fight_outcome(prior, outcome), expected=prior
            )
            if updated:
                return updated
            current = await self.fighter_repo.get_by_id(fighter.id)
            if current is None:
                return None
        logger.warning(f"Stats for fighter {fighter.id} lost {STATS_UPDATE_ATTEMPTS} concurrent updates")
        return None

    async def get_my_profile(self, identity: IIdentityProvider) -> ActionResult:
        async def handler(user: AuthUser, _) -> ActionResult:
            fighter = await self.require_fighter(user)
            records = await self.fight_record_repo.list_by_fighter(fighter.id)
            return ActionResult.ok("Fighter profile loaded", {"fighter": fighter, "fight_records": records})

        return await self.pipeline.query("get_my_profile", handler, identity=identity)

    async def get_rankings(self, raw: Optional[Mapping[str, Any]] = None) -> ActionResult:
        """Leaderboard, optionally filtered by weight class and/or tier"""

        async def handler(_, query: RankingsQuery) -> ActionResult:
            fighters = await self.fighter_repo.list_ranked(
                weight_class=query.weight_class, tier=query.tier, limit=RANKINGS_LIMIT
            )
            records = []
            if fighters:
                records = await self.fight_record_repo.list_for_fighters(
                    [f.id for f in fighters], per_fighter=STREAK_LOOKBACK
                )
            return ActionResult.ok("Rankings loaded", build_rankings(fighters, records))

        return await self.pipeline.query("get_rankings", handler, schema=RankingsQuery, raw=raw)
