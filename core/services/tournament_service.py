"""
Tournament service - create, join, browse.
"""

import logging
from typing import Any, Mapping, Optional

from core.domain.errors import Conflict, NotFound
from core.domain.models import (
    ActionResult, AuthUser, OperationClass, TournamentCreate, TournamentStatus,
)
from core.domain.schemas import TournamentDetailsQuery, TournamentForm, TournamentJoinForm, TournamentQuery
from core.interfaces.gateways import IIdentityProvider
from core.interfaces.repositories import ITournamentRepository
from core.services.fighter_service import FighterService
from core.services.pipeline import ActionPipeline

logger = logging.getLogger(__name__)


class TournamentService:
    """Service for tournament operations"""

    def __init__(
        self,
        pipeline: ActionPipeline,
        tournament_repo: ITournamentRepository,
        fighter_service: FighterService,
    ):
        self.pipeline = pipeline
        self.tournament_repo = tournament_repo
        self.fighter_service = fighter_service

    async def create_tournament(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: TournamentForm) -> ActionResult:
            tournament = await self.tournament_repo.create(
                TournamentCreate(created_by=user.id, **form.model_dump())
            )
            logger.info(f"Tournament created: {tournament.id} '{tournament.name}' by {user.id}")
            return ActionResult.ok("Tournament created successfully", tournament)

        return await self.pipeline.run(
            "create_tournament", identity, TournamentForm, raw, OperationClass.TOURNAMENT, handler
        )

    async def join_tournament(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        """
        Register the caller's fighter. The explicit duplicate check gives a
        friendly message; the (tournament_id, fighter_id) unique constraint
        catches concurrent joins and surfaces as Conflict too. The slot itself
        is claimed by the capacity-bounded increment.
        """

        async def handler(user: AuthUser, form: TournamentJoinForm) -> ActionResult:
            fighter = await self.fighter_service.require_fighter(user)

            tournament = await self.tournament_repo.get_by_id(form.tournament_id)
            if not tournament:
                raise NotFound("Tournament not found")
            if tournament.status != TournamentStatus.UPCOMING:
                raise Conflict("Tournament is not open for registration")
            if tournament.is_full:
                raise Conflict("Tournament is full")
            if await self.tournament_repo.get_participant(tournament.id, fighter.id):
                raise Conflict("Already joined this tournament")

            participant = await self.tournament_repo.add_participant(tournament.id, fighter.id)
            if not await self.tournament_repo.increment_participants(tournament.id):
                # Lost the last slot to a concurrent join
                await self.tournament_repo.remove_participant(tournament.id, fighter.id)
                raise Conflict("Tournament is full")

            logger.info(f"Fighter {fighter.id} joined tournament {tournament.id}")
            return ActionResult.ok("Successfully joined tournament", participant)

        return await self.pipeline.run(
            "join_tournament", identity, TournamentJoinForm, raw, OperationClass.TOURNAMENT, handler
        )

    async def list_tournaments(self, raw: Optional[Mapping[str, Any]] = None) -> ActionResult:
        async def handler(_, query: TournamentQuery) -> ActionResult:
            tournaments = await self.tournament_repo.list(status=query.status, weight_class=query.weight_class)
            return ActionResult.ok("Tournaments loaded", tournaments)

        return await self.pipeline.query("list_tournaments", handler, schema=TournamentQuery, raw=raw)

    async def get_tournament_details(self, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(_, query: TournamentDetailsQuery) -> ActionResult:
            tournament = await self.tournament_repo.get_by_id(query.tournament_id)
            if not tournament:
                raise NotFound("Tournament not found")
            participants = await self.tournament_repo.list_participants(tournament.id)
            return ActionResult.ok("Tournament loaded", {"tournament": tournament, "participants": participants})

        return await self.pipeline.query(
            "get_tournament_details", handler, schema=TournamentDetailsQuery, raw=raw
        )
