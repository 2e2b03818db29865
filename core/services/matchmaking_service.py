"""
Matchmaking service - fighters queue for an opponent.
Pairing itself (pending -> matched) happens outside this service.
"""

import logging
from typing import Any, Mapping

from core.domain.errors import Conflict, NotFound
from core.domain.models import (
    ActionResult, AuthUser, MatchmakingRequestCreate, MatchmakingStatus, OperationClass,
)
from core.domain.schemas import MatchmakingCancelForm, MatchmakingForm
from core.interfaces.gateways import IIdentityProvider
from core.interfaces.repositories import IMatchmakingRepository
from core.services.fighter_service import FighterService
from core.services.pipeline import ActionPipeline

logger = logging.getLogger(__name__)


class MatchmakingService:
    """One pending request per fighter"""

    def __init__(
        self,
        pipeline: ActionPipeline,
        matchmaking_repo: IMatchmakingRepository,
        fighter_service: FighterService,
    ):
        self.pipeline = pipeline
        self.matchmaking_repo = matchmaking_repo
        self.fighter_service = fighter_service

    async def request_matchmaking(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: MatchmakingForm) -> ActionResult:
            fighter = await self.fighter_service.require_fighter(user)

            if await self.matchmaking_repo.get_pending_for_fighter(fighter.id):
                raise Conflict("You already have a pending matchmaking request")

            request = await self.matchmaking_repo.create(MatchmakingRequestCreate(
                fighter_id=fighter.id,
                weight_class=form.weight_class or fighter.weight_class,
                tier=form.tier or fighter.tier,
                max_distance=form.max_distance,
                preferred_date=form.preferred_date,
                notes=form.notes,
            ))
            logger.info(f"Matchmaking request {request.id} queued for fighter {fighter.id} ({request.weight_class.value})")
            return ActionResult.ok("Matchmaking request submitted successfully", request)

        return await self.pipeline.run(
            "request_matchmaking", identity, MatchmakingForm, raw, OperationClass.MATCHMAKING, handler
        )

    async def cancel_matchmaking_request(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: MatchmakingCancelForm) -> ActionResult:
            fighter = await self.fighter_service.require_fighter(user)

            request = await self.matchmaking_repo.get_by_id(form.request_id)
            if not request or request.fighter_id != fighter.id:
                raise NotFound("Matchmaking request not found")
            if request.status != MatchmakingStatus.PENDING:
                raise Conflict("Only pending requests can be cancelled")

            cancelled = await self.matchmaking_repo.update_status(
                request.id, MatchmakingStatus.CANCELLED, expected=MatchmakingStatus.PENDING
            )
            if not cancelled:
                # Matched between our read and the update
                raise Conflict("Only pending requests can be cancelled")
            return ActionResult.ok("Matchmaking request cancelled", cancelled)

        return await self.pipeline.run(
            "cancel_matchmaking_request", identity, MatchmakingCancelForm, raw, OperationClass.MATCHMAKING, handler
        )

    async def list_my_requests(self, identity: IIdentityProvider) -> ActionResult:
        async def handler(user: AuthUser, _) -> ActionResult:
            fighter = await self.fighter_service.require_fighter(user)
            requests = await self.matchmaking_repo.list_by_fighter(fighter.id)
            return ActionResult.ok("Matchmaking requests loaded", requests)

        return await self.pipeline.query("list_my_requests", handler, identity=identity)
