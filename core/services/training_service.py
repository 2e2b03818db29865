"""
Training service - camps, objectives, training logs.
"""

import logging
from typing import Any, Mapping, Optional

from core.domain.errors import Conflict, Forbidden, NotFound
from core.domain.models import (
    ActionResult, AuthUser, CampStatus, OperationClass,
    TrainingCampCreate, TrainingLogCreate, TrainingObjectiveCreate,
)
from core.domain.schemas import (
    CampQuery, TrainingCampForm, TrainingCampJoinForm, TrainingLogForm, TrainingObjectiveForm,
)
from core.interfaces.gateways import IIdentityProvider
from core.interfaces.repositories import ITrainingRepository
from core.services.fighter_service import FighterService
from core.services.pipeline import ActionPipeline

logger = logging.getLogger(__name__)

JOINABLE_CAMP_STATUSES = (CampStatus.UPCOMING, CampStatus.ACTIVE)


class TrainingService:
    """Service for training camp operations"""

    def __init__(
        self,
        pipeline: ActionPipeline,
        training_repo: ITrainingRepository,
        fighter_service: FighterService,
    ):
        self.pipeline = pipeline
        self.training_repo = training_repo
        self.fighter_service = fighter_service

    async def create_training_camp(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: TrainingCampForm) -> ActionResult:
            camp = await self.training_repo.create_camp(
                TrainingCampCreate(created_by=user.id, **form.model_dump())
            )
            logger.info(f"Training camp created: {camp.id} '{camp.name}' by {user.id}")
            return ActionResult.ok("Training camp created successfully", camp)

        return await self.pipeline.run(
            "create_training_camp", identity, TrainingCampForm, raw, OperationClass.API, handler
        )

    async def join_training_camp(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: TrainingCampJoinForm) -> ActionResult:
            fighter = await self.fighter_service.require_fighter(user)

            camp = await self.training_repo.get_camp(form.camp_id)
            if not camp:
                raise NotFound("Training camp not found")
            if camp.status not in JOINABLE_CAMP_STATUSES:
                raise Conflict("Training camp is closed")
            if camp.is_full:
                raise Conflict("Training camp is full")
            if await self.training_repo.is_participant(camp.id, fighter.id):
                raise Conflict("Already joined this training camp")

            await self.training_repo.add_participant(camp.id, fighter.id)
            if not await self.training_repo.increment_participants(camp.id):
                await self.training_repo.remove_participant(camp.id, fighter.id)
                raise Conflict("Training camp is full")
            return ActionResult.ok("Successfully joined training camp", {"camp_id": camp.id, "fighter_id": fighter.id})

        return await self.pipeline.run(
            "join_training_camp", identity, TrainingCampJoinForm, raw, OperationClass.API, handler
        )

    async def create_training_objective(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        """Only the camp's creator sets its objectives"""

        async def handler(user: AuthUser, form: TrainingObjectiveForm) -> ActionResult:
            camp = await self.training_repo.get_camp(form.camp_id)
            if not camp:
                raise NotFound("Training camp not found")
            if camp.created_by != user.id:
                raise Forbidden("Only the camp organiser can add objectives")

            objective = await self.training_repo.create_objective(TrainingObjectiveCreate(**form.model_dump()))
            return ActionResult.ok("Training objective created successfully", objective)

        return await self.pipeline.run(
            "create_training_objective", identity, TrainingObjectiveForm, raw, OperationClass.API, handler
        )

    async def log_training(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: TrainingLogForm) -> ActionResult:
            fighter = await self.fighter_service.require_fighter(user)
            if form.camp_id and not await self.training_repo.get_camp(form.camp_id):
                raise NotFound("Training camp not found")

            entry = await self.training_repo.create_log(
                TrainingLogCreate(fighter_id=fighter.id, **form.model_dump())
            )
            return ActionResult.ok("Training logged successfully", entry)

        return await self.pipeline.run(
            "log_training", identity, TrainingLogForm, raw, OperationClass.API, handler
        )

    async def list_training_camps(self, raw: Optional[Mapping[str, Any]] = None) -> ActionResult:
        async def handler(_, query: CampQuery) -> ActionResult:
            camps = await self.training_repo.list_camps(status=query.status)
            return ActionResult.ok("Training camps loaded", camps)

        return await self.pipeline.query("list_training_camps", handler, schema=CampQuery, raw=raw)
