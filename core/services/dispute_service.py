"""
Dispute service - filing and resolving disputes.

Transitions are one-way out of pending:
    dismissed -> dismissed
    upheld | partial -> resolved
    pending_investigation -> in_review
resolved and dismissed are terminal.
"""

import logging
from typing import Any, Mapping, Optional

from core.domain.errors import Conflict, NotFound
from core.domain.models import ActionResult, AuthUser, DisputeCreate, OperationClass, UserRole
from core.domain.schemas import DisputeForm, DisputeQuery, DisputeResolutionForm
from core.interfaces.gateways import IIdentityProvider
from core.interfaces.repositories import IDisputeRepository, IProfileRepository
from core.services.pipeline import ActionPipeline

logger = logging.getLogger(__name__)

STAFF_ROLES = (UserRole.MODERATOR, UserRole.ADMIN)


class DisputeService:
    """Service for dispute operations"""

    def __init__(
        self,
        pipeline: ActionPipeline,
        dispute_repo: IDisputeRepository,
        profile_repo: IProfileRepository,
    ):
        self.pipeline = pipeline
        self.dispute_repo = dispute_repo
        self.profile_repo = profile_repo

    async def create_dispute(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: DisputeForm) -> ActionResult:
            dispute = await self.dispute_repo.create(DisputeCreate(user_id=user.id, **form.model_dump()))
            logger.info(f"Dispute {dispute.id} filed by {user.id} ({dispute.category.value})")
            return ActionResult.ok("Dispute submitted successfully", dispute)

        return await self.pipeline.run(
            "create_dispute", identity, DisputeForm, raw, OperationClass.API, handler
        )

    async def resolve_dispute(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: DisputeResolutionForm) -> ActionResult:
            target = form.resolution.target_status
            dispute = await self.dispute_repo.resolve(
                form.dispute_id, target, form.resolution, form.admin_notes, resolved_by=user.id
            )
            if dispute is None:
                # Either missing or already terminal; the update is filtered on status
                existing = await self.dispute_repo.get_by_id(form.dispute_id)
                if existing is None:
                    raise NotFound("Dispute not found")
                raise Conflict(f"Dispute is already {existing.status.value}")

            logger.info(
                f"Dispute {dispute.id} -> {dispute.status.value} ({form.resolution.value}) by {user.id}"
            )
            return ActionResult.ok("Dispute resolved successfully", dispute)

        return await self.pipeline.run(
            "resolve_dispute", identity, DisputeResolutionForm, raw, OperationClass.ADMIN, handler,
            roles=STAFF_ROLES,
        )

    async def list_disputes(self, identity: IIdentityProvider, raw: Optional[Mapping[str, Any]] = None) -> ActionResult:
        """Staff see every dispute; everyone else only their own"""

        async def handler(user: AuthUser, query: DisputeQuery) -> ActionResult:
            profile = await self.profile_repo.get_by_id(user.id)
            is_staff = profile is not None and profile.role in STAFF_ROLES
            disputes = await self.dispute_repo.list(
                status=query.status, user_id=None if is_staff else user.id
            )
            return ActionResult.ok("Disputes loaded", disputes)

        return await self.pipeline.query(
            "list_disputes", handler, identity=identity, schema=DisputeQuery, raw=raw
        )
