"""
Admin service - user moderation and system settings. Admin role only.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping, Optional

from core.domain.errors import NotFound
from core.domain.models import (
    ActionResult, AuthUser, DisputeStatus, OperationClass, SystemSettings, SystemStats,
    UserRole, UserSuspensionCreate,
)
from core.domain.schemas import RoleUpdateForm, SuspensionForm, SystemSettingsForm, UserListQuery
from core.interfaces.gateways import IIdentityProvider
from core.interfaces.repositories import (
    IAdminRepository, IDisputeRepository, IFighterRepository, IFightRecordRepository,
    IProfileRepository, ITournamentRepository,
)
from core.services.pipeline import ActionPipeline

logger = logging.getLogger(__name__)

ADMIN_ONLY = (UserRole.ADMIN,)
RECENT_ACTIVITY_DAYS = 7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AdminService:
    """Service for admin operations"""

    def __init__(
        self,
        pipeline: ActionPipeline,
        admin_repo: IAdminRepository,
        profile_repo: IProfileRepository,
        fighter_repo: IFighterRepository,
        fight_record_repo: IFightRecordRepository,
        tournament_repo: ITournamentRepository,
        dispute_repo: IDisputeRepository,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.pipeline = pipeline
        self.admin_repo = admin_repo
        self.profile_repo = profile_repo
        self.fighter_repo = fighter_repo
        self.fight_record_repo = fight_record_repo
        self.tournament_repo = tournament_repo
        self.dispute_repo = dispute_repo
        self.now = now

    async def list_users(self, identity: IIdentityProvider, raw: Optional[Mapping[str, Any]] = None) -> ActionResult:
        async def handler(_, query: UserListQuery) -> ActionResult:
            users, total = await self.profile_repo.list(query.page, query.limit, query.search)
            return ActionResult.ok("Users loaded", {
                "users": users,
                "total": total,
                "page": query.page,
                "limit": query.limit,
            })

        return await self.pipeline.query(
            "list_users", handler, identity=identity, schema=UserListQuery, raw=raw, roles=ADMIN_ONLY
        )

    async def update_user_role(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: RoleUpdateForm) -> ActionResult:
            profile = await self.profile_repo.update_role(form.user_id, form.role)
            if not profile:
                raise NotFound("User not found")

            self.pipeline.audit.security(
                "User role updated",
                {"admin_id": str(user.id), "target_user_id": str(form.user_id), "new_role": form.role.value},
            )
            return ActionResult.ok("User role updated successfully", profile)

        return await self.pipeline.run(
            "update_user_role", identity, RoleUpdateForm, raw, OperationClass.ADMIN, handler, roles=ADMIN_ONLY
        )

    async def suspend_user(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: SuspensionForm) -> ActionResult:
            if not await self.profile_repo.get_by_id(form.user_id):
                raise NotFound("User not found")

            suspended_at = self.now()
            expires_at = None
            if form.duration_days:
                expires_at = suspended_at + timedelta(days=form.duration_days)

            suspension = await self.admin_repo.create_suspension(UserSuspensionCreate(
                user_id=form.user_id,
                reason=form.reason,
                suspended_by=user.id,
                suspended_at=suspended_at,
                expires_at=expires_at,
            ))
            self.pipeline.audit.security(
                "User suspended",
                {"admin_id": str(user.id), "target_user_id": str(form.user_id), "reason": form.reason},
            )
            return ActionResult.ok("User suspended successfully", suspension)

        return await self.pipeline.run(
            "suspend_user", identity, SuspensionForm, raw, OperationClass.ADMIN, handler, roles=ADMIN_ONLY
        )

    async def get_system_stats(self, identity: IIdentityProvider) -> ActionResult:
        async def handler(_, __) -> ActionResult:
            since = self.now() - timedelta(days=RECENT_ACTIVITY_DAYS)
            stats = SystemStats(
                total_users=await self.profile_repo.count(),
                total_fighters=await self.fighter_repo.count(),
                total_fights=await self.fight_record_repo.count(),
                total_tournaments=await self.tournament_repo.count(),
                pending_disputes=await self.dispute_repo.count(status=DisputeStatus.PENDING),
                recent_users=await self.profile_repo.count(since=since),
                recent_fights=await self.fight_record_repo.count(since=since),
            )
            return ActionResult.ok("System stats loaded", stats)

        return await self.pipeline.query("get_system_stats", handler, identity=identity, roles=ADMIN_ONLY)

    async def update_system_settings(self, identity: IIdentityProvider, raw: Mapping[str, Any]) -> ActionResult:
        async def handler(user: AuthUser, form: SystemSettingsForm) -> ActionResult:
            saved = await self.admin_repo.update_settings(SystemSettings(**form.model_dump()), updated_by=user.id)
            self.pipeline.audit.security(
                "System settings updated", {"admin_id": str(user.id), **form.model_dump()}
            )
            return ActionResult.ok("System settings updated successfully", saved)

        return await self.pipeline.run(
            "update_system_settings", identity, SystemSettingsForm, raw, OperationClass.ADMIN, handler,
            roles=ADMIN_ONLY,
        )
