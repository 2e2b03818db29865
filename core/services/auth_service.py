"""
Auth service - sign in / sign up / sign out.
Rate limited per client IP under the auth class (no session yet).
"""

import logging
from typing import Any, Mapping

from core.domain.errors import Forbidden, LeagueError, Unauthenticated
from core.domain.models import ActionResult, AuthSession, OperationClass, Profile, UserRole
from core.domain.schemas import RegisterForm, SignInForm
from core.interfaces.gateways import IAuthGateway
from core.interfaces.repositories import IAdminRepository, IProfileRepository
from core.services.pipeline import ActionPipeline

logger = logging.getLogger(__name__)


def session_payload(session: AuthSession) -> dict:
    return {
        "user": session.user,
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
    }


class AuthService:
    """Service for account operations"""

    def __init__(
        self,
        pipeline: ActionPipeline,
        auth_gateway: IAuthGateway,
        profile_repo: IProfileRepository,
        admin_repo: IAdminRepository,
    ):
        self.pipeline = pipeline
        self.auth_gateway = auth_gateway
        self.profile_repo = profile_repo
        self.admin_repo = admin_repo

    async def sign_in(self, raw: Mapping[str, Any], ip: str) -> ActionResult:
        async def handler(_, form: SignInForm) -> ActionResult:
            try:
                session = await self.auth_gateway.sign_in(form.email, form.password)
            except Unauthenticated:
                self.pipeline.audit.security("Sign in failed", {"email": form.email, "ip": ip})
                raise Unauthenticated("Invalid credentials")

            if await self.profile_repo.get_by_id(session.user.id) is None:
                # Sign-up stopped between the account and its profiles row
                logger.warning(f"Creating missing profile for {session.user.id}")
                await self.profile_repo.upsert(Profile(
                    id=session.user.id,
                    email=session.user.email or form.email,
                    role=UserRole.USER,
                ))

            logger.info(f"User signed in: {session.user.id}")
            return ActionResult.ok("Signed in successfully", session_payload(session))

        return await self.pipeline.run_anonymous("sign_in", ip, SignInForm, raw, OperationClass.AUTH, handler)

    async def sign_up(self, raw: Mapping[str, Any], ip: str) -> ActionResult:
        """
        Create the auth account and its profiles row (role=user).
        If the profile write fails the account already exists; the next
        sign in creates the missing row.
        """

        async def handler(_, form: RegisterForm) -> ActionResult:
            system_settings = await self.admin_repo.get_settings()
            if not system_settings.registration_enabled:
                raise Forbidden("Registration is currently disabled")

            session = await self.auth_gateway.sign_up(form.email, form.password, form.full_name)
            try:
                await self.profile_repo.upsert(Profile(
                    id=session.user.id,
                    email=form.email,
                    full_name=form.full_name,
                    role=UserRole.USER,
                ))
            except LeagueError as e:
                logger.error(f"Profile row for new account {session.user.id} not written: {e.kind}")
                self.pipeline.audit.error("Account without profile", {"user_id": str(session.user.id)})
                raise
            logger.info(f"User signed up: {session.user.id}")
            return ActionResult.ok("Account created successfully", session_payload(session))

        return await self.pipeline.run_anonymous("sign_up", ip, RegisterForm, raw, OperationClass.AUTH, handler)

    async def sign_out(self, access_token: str) -> ActionResult:
        async def handler(_, __) -> ActionResult:
            if not access_token:
                raise Unauthenticated()
            await self.auth_gateway.sign_out(access_token)
            return ActionResult.ok("Signed out successfully")

        return await self.pipeline.query("sign_out", handler)
