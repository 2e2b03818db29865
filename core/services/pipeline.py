"""
Action pipeline - the path every mutating handler takes:
auth -> role -> validation -> rate limit -> handler -> audit.

Handlers raise LeagueError subclasses; the pipeline turns every outcome
into an ActionResult so nothing raw crosses the service boundary.
"""

import logging
from datetime import date
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, Type, Union

from pydantic import BaseModel

from core.domain.errors import (
    ExternalTimeout,
    Forbidden,
    InvalidInput,
    LeagueError,
    PersistenceFailure,
    RateLimited,
    Unauthenticated,
    UnexpectedError,
)
from core.domain.models import ActionResult, AuthUser, OperationClass, UserRole
from core.domain.schemas import validate_form
from core.interfaces.gateways import IIdentityProvider
from core.interfaces.repositories import IProfileRepository
from core.services.audit import AuditLogger
from core.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

Handler = Callable[[Optional[AuthUser], Any], Awaitable[ActionResult]]


class ActionPipeline:
    """Shared request-processing steps for all domain services"""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        audit: AuditLogger,
        profile_repo: IProfileRepository,
        today: Callable[[], date] = date.today,
    ):
        self.rate_limiter = rate_limiter
        self.audit = audit
        self.profile_repo = profile_repo
        self.today = today

    async def run(
        self,
        action: str,
        identity: IIdentityProvider,
        schema: Optional[Type[BaseModel]],
        raw: Optional[Mapping[str, Any]],
        operation_class: Union[OperationClass, str],
        handler: Handler,
        roles: Optional[Sequence[UserRole]] = None,
    ) -> ActionResult:
        """Authenticated mutation, rate limited per user id"""
        try:
            user = await self.authenticate(action, identity)
            if roles:
                await self.authorize(action, user, roles)
            record = self.validate(schema, raw)
            await self.admit(action, str(user.id), operation_class)

            async with self.audit.measure(action):
                result = await handler(user, record)

            if result.success:
                self.audit.user_action(action, user.id)
            return result
        except Exception as e:
            return self.to_failure(action, e)

    async def run_anonymous(
        self,
        action: str,
        identifier: str,
        schema: Optional[Type[BaseModel]],
        raw: Optional[Mapping[str, Any]],
        operation_class: Union[OperationClass, str],
        handler: Handler,
    ) -> ActionResult:
        """Mutation without a session (sign-in / sign-up), rate limited per ``identifier``"""
        try:
            record = self.validate(schema, raw)
            await self.admit(action, identifier, operation_class)
            async with self.audit.measure(action):
                return await handler(None, record)
        except Exception as e:
            return self.to_failure(action, e)

    async def query(
        self,
        action: str,
        handler: Handler,
        identity: Optional[IIdentityProvider] = None,
        schema: Optional[Type[BaseModel]] = None,
        raw: Optional[Mapping[str, Any]] = None,
        roles: Optional[Sequence[UserRole]] = None,
    ) -> ActionResult:
        """
        Read path: same error conversion, no rate limiting. Auth applies only
        when an identity is passed; filters are validated when a schema is.
        """
        try:
            user = None
            if identity is not None:
                user = await self.authenticate(action, identity)
                if roles:
                    await self.authorize(action, user, roles)
            record = self.validate(schema, raw)
            return await handler(user, record)
        except Exception as e:
            return self.to_failure(action, e)

    # === Steps ===

    async def authenticate(self, action: str, identity: IIdentityProvider) -> AuthUser:
        user = await identity.get_current_user()
        if user is None:
            raise Unauthenticated()
        return user

    async def authorize(self, action: str, user: AuthUser, roles: Sequence[UserRole]) -> None:
        profile = await self.profile_repo.get_by_id(user.id)
        if profile is None or profile.role not in roles:
            self.audit.security(
                "Unauthorized access attempt",
                {"user_id": str(user.id), "action": action, "role": profile.role.value if profile else None},
            )
            raise Forbidden()

    def validate(self, schema: Optional[Type[BaseModel]], raw: Optional[Mapping[str, Any]]):
        if schema is None:
            return None
        return validate_form(schema, raw or {}, today=self.today())

    async def admit(self, action: str, identifier: str, operation_class: Union[OperationClass, str]) -> None:
        decision = await self.rate_limiter.check(identifier, operation_class)
        if not decision.allowed:
            self.audit.warn(
                "Rate limit exceeded",
                {"identifier": identifier, "action": action, "retry_after": decision.retry_after},
            )
            raise RateLimited(decision.retry_after)

    # === Error conversion ===

    def to_failure(self, action: str, error: Exception) -> ActionResult:
        if isinstance(error, InvalidInput):
            return ActionResult.fail(error.message, error.kind, details=error.details)

        if isinstance(error, RateLimited):
            return ActionResult.fail(error.message, error.kind, retry_after=error.retry_after)

        if isinstance(error, PersistenceFailure):
            logger.error(f"[{action}] Persistence failure in {error.operation}: {error.detail}")
            self.audit.error(f"{action} failed", {"operation": error.operation, "error": error.detail})
            return ActionResult.fail(error.message, error.kind)

        if isinstance(error, ExternalTimeout):
            logger.error(f"[{action}] Timed out waiting for {error.operation}")
            self.audit.error(f"{action} timed out", {"operation": error.operation})
            return ActionResult.fail(error.message, error.kind)

        if isinstance(error, LeagueError):
            logger.info(f"[{action}] {error.kind}: {error.message}")
            return ActionResult.fail(error.message, error.kind)

        logger.exception(f"[{action}] Unexpected error: {error}")
        self.audit.error(f"{action} crashed", {"error_type": type(error).__name__})
        unexpected = UnexpectedError()
        return ActionResult.fail(unexpected.message, unexpected.kind)
