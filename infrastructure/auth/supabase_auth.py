"""
Supabase Auth adapters: per-request identity and account operations.
"""

import logging
from typing import Callable, Optional

from supabase import AuthApiError, AuthError, Client

from core.domain.errors import Conflict, PersistenceFailure, Unauthenticated
from core.domain.models import AuthSession, AuthUser
from core.interfaces.gateways import IAuthGateway, IIdentityProvider
from infrastructure.database.supabase_client import SupabaseRepository, run_sync

logger = logging.getLogger(__name__)


def _to_auth_user(user) -> AuthUser:
    return AuthUser(id=user.id, email=getattr(user, "email", None))


class SupabaseIdentityProvider(SupabaseRepository, IIdentityProvider):
    """
    Resolves the caller from the access token of one request.
    The lookup happens at most once per instance.
    """

    def __init__(self, client: Client, access_token: Optional[str], timeout: float = 10.0):
        super().__init__(client, timeout)
        self.access_token = access_token
        self._resolved = False
        self._user: Optional[AuthUser] = None

    @run_sync
    def _get_user_sync(self, jwt: str):
        try:
            response = self.client.auth.get_user(jwt)
        except AuthError as e:
            logger.info(f"[AUTH] Rejected session token: {e}")
            return None
        return response.user if response else None

    async def get_current_user(self) -> Optional[AuthUser]:
        if self._resolved:
            return self._user
        if self.access_token:
            user = await self._get_user_sync(self.access_token)
            self._user = _to_auth_user(user) if user else None
        self._resolved = True
        return self._user


class SupabaseAuthGateway(SupabaseRepository, IAuthGateway):
    """
    Password auth goes through a fresh, non-persisting client per call so the
    shared service client never holds a user session.
    """

    def __init__(self, client: Client, session_client_factory: Callable[[], Client], timeout: float = 10.0):
        super().__init__(client, timeout)
        self.session_client_factory = session_client_factory

    def _session(self, response) -> AuthSession:
        session = response.session
        return AuthSession(
            user=_to_auth_user(response.user),
            access_token=session.access_token if session else None,
            refresh_token=session.refresh_token if session else None,
        )

    @run_sync
    def _sign_in_sync(self, email: str, password: str) -> AuthSession:
        client = self.session_client_factory()
        try:
            response = client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthApiError as e:
            logger.info(f"[AUTH] Sign in rejected: {e.message}")
            raise Unauthenticated("Invalid credentials") from e
        except AuthError as e:
            raise PersistenceFailure(str(e), "auth.sign_in") from e
        return self._session(response)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        return await self._sign_in_sync(email, password)

    @run_sync
    def _sign_up_sync(self, email: str, password: str, full_name: str) -> AuthSession:
        client = self.session_client_factory()
        try:
            response = client.auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": {"full_name": full_name, "role": "fighter"}},
            })
        except AuthApiError as e:
            if getattr(e, "code", None) == "user_already_exists" or "already" in (e.message or "").lower():
                raise Conflict("An account with this email already exists") from e
            raise PersistenceFailure(f"{e.status}: {e.message}", "auth.sign_up") from e
        except AuthError as e:
            raise PersistenceFailure(str(e), "auth.sign_up") from e
        if response.user is None:
            raise PersistenceFailure("sign_up returned no user", "auth.sign_up")
        return self._session(response)

    async def sign_up(self, email: str, password: str, full_name: str) -> AuthSession:
        return await self._sign_up_sync(email, password, full_name)

    @run_sync
    def _sign_out_sync(self, access_token: str) -> None:
        try:
            self.client.auth.admin.sign_out(access_token)
        except AuthError as e:
            # Token already expired or revoked: nothing left to end
            logger.info(f"[AUTH] Sign out of stale session: {e}")

    async def sign_out(self, access_token: str) -> None:
        await self._sign_out_sync(access_token)
