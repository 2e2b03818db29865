"""
Gateway interfaces - external services reached through narrow seams
(identity provider, auth, file storage, rate limit counters).
"""

from abc import ABC, abstractmethod
from typing import Optional
from core.domain.models import AuthUser, AuthSession, CounterResult, RateLimitPolicy


class IIdentityProvider(ABC):
    """Resolves the caller of the current request"""

    @abstractmethod
    async def get_current_user(self) -> Optional[AuthUser]:
        """Return the authenticated user, or None"""
        pass


class IAuthGateway(ABC):
    """Account sign-in / sign-up / sign-out"""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Raise Unauthenticated on bad credentials"""
        pass

    @abstractmethod
    async def sign_up(self, email: str, password: str, full_name: str) -> AuthSession:
        """Raise Conflict when the email is taken"""
        pass

    @abstractmethod
    async def sign_out(self, access_token: str) -> None:
        pass


class IFileStore(ABC):
    """Object storage for uploaded media"""

    @abstractmethod
    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """Store bytes and return the public URL"""
        pass


class ICounterStore(ABC):
    """Shared sliding-window counters for rate limiting"""

    @abstractmethod
    async def increment_and_check(self, key: str, policy: RateLimitPolicy) -> CounterResult:
        """
        Prune entries older than the window, then record this request if the
        count is under the limit. Rejected requests are not recorded.
        Raise CounterStoreUnavailable when the store cannot answer.
        """
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """True when the store answers (health check)"""
        pass

    @abstractmethod
    async def close(self, reason: Optional[str] = None) -> None:
        pass
