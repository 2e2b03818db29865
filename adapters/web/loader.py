"""
Web loader - builds the clients, repositories and services the app serves.

Nothing here is a module-level singleton: ``build_container`` is called once
by main.py (or by tests with fakes) and the app carries the result.
"""

import logging
from typing import Optional

from aiohttp import web
from supabase import Client

from config.features import features
from config.settings import Settings

# Infrastructure
from infrastructure.auth import SupabaseAuthGateway, SupabaseIdentityProvider
from infrastructure.database import (
    create_supabase_client,
    SupabaseProfileRepository,
    SupabaseFighterRepository,
    SupabaseFightRecordRepository,
    SupabaseMatchmakingRepository,
    SupabaseTournamentRepository,
    SupabaseMediaRepository,
    SupabaseTrainingRepository,
    SupabaseDisputeRepository,
    SupabaseAdminRepository,
    SupabaseAuditLogRepository,
)
from infrastructure.ratelimit import InMemoryCounterStore, RedisCounterStore, create_redis_client
from infrastructure.storage import SupabaseFileStore

# Core services
from core.interfaces.gateways import ICounterStore, IIdentityProvider
from core.services import (
    ActionPipeline,
    AdminService,
    AuditLogger,
    AuthService,
    DisputeService,
    FighterService,
    MatchmakingService,
    MediaService,
    RateLimiter,
    TournamentService,
    TrainingService,
)

logger = logging.getLogger(__name__)


class Container:
    """Everything a request handler needs, wired from Settings"""

    def __init__(
        self,
        settings: Settings,
        client: Client,
        counter_store: ICounterStore,
        session_client: Optional[Client] = None,
    ):
        self.settings = settings
        self.client = client
        self.counter_store = counter_store
        timeout = settings.external_call_timeout

        # === REPOSITORIES ===
        self.profile_repo = SupabaseProfileRepository(client, timeout)
        self.fighter_repo = SupabaseFighterRepository(client, timeout)
        self.fight_record_repo = SupabaseFightRecordRepository(client, timeout)
        self.matchmaking_repo = SupabaseMatchmakingRepository(client, timeout)
        self.tournament_repo = SupabaseTournamentRepository(client, timeout)
        self.media_repo = SupabaseMediaRepository(client, timeout)
        self.training_repo = SupabaseTrainingRepository(client, timeout)
        self.dispute_repo = SupabaseDisputeRepository(client, timeout)
        self.admin_repo = SupabaseAdminRepository(client, timeout)
        self.audit_log_repo = SupabaseAuditLogRepository(client, timeout)

        # === GATEWAYS ===
        if session_client is not None:
            session_client_factory = lambda: session_client  # noqa: E731
        else:
            session_client_factory = lambda: create_supabase_client(  # noqa: E731
                settings.supabase_url, settings.supabase_key, settings.db_schema, persist_session=False
            )
        self.auth_gateway = SupabaseAuthGateway(client, session_client_factory, timeout)
        self.file_store = SupabaseFileStore(client, timeout)

        # === CROSS-CUTTING ===
        self.rate_limiter = RateLimiter(counter_store)
        self.audit = AuditLogger(
            self.audit_log_repo,
            environment=settings.env,
            forward_all=features.FORWARD_ALL_LOGS,
        )
        self.pipeline = ActionPipeline(self.rate_limiter, self.audit, self.profile_repo)

        # === BUSINESS SERVICES ===
        self.fighter_service = FighterService(self.pipeline, self.fighter_repo, self.fight_record_repo)
        self.matchmaking_service = MatchmakingService(self.pipeline, self.matchmaking_repo, self.fighter_service)
        self.tournament_service = TournamentService(self.pipeline, self.tournament_repo, self.fighter_service)
        self.media_service = MediaService(
            self.pipeline, self.media_repo, self.file_store, self.fighter_service, settings.media_bucket
        )
        self.training_service = TrainingService(self.pipeline, self.training_repo, self.fighter_service)
        self.dispute_service = DisputeService(self.pipeline, self.dispute_repo, self.profile_repo)
        self.admin_service = AdminService(
            self.pipeline,
            self.admin_repo,
            self.profile_repo,
            self.fighter_repo,
            self.fight_record_repo,
            self.tournament_repo,
            self.dispute_repo,
        )
        self.auth_service = AuthService(self.pipeline, self.auth_gateway, self.profile_repo, self.admin_repo)

    def identity_for(self, access_token: Optional[str]) -> IIdentityProvider:
        """One identity provider per request, bound to the caller's token"""
        return SupabaseIdentityProvider(self.client, access_token, self.settings.external_call_timeout)

    async def close(self) -> None:
        await self.audit.flush()
        await self.counter_store.close()


def build_counter_store(settings: Settings) -> ICounterStore:
    if settings.redis_url:
        redis = create_redis_client(settings.redis_url, settings.external_call_timeout)
        return RedisCounterStore(redis, timeout=settings.external_call_timeout)

    if settings.is_production_like:
        logger.warning("REDIS_URL not set in production - rate limits are per process")
    return InMemoryCounterStore()


def build_container(settings: Settings) -> Container:
    client = create_supabase_client(settings.supabase_url, settings.service_key, settings.db_schema)
    counter_store = build_counter_store(settings)
    logger.info(
        f"Container ready: schema={settings.db_schema}, bucket={settings.media_bucket}, "
        f"counter_store={type(counter_store).__name__}"
    )
    return Container(settings, client, counter_store)


CONTAINER = web.AppKey("container", Container)
