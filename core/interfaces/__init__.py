from core.interfaces.repositories import (
    IProfileRepository,
    IFighterRepository,
    IFightRecordRepository,
    IMatchmakingRepository,
    ITournamentRepository,
    IMediaRepository,
    ITrainingRepository,
    IDisputeRepository,
    IAdminRepository,
    IAuditLogRepository,
)
from core.interfaces.gateways import (
    IIdentityProvider,
    IAuthGateway,
    IFileStore,
    ICounterStore,
)

__all__ = [
    # Repositories
    "IProfileRepository",
    "IFighterRepository",
    "IFightRecordRepository",
    "IMatchmakingRepository",
    "ITournamentRepository",
    "IMediaRepository",
    "ITrainingRepository",
    "IDisputeRepository",
    "IAdminRepository",
    "IAuditLogRepository",
    # Gateways
    "IIdentityProvider",
    "IAuthGateway",
    "IFileStore",
    "ICounterStore",
]
