from infrastructure.database.supabase_client import create_supabase_client, run_sync, SupabaseRepository
from infrastructure.database.profile_repository import SupabaseProfileRepository
from infrastructure.database.fighter_repository import SupabaseFighterRepository
from infrastructure.database.fight_record_repository import SupabaseFightRecordRepository
from infrastructure.database.matchmaking_repository import SupabaseMatchmakingRepository
from infrastructure.database.tournament_repository import SupabaseTournamentRepository
from infrastructure.database.media_repository import SupabaseMediaRepository
from infrastructure.database.training_repository import SupabaseTrainingRepository
from infrastructure.database.dispute_repository import SupabaseDisputeRepository
from infrastructure.database.admin_repository import SupabaseAdminRepository
from infrastructure.database.audit_log_repository import SupabaseAuditLogRepository

__all__ = [
    "create_supabase_client",
    "run_sync",
    "SupabaseRepository",
    "SupabaseProfileRepository",
    "SupabaseFighterRepository",
    "SupabaseFightRecordRepository",
    "SupabaseMatchmakingRepository",
    "SupabaseTournamentRepository",
    "SupabaseMediaRepository",
    "SupabaseTrainingRepository",
    "SupabaseDisputeRepository",
    "SupabaseAdminRepository",
    "SupabaseAuditLogRepository",
]
