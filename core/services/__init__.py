from core.services.audit import AuditLogger
from core.services.rate_limiter import RateLimiter
from core.services.pipeline import ActionPipeline
from core.services.stat_aggregator import apply_fight_outcome, recompute_stats
from core.services.rankings import build_rankings, tier_for_points
from core.services.fighter_service import FighterService
from core.services.matchmaking_service import MatchmakingService
from core.services.tournament_service import TournamentService
from core.services.media_service import MediaService
from core.services.training_service import TrainingService
from core.services.dispute_service import DisputeService
from core.services.admin_service import AdminService
from core.services.auth_service import AuthService

__all__ = [
    "AuditLogger",
    "RateLimiter",
    "ActionPipeline",
    "apply_fight_outcome",
    "recompute_stats",
    "build_rankings",
    "tier_for_points",
    "FighterService",
    "MatchmakingService",
    "TournamentService",
    "MediaService",
    "TrainingService",
    "DisputeService",
    "AdminService",
    "AuthService",
]
