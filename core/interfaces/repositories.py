"""
Repository interfaces - abstractions for data access.
This allows swapping implementations (Supabase -> PostgreSQL -> in-memory, etc.)
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List, Tuple
from uuid import UUID
from core.domain.models import (
    Profile, UserRole,
    FighterProfile, FighterProfileCreate, FighterStats, Tier, WeightClass,
    FightRecord, FightRecordCreate,
    MatchmakingRequest, MatchmakingRequestCreate, MatchmakingStatus,
    Tournament, TournamentCreate, TournamentParticipant, TournamentStatus,
    MediaAsset, MediaAssetCreate, MediaCategory, Interview, InterviewCreate,
    TrainingCamp, TrainingCampCreate, TrainingObjective, TrainingObjectiveCreate,
    TrainingLog, TrainingLogCreate, CampStatus,
    Dispute, DisputeCreate, DisputeStatus, DisputeResolution,
    UserSuspension, UserSuspensionCreate, SystemSettings,
    LogEntry,
)


class IProfileRepository(ABC):
    """Interface for account profiles (role lives here)"""

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[Profile]:
        """Get profile by auth user id"""
        pass

    @abstractmethod
    async def upsert(self, profile: Profile) -> Profile:
        """Create the profile row for a fresh account, or refresh it"""
        pass

    @abstractmethod
    async def list(self, page: int, limit: int, search: str = "") -> Tuple[List[Profile], int]:
        """Page of profiles (newest first) plus the total count"""
        pass

    @abstractmethod
    async def update_role(self, user_id: UUID, role: UserRole) -> Optional[Profile]:
        """Set a user's role"""
        pass

    @abstractmethod
    async def count(self, since: Optional[datetime] = None) -> int:
        """Count profiles, optionally only those created after ``since``"""
        pass


class IFighterRepository(ABC):
    """Interface for fighter profile data access"""

    @abstractmethod
    async def get_by_id(self, fighter_id: UUID) -> Optional[FighterProfile]:
        """Get fighter by ID"""
        pass

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID) -> Optional[FighterProfile]:
        """Get the fighter owned by a user (at most one)"""
        pass

    @abstractmethod
    async def create(self, fighter_data: FighterProfileCreate) -> FighterProfile:
        """Create a fighter at Amateur with zeroed counters"""
        pass

    @abstractmethod
    async def update_stats(self, fighter_id: UUID, stats: FighterStats,
                           expected: Optional[FighterStats] = None) -> Optional[FighterProfile]:
        """
        Write counters and stamp updated_at. With ``expected`` the write only
        applies while the stored counters still equal it; None on a miss.
        """
        pass

    @abstractmethod
    async def list_ranked(self, weight_class: Optional[WeightClass] = None,
                          tier: Optional[Tier] = None, limit: int = 50) -> List[FighterProfile]:
        """Fighters ordered by points, highest first"""
        pass

    @abstractmethod
    async def count(self) -> int:
        pass


class IFightRecordRepository(ABC):
    """Interface for fight record data access (append-only)"""

    @abstractmethod
    async def create(self, record_data: FightRecordCreate) -> FightRecord:
        """Insert a new fight record"""
        pass

    @abstractmethod
    async def list_by_fighter(self, fighter_id: UUID, limit: int = 50) -> List[FightRecord]:
        """Records for one fighter, most recent first"""
        pass

    @abstractmethod
    async def list_for_fighters(self, fighter_ids: List[UUID], per_fighter: int) -> List[FightRecord]:
        """Recent records for many fighters, most recent first"""
        pass

    @abstractmethod
    async def count(self, since: Optional[datetime] = None) -> int:
        pass


class IMatchmakingRepository(ABC):
    """Interface for matchmaking request data access"""

    @abstractmethod
    async def create(self, request_data: MatchmakingRequestCreate) -> MatchmakingRequest:
        pass

    @abstractmethod
    async def get_by_id(self, request_id: UUID) -> Optional[MatchmakingRequest]:
        pass

    @abstractmethod
    async def get_pending_for_fighter(self, fighter_id: UUID) -> Optional[MatchmakingRequest]:
        """The fighter's open request, if any"""
        pass

    @abstractmethod
    async def list_by_fighter(self, fighter_id: UUID) -> List[MatchmakingRequest]:
        pass

    @abstractmethod
    async def update_status(self, request_id: UUID, status: MatchmakingStatus,
                            expected: Optional[MatchmakingStatus] = None) -> Optional[MatchmakingRequest]:
        """Set status; when ``expected`` is given only rows in that status change"""
        pass


class ITournamentRepository(ABC):
    """Interface for tournament data access"""

    @abstractmethod
    async def create(self, tournament_data: TournamentCreate) -> Tournament:
        pass

    @abstractmethod
    async def get_by_id(self, tournament_id: UUID) -> Optional[Tournament]:
        pass

    @abstractmethod
    async def list(self, status: Optional[TournamentStatus] = None,
                   weight_class: Optional[WeightClass] = None) -> List[Tournament]:
        """Tournaments ordered by start date"""
        pass

    @abstractmethod
    async def get_participant(self, tournament_id: UUID, fighter_id: UUID) -> Optional[TournamentParticipant]:
        pass

    @abstractmethod
    async def add_participant(self, tournament_id: UUID, fighter_id: UUID) -> TournamentParticipant:
        """Insert a participant row. Duplicate (tournament, fighter) -> Conflict"""
        pass

    @abstractmethod
    async def list_participants(self, tournament_id: UUID) -> List[TournamentParticipant]:
        pass

    @abstractmethod
    async def increment_participants(self, tournament_id: UUID) -> bool:
        """Bump current_participants server-side (RPC) while below max; False when full"""
        pass

    @abstractmethod
    async def remove_participant(self, tournament_id: UUID, fighter_id: UUID) -> None:
        """Undo add_participant"""
        pass

    @abstractmethod
    async def count(self) -> int:
        pass


class IMediaRepository(ABC):
    """Interface for media assets and interviews"""

    @abstractmethod
    async def create_asset(self, asset_data: MediaAssetCreate) -> MediaAsset:
        pass

    @abstractmethod
    async def list_assets(self, category: Optional[MediaCategory] = None,
                          user_id: Optional[UUID] = None) -> List[MediaAsset]:
        pass

    @abstractmethod
    async def create_interview(self, interview_data: InterviewCreate) -> Interview:
        pass

    @abstractmethod
    async def list_interviews(self, fighter_id: Optional[UUID] = None) -> List[Interview]:
        pass


class ITrainingRepository(ABC):
    """Interface for training camps, objectives and logs"""

    @abstractmethod
    async def create_camp(self, camp_data: TrainingCampCreate) -> TrainingCamp:
        pass

    @abstractmethod
    async def get_camp(self, camp_id: UUID) -> Optional[TrainingCamp]:
        pass

    @abstractmethod
    async def list_camps(self, status: Optional[CampStatus] = None) -> List[TrainingCamp]:
        pass

    @abstractmethod
    async def is_participant(self, camp_id: UUID, fighter_id: UUID) -> bool:
        pass

    @abstractmethod
    async def add_participant(self, camp_id: UUID, fighter_id: UUID) -> None:
        """Duplicate (camp, fighter) -> Conflict"""
        pass

    @abstractmethod
    async def increment_participants(self, camp_id: UUID) -> bool:
        """Bump current_participants server-side (RPC) while below max; False when full"""
        pass

    @abstractmethod
    async def remove_participant(self, camp_id: UUID, fighter_id: UUID) -> None:
        pass

    @abstractmethod
    async def create_objective(self, objective_data: TrainingObjectiveCreate) -> TrainingObjective:
        pass

    @abstractmethod
    async def create_log(self, log_data: TrainingLogCreate) -> TrainingLog:
        pass


class IDisputeRepository(ABC):
    """Interface for dispute data access"""

    @abstractmethod
    async def create(self, dispute_data: DisputeCreate) -> Dispute:
        pass

    @abstractmethod
    async def get_by_id(self, dispute_id: UUID) -> Optional[Dispute]:
        pass

    @abstractmethod
    async def resolve(self, dispute_id: UUID, status: DisputeStatus, resolution: DisputeResolution,
                      admin_notes: Optional[str], resolved_by: UUID) -> Optional[Dispute]:
        """
        Move a non-terminal dispute to ``status``.
        Returns None when the dispute is missing or already terminal.
        """
        pass

    @abstractmethod
    async def list(self, status: Optional[DisputeStatus] = None,
                   user_id: Optional[UUID] = None) -> List[Dispute]:
        pass

    @abstractmethod
    async def count(self, status: Optional[DisputeStatus] = None) -> int:
        pass


class IAdminRepository(ABC):
    """Interface for moderation data (suspensions, system settings)"""

    @abstractmethod
    async def create_suspension(self, suspension_data: UserSuspensionCreate) -> UserSuspension:
        pass

    @abstractmethod
    async def get_settings(self) -> SystemSettings:
        pass

    @abstractmethod
    async def update_settings(self, system_settings: SystemSettings, updated_by: UUID) -> SystemSettings:
        pass


class IAuditLogRepository(ABC):
    """Sink for forwarded application log events"""

    @abstractmethod
    async def insert(self, entry: LogEntry) -> None:
        pass
