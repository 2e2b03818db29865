"""
Domain models - the core of business logic.
These models are transport-agnostic (HTTP handlers, scripts, tests).
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import date, datetime
from uuid import UUID
from enum import Enum


# === ENUMS ===

class Tier(str, Enum):
    """Ordered skill bracket, lowest first."""
    AMATEUR = "Amateur"
    SEMI_PRO = "Semi-Pro"
    PRO = "Pro"
    CONTENDER = "Contender"
    ELITE = "Elite"
    CHAMPION = "Champion"


class WeightClass(str, Enum):
    STRAWWEIGHT = "strawweight"
    FLYWEIGHT = "flyweight"
    BANTAMWEIGHT = "bantamweight"
    SUPER_BANTAMWEIGHT = "super_bantamweight"
    FEATHERWEIGHT = "featherweight"
    SUPER_FEATHERWEIGHT = "super_featherweight"
    LIGHTWEIGHT = "lightweight"
    SUPER_LIGHTWEIGHT = "super_lightweight"
    WELTERWEIGHT = "welterweight"
    SUPER_WELTERWEIGHT = "super_welterweight"
    MIDDLEWEIGHT = "middleweight"
    SUPER_MIDDLEWEIGHT = "super_middleweight"
    LIGHT_HEAVYWEIGHT = "light_heavyweight"
    CRUISERWEIGHT = "cruiserweight"
    HEAVYWEIGHT = "heavyweight"


class Stance(str, Enum):
    ORTHODOX = "orthodox"
    SOUTHPAW = "southpaw"
    SWITCH = "switch"


class FightResult(str, Enum):
    WIN = "Win"
    LOSS = "Loss"
    DRAW = "Draw"


class FightMethod(str, Enum):
    DECISION = "Decision"
    TKO = "TKO"
    KO = "KO"
    SUBMISSION = "Submission"
    DQ = "DQ"
    NO_CONTEST = "No Contest"
    TECHNICAL_DECISION = "Technical Decision"

    @property
    def is_knockout(self) -> bool:
        return self in (FightMethod.KO, FightMethod.TKO)


class MatchmakingStatus(str, Enum):
    PENDING = "pending"
    MATCHED = "matched"
    CANCELLED = "cancelled"


class TournamentStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CampStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DisputeStatus(str, Enum):
    PENDING = "pending"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"

    @property
    def is_terminal(self) -> bool:
        return self in (DisputeStatus.RESOLVED, DisputeStatus.DISMISSED)


class DisputeCategory(str, Enum):
    FIGHT_RESULT = "fight_result"
    POINTS = "points"
    BEHAVIOR = "behavior"
    TECHNICAL = "technical"
    OTHER = "other"


class DisputeResolution(str, Enum):
    UPHELD = "upheld"
    DISMISSED = "dismissed"
    PARTIAL = "partial"
    PENDING_INVESTIGATION = "pending_investigation"

    @property
    def target_status(self) -> DisputeStatus:
        if self is DisputeResolution.DISMISSED:
            return DisputeStatus.DISMISSED
        if self is DisputeResolution.PENDING_INVESTIGATION:
            return DisputeStatus.IN_REVIEW
        return DisputeStatus.RESOLVED


class MediaCategory(str, Enum):
    HIGHLIGHT = "highlight"
    TRAINING = "training"
    INTERVIEW = "interview"
    PROMO = "promo"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class UserRole(str, Enum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


class OperationClass(str, Enum):
    """Rate limit policy selector"""
    API = "api"
    AUTH = "auth"
    UPLOAD = "upload"
    ADMIN = "admin"
    MATCHMAKING = "matchmaking"
    TOURNAMENT = "tournament"


class LogLevel(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    SECURITY = "security"
    PERFORMANCE = "performance"
    USER_ACTION = "user_action"


# === AUTH ===

class AuthUser(BaseModel):
    """Caller identity resolved from the session"""
    id: UUID
    email: Optional[str] = None


class AuthSession(BaseModel):
    user: AuthUser
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


class Profile(BaseModel):
    """Account row (profiles table)"""
    id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: UserRole = UserRole.USER
    created_at: Optional[datetime] = None


# === FIGHTER ===

class FighterStats(BaseModel):
    """Cumulative record. Percentages are derived from the counters."""
    wins: int = 0
    losses: int = 0
    draws: int = 0
    points: int = 0
    knockouts: int = 0
    win_percentage: float = 0.0
    ko_percentage: float = 0.0

    @property
    def total_fights(self) -> int:
        return self.wins + self.losses + self.draws


class FightOutcome(BaseModel):
    result: FightResult
    method: FightMethod
    points_earned: int = Field(default=0, ge=0)


class FighterProfileCreate(BaseModel):
    """Data for creating a fighter profile"""
    user_id: UUID
    name: str
    handle: str
    birthday: date
    hometown: str
    stance: Stance
    height_feet: int
    height_inches: int
    reach: int
    weight: int
    weight_class: WeightClass
    trainer: Optional[str] = None
    gym: Optional[str] = None


class FighterProfile(FighterStats):
    """Full fighter profile"""
    id: UUID
    user_id: UUID
    name: str
    handle: str
    birthday: Optional[date] = None
    hometown: Optional[str] = None
    stance: Optional[Stance] = None
    height_feet: Optional[int] = None
    height_inches: Optional[int] = None
    reach: Optional[int] = None
    weight: Optional[int] = None
    weight_class: WeightClass
    trainer: Optional[str] = None
    gym: Optional[str] = None
    tier: Tier = Tier.AMATEUR
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def stats(self) -> FighterStats:
        return FighterStats(
            wins=self.wins,
            losses=self.losses,
            draws=self.draws,
            points=self.points,
            knockouts=self.knockouts,
            win_percentage=self.win_percentage,
            ko_percentage=self.ko_percentage,
        )


# === FIGHT RECORD ===

class FightRecordCreate(BaseModel):
    fighter_id: UUID
    opponent_name: str
    result: FightResult
    method: FightMethod
    round: Optional[int] = None
    date: date
    location: Optional[str] = None
    weight_class: WeightClass
    points_earned: int = 0
    proof_url: Optional[str] = None
    notes: Optional[str] = None


class FightRecord(FightRecordCreate):
    """Immutable once created"""
    id: UUID
    created_at: Optional[datetime] = None

    @property
    def outcome(self) -> FightOutcome:
        return FightOutcome(result=self.result, method=self.method, points_earned=self.points_earned)


# === MATCHMAKING ===

class MatchmakingRequestCreate(BaseModel):
    fighter_id: UUID
    weight_class: WeightClass
    tier: Tier
    max_distance: Optional[int] = None
    preferred_date: Optional[date] = None
    notes: Optional[str] = None


class MatchmakingRequest(MatchmakingRequestCreate):
    id: UUID
    status: MatchmakingStatus = MatchmakingStatus.PENDING
    created_at: Optional[datetime] = None


# === TOURNAMENT ===

class TournamentCreate(BaseModel):
    name: str
    description: Optional[str] = None
    weight_class: WeightClass
    tier: Tier
    max_participants: int
    start_date: date
    end_date: date
    created_by: UUID
    entry_fee: float = 0
    prize_pool: float = 0


class Tournament(TournamentCreate):
    id: UUID
    current_participants: int = 0
    status: TournamentStatus = TournamentStatus.UPCOMING
    created_at: Optional[datetime] = None

    @property
    def is_full(self) -> bool:
        return self.current_participants >= self.max_participants


class TournamentParticipant(BaseModel):
    id: UUID
    tournament_id: UUID
    fighter_id: UUID
    joined_at: Optional[datetime] = None


# === MEDIA ===

class MediaAssetCreate(BaseModel):
    user_id: UUID
    title: str
    description: Optional[str] = None
    file_url: str
    file_type: MediaType
    category: MediaCategory


class MediaAsset(MediaAssetCreate):
    id: UUID
    created_at: Optional[datetime] = None


class UploadedFile(BaseModel):
    """Multipart file as received; size is what the client declared or we counted"""
    filename: str
    content_type: str
    size: int
    data: bytes = b""


class InterviewCreate(BaseModel):
    fighter_id: UUID
    interviewer: str
    title: str
    description: Optional[str] = None
    scheduled_date: date
    duration_minutes: int


class Interview(InterviewCreate):
    id: UUID
    status: str = "scheduled"
    created_at: Optional[datetime] = None


# === TRAINING ===

class TrainingCampCreate(BaseModel):
    name: str
    description: Optional[str] = None
    location: str
    start_date: date
    end_date: date
    max_participants: int
    created_by: UUID


class TrainingCamp(TrainingCampCreate):
    id: UUID
    current_participants: int = 0
    status: CampStatus = CampStatus.UPCOMING
    created_at: Optional[datetime] = None

    @property
    def is_full(self) -> bool:
        return self.current_participants >= self.max_participants


class TrainingObjectiveCreate(BaseModel):
    camp_id: UUID
    title: str
    description: Optional[str] = None
    target_date: date


class TrainingObjective(TrainingObjectiveCreate):
    id: UUID
    status: str = "pending"


class TrainingLogCreate(BaseModel):
    fighter_id: UUID
    camp_id: Optional[UUID] = None
    objective_id: Optional[UUID] = None
    activity: str
    duration_minutes: int
    notes: Optional[str] = None
    date: date


class TrainingLog(TrainingLogCreate):
    id: UUID
    created_at: Optional[datetime] = None


# === DISPUTES ===

class DisputeCreate(BaseModel):
    user_id: UUID
    title: str
    description: str
    category: DisputeCategory
    related_fight_id: Optional[UUID] = None


class Dispute(DisputeCreate):
    id: UUID
    status: DisputeStatus = DisputeStatus.PENDING
    resolution: Optional[DisputeResolution] = None
    admin_notes: Optional[str] = None
    resolved_by: Optional[UUID] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


# === ADMIN ===

class UserSuspensionCreate(BaseModel):
    user_id: UUID
    reason: str
    suspended_by: UUID
    suspended_at: datetime
    expires_at: Optional[datetime] = None


class UserSuspension(UserSuspensionCreate):
    id: UUID
    status: str = "active"


class SystemSettings(BaseModel):
    maintenance_mode: bool = False
    registration_enabled: bool = True
    max_fighters_per_tournament: int = 32
    points_per_win: int = 10


class SystemStats(BaseModel):
    total_users: int = 0
    total_fighters: int = 0
    total_fights: int = 0
    total_tournaments: int = 0
    pending_disputes: int = 0
    recent_users: int = 0
    recent_fights: int = 0


# === RANKINGS ===

class RankingEntry(BaseModel):
    rank: int
    fighter_id: UUID
    name: str
    handle: str
    tier: Tier
    earned_tier: Tier
    weight_class: WeightClass
    points: int
    wins: int
    losses: int
    draws: int
    knockouts: int
    win_percentage: float
    ko_percentage: float
    recent_form: List[str] = Field(default_factory=list)
    current_streak: int = 0


# === RATE LIMITING ===

class RateLimitPolicy(BaseModel):
    operation_class: OperationClass
    window_seconds: int
    max_requests: int
    fail_closed: bool


class CounterResult(BaseModel):
    """What the counter store reports for one increment-and-check"""
    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # epoch seconds


class RateLimitDecision(CounterResult):
    retry_after: int = 0
    degraded: bool = False  # counter store unreachable, policy applied


# === RESULTS ===

class ActionResult(BaseModel):
    """Uniform handler output: success message + data, or error + details"""
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[str] = None
    kind: Optional[str] = None
    details: Optional[Dict[str, str]] = None
    retry_after: Optional[int] = None

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "ActionResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, error: str, kind: str, details: Optional[Dict[str, str]] = None,
             retry_after: Optional[int] = None) -> "ActionResult":
        return cls(success=False, error=error, kind=kind, details=details, retry_after=retry_after)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class LogEntry(BaseModel):
    level: LogLevel
    message: str
    meta: Dict[str, Any] = Field(default_factory=dict)
    environment: str
    created_at: datetime
