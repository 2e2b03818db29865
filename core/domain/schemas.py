"""
Form schemas - untyped form input -> typed records.

Every schema is checked in one pass: validate_form() collects the first
message for each invalid field and raises InvalidInput with all of them.
Date rules compare against ``today`` from the validation context so tests
can pin the calendar.
"""

import re
from datetime import date
from typing import Any, Dict, Mapping, Optional, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from core.domain.constants import (
    ALLOWED_MIME_TYPES,
    DEFAULT_PAGE_SIZE,
    HANDLE_PATTERN,
    MAX_CAMP_PARTICIPANTS,
    MAX_FIGHTER_AGE,
    MAX_NAME_LENGTH,
    MAX_PAGE_SIZE,
    MAX_ROUND,
    MAX_TOURNAMENT_PARTICIPANTS,
    MAX_UPLOAD_BYTES,
    MIN_CAMP_PARTICIPANTS,
    MIN_FIGHTER_AGE,
    MIN_NAME_LENGTH,
    MIN_ROUND,
    MIN_TOURNAMENT_PARTICIPANTS,
)
from core.domain.errors import InvalidInput
from core.domain.models import (
    CampStatus,
    DisputeCategory,
    DisputeResolution,
    DisputeStatus,
    FightMethod,
    FightResult,
    MediaCategory,
    Stance,
    Tier,
    TournamentStatus,
    UploadedFile,
    UserRole,
    WeightClass,
)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
URL_RE = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)
PASSWORD_COMPLEXITY_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")

T = TypeVar("T", bound=BaseModel)


def _today(info: ValidationInfo) -> date:
    context = info.context or {}
    return context.get("today") or date.today()


def _age_on(birthday: date, today: date) -> int:
    before_birthday = (today.month, today.day) < (birthday.month, birthday.day)
    return today.year - birthday.year - int(before_birthday)


def _not_before_today(value: date, info: ValidationInfo, message: str) -> date:
    if value < _today(info):
        raise PydanticCustomError("date_in_past", message)
    return value


def _not_after_today(value: date, info: ValidationInfo, message: str) -> date:
    if value > _today(info):
        raise PydanticCustomError("date_in_future", message)
    return value


def _after_start(value: date, info: ValidationInfo) -> date:
    start = info.data.get("start_date")
    if start is not None and value <= start:
        raise PydanticCustomError("date_order", "End date must be after start date")
    return value


class FormSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


# === AUTH ===

class SignInForm(FormSchema):
    email: str
    password: str = Field(min_length=8)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        if not EMAIL_RE.match(v):
            raise PydanticCustomError("email", "Invalid email address")
        return v.lower()


class RegisterForm(FormSchema):
    full_name: str = Field(min_length=2, max_length=100)
    email: str
    password: str = Field(min_length=8)
    confirm_password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        if not EMAIL_RE.match(v):
            raise PydanticCustomError("email", "Invalid email address")
        return v.lower()

    @field_validator("password")
    @classmethod
    def check_complexity(cls, v: str) -> str:
        if not PASSWORD_COMPLEXITY_RE.match(v):
            raise PydanticCustomError(
                "password_complexity",
                "Password must contain at least one lowercase letter, one uppercase letter, and one number",
            )
        return v

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, v: str, info: ValidationInfo) -> str:
        password = info.data.get("password")
        if password is not None and v != password:
            raise PydanticCustomError("password_mismatch", "Passwords don't match")
        return v


# === FIGHTER ===

class FighterProfileForm(FormSchema):
    name: str = Field(min_length=MIN_NAME_LENGTH, max_length=MAX_NAME_LENGTH)
    handle: str = Field(min_length=2, max_length=30)
    birthday: date
    hometown: str = Field(min_length=2, max_length=100)
    stance: Stance
    height_feet: int = Field(ge=4, le=7)
    height_inches: int = Field(ge=0, le=11)
    reach: int = Field(ge=50, le=100)
    weight: int = Field(ge=100, le=400)
    weight_class: WeightClass
    trainer: Optional[str] = Field(default=None, min_length=2, max_length=100)
    gym: Optional[str] = Field(default=None, min_length=2, max_length=100)

    @field_validator("handle")
    @classmethod
    def check_handle(cls, v: str) -> str:
        if not re.match(HANDLE_PATTERN, v):
            raise PydanticCustomError(
                "handle_format", "Handle can only contain letters, numbers, and underscores"
            )
        return v

    @field_validator("birthday")
    @classmethod
    def check_age(cls, v: date, info: ValidationInfo) -> date:
        age = _age_on(v, _today(info))
        if age < MIN_FIGHTER_AGE or age > MAX_FIGHTER_AGE:
            raise PydanticCustomError(
                "age_range",
                "Age must be between {min_age} and {max_age} years",
                {"min_age": MIN_FIGHTER_AGE, "max_age": MAX_FIGHTER_AGE},
            )
        return v


class FightRecordForm(FormSchema):
    opponent_name: str = Field(min_length=2, max_length=100)
    result: FightResult
    method: FightMethod
    round: Optional[int] = Field(default=None, ge=MIN_ROUND, le=MAX_ROUND)
    date: date
    location: Optional[str] = Field(default=None, min_length=2, max_length=100)
    weight_class: WeightClass
    points_earned: int = Field(default=0, ge=0)
    proof_url: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("date")
    @classmethod
    def not_in_future(cls, v: date, info: ValidationInfo) -> date:
        return _not_after_today(v, info, "Fight date cannot be in the future")

    @field_validator("proof_url")
    @classmethod
    def check_url(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not URL_RE.match(v):
            raise PydanticCustomError("url", "Proof URL must be a valid http(s) URL")
        return v


class MatchmakingForm(FormSchema):
    """weight_class / tier default to the fighter's own when omitted"""
    weight_class: Optional[WeightClass] = None
    tier: Optional[Tier] = None
    max_distance: Optional[int] = Field(default=None, ge=0, le=1000)
    preferred_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("preferred_date")
    @classmethod
    def not_in_past(cls, v: Optional[date], info: ValidationInfo) -> Optional[date]:
        if v is None:
            return v
        return _not_before_today(v, info, "Preferred date must be in the future")


# === TOURNAMENTS / TRAINING ===

class TournamentForm(FormSchema):
    name: str = Field(min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    weight_class: WeightClass
    tier: Tier
    max_participants: int = Field(ge=MIN_TOURNAMENT_PARTICIPANTS, le=MAX_TOURNAMENT_PARTICIPANTS)
    start_date: date
    end_date: date
    entry_fee: float = Field(default=0, ge=0)
    prize_pool: float = Field(default=0, ge=0)

    @field_validator("start_date")
    @classmethod
    def start_not_past(cls, v: date, info: ValidationInfo) -> date:
        return _not_before_today(v, info, "Start date must be in the future")

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, v: date, info: ValidationInfo) -> date:
        _not_before_today(v, info, "End date must be in the future")
        return _after_start(v, info)


class TrainingCampForm(FormSchema):
    name: str = Field(min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    location: str = Field(min_length=2, max_length=100)
    max_participants: int = Field(ge=MIN_CAMP_PARTICIPANTS, le=MAX_CAMP_PARTICIPANTS)
    start_date: date
    end_date: date

    @field_validator("start_date")
    @classmethod
    def start_not_past(cls, v: date, info: ValidationInfo) -> date:
        return _not_before_today(v, info, "Start date must be in the future")

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, v: date, info: ValidationInfo) -> date:
        _not_before_today(v, info, "End date must be in the future")
        return _after_start(v, info)


class TrainingObjectiveForm(FormSchema):
    camp_id: UUID
    title: str = Field(min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    target_date: date


class TrainingLogForm(FormSchema):
    activity: str = Field(min_length=2, max_length=200)
    duration_minutes: int = Field(ge=1, le=300)
    date: date
    camp_id: Optional[UUID] = None
    objective_id: Optional[UUID] = None
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("date")
    @classmethod
    def not_in_future(cls, v: date, info: ValidationInfo) -> date:
        return _not_after_today(v, info, "Log date cannot be in the future")


# === MEDIA ===

class MediaUploadForm(FormSchema):
    title: str = Field(min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    category: MediaCategory
    file: UploadedFile

    @field_validator("file")
    @classmethod
    def check_file(cls, v: UploadedFile) -> UploadedFile:
        if v.size > MAX_UPLOAD_BYTES:
            raise PydanticCustomError(
                "file_too_large",
                "File size must be less than {max_mb}MB",
                {"max_mb": MAX_UPLOAD_BYTES // (1024 * 1024)},
            )
        if v.content_type not in ALLOWED_MIME_TYPES:
            raise PydanticCustomError("file_type", "File type not supported")
        return v


class InterviewForm(FormSchema):
    interviewer: str = Field(min_length=2, max_length=100)
    title: str = Field(min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    scheduled_date: date
    duration_minutes: int = Field(ge=15, le=120)

    @field_validator("scheduled_date")
    @classmethod
    def not_in_past(cls, v: date, info: ValidationInfo) -> date:
        return _not_before_today(v, info, "Interview date must be in the future")


# === DISPUTES / ADMIN ===

class DisputeForm(FormSchema):
    title: str = Field(min_length=5, max_length=200)
    description: str = Field(min_length=20, max_length=2000)
    category: DisputeCategory
    related_fight_id: Optional[UUID] = None


class DisputeResolutionForm(FormSchema):
    dispute_id: UUID
    resolution: DisputeResolution
    admin_notes: Optional[str] = Field(default=None, max_length=1000)


class RoleUpdateForm(FormSchema):
    user_id: UUID
    role: UserRole


class SuspensionForm(FormSchema):
    user_id: UUID
    reason: str = Field(min_length=10, max_length=500)
    duration_days: Optional[int] = Field(default=None, ge=1, le=365)


class SystemSettingsForm(FormSchema):
    maintenance_mode: bool
    registration_enabled: bool
    max_fighters_per_tournament: int = Field(ge=MIN_TOURNAMENT_PARTICIPANTS, le=MAX_TOURNAMENT_PARTICIPANTS)
    points_per_win: int = Field(ge=1, le=100)


# === IDENTIFIERS / FILTERS ===

class TournamentJoinForm(FormSchema):
    tournament_id: UUID


class TrainingCampJoinForm(FormSchema):
    camp_id: UUID


class MatchmakingCancelForm(FormSchema):
    request_id: UUID


class RankingsQuery(FormSchema):
    weight_class: Optional[WeightClass] = None
    tier: Optional[Tier] = None


class TournamentQuery(FormSchema):
    status: Optional[TournamentStatus] = None
    weight_class: Optional[WeightClass] = None


class TournamentDetailsQuery(FormSchema):
    tournament_id: UUID


class MediaQuery(FormSchema):
    category: Optional[MediaCategory] = None


class InterviewQuery(FormSchema):
    fighter_id: Optional[UUID] = None


class CampQuery(FormSchema):
    status: Optional[CampStatus] = None


class DisputeQuery(FormSchema):
    status: Optional[DisputeStatus] = None


class UserListQuery(FormSchema):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    search: str = Field(default="", max_length=100)


def _clean(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop absent values: None and blank strings mean 'not provided'."""
    cleaned = {}
    for key, value in raw.items():
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        cleaned[key] = value
    return cleaned


def validate_form(schema: Type[T], raw: Mapping[str, Any], today: Optional[date] = None) -> T:
    """
    Validate raw form input against a schema.

    Returns the typed record, or raises InvalidInput whose ``details``
    maps each invalid field to its first error message.
    """
    try:
        return schema.model_validate(_clean(raw), context={"today": today or date.today()})
    except ValidationError as e:
        details: Dict[str, str] = {}
        for err in e.errors():
            field = str(err["loc"][0]) if err["loc"] else "form"
            details.setdefault(field, err["msg"])
        raise InvalidInput(details) from e
