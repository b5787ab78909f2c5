from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from enum import Enum
from datetime import datetime
from urllib.parse import urlparse

from time_utils import ensure_timezone


class UserRoleEnum(str, Enum):
    STUDENT = "student"
    ALUMNI = "alumni"


class PostCategoryEnum(str, Enum):
    JOBS = "jobs"
    ADVICE = "advice"
    MEMORIES = "memories"
    EVENTS = "events"
    GENERAL = "general"


class AttendanceStatusEnum(str, Enum):
    GOING = "going"
    MAYBE = "maybe"
    NOT_GOING = "not_going"


def _normalize_optional_http_url(value: Optional[str], field_name: str, max_length: int = 500) -> Optional[str]:
    raw = str(value or "").strip()
    if not raw:
        return None
    if len(raw) > max_length:
        raise ValueError(f"{field_name} must be at most {max_length} characters")
    parsed = urlparse(raw)
    if parsed.scheme.lower() not in {"http", "https"} or not parsed.netloc:
        raise ValueError(f"{field_name} must be a valid http/https URL")
    return raw


def _normalize_optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = str(value).strip()
    return normalized or None


def _require_text(value, field_name: str) -> str:
    normalized = str(value or "").strip()
    if not normalized:
        raise ValueError(f"{field_name} is required")
    return normalized


class CamelModel(BaseModel):
    """Base for API payloads: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Auth Schemas
class SessionRequest(CamelModel):
    id_token: str = Field(..., min_length=1)


class RefreshTokenRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class UserResponse(CamelModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    college_id: Optional[int] = None
    role: Optional[UserRoleEnum] = None
    department: Optional[str] = None
    batch: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    is_onboarded: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse


class OnboardingRequest(CamelModel):
    college_id: int = Field(..., ge=1)
    role: UserRoleEnum
    department: str = Field(..., max_length=150)
    batch: str = Field(..., max_length=50)

    @field_validator("department", "batch", mode="before")
    @classmethod
    def _strip_required(cls, value, info):
        return _require_text(value, info.field_name)


class ProfileUpdateRequest(CamelModel):
    first_name: Optional[str] = Field(default=None, max_length=255)
    last_name: Optional[str] = Field(default=None, max_length=255)
    department: Optional[str] = Field(default=None, max_length=150)
    batch: Optional[str] = Field(default=None, max_length=50)
    bio: Optional[str] = Field(default=None, max_length=2000)
    location: Optional[str] = Field(default=None, max_length=255)

    @field_validator("first_name", "last_name", "department", "batch", "bio", "location", mode="before")
    @classmethod
    def _normalize(cls, value):
        return _normalize_optional_text(value)


# College Schemas
class CollegeCreate(CamelModel):
    name: str = Field(..., max_length=255)
    domain: Optional[str] = Field(default=None, max_length=255)

    @field_validator("name", mode="before")
    @classmethod
    def _normalize_name(cls, value):
        return _require_text(value, "College name")

    @field_validator("domain", mode="before")
    @classmethod
    def _normalize_domain(cls, value):
        normalized = _normalize_optional_text(value)
        return normalized.lower() if normalized else None


class CollegeResponse(CamelModel):
    id: int
    name: str
    domain: Optional[str] = None
    created_at: Optional[datetime] = None


class CollegeStatsResponse(CamelModel):
    students_count: int = 0
    alumni_count: int = 0
    total_posts: int = 0


# Post Schemas
class PostCreateRequest(CamelModel):
    model_config = ConfigDict(extra="forbid")

    content: str = Field(..., max_length=5000)
    category: PostCategoryEnum = PostCategoryEnum.GENERAL
    image_url: Optional[str] = None
    title: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)

    @field_validator("content", mode="before")
    @classmethod
    def _normalize_content(cls, value):
        return _require_text(value, "content")

    @field_validator("image_url", mode="before")
    @classmethod
    def _normalize_image_url(cls, value):
        return _normalize_optional_http_url(value, "imageUrl")

    @field_validator("title", "location", mode="before")
    @classmethod
    def _normalize_optional(cls, value):
        return _normalize_optional_text(value)


class PostUpdateRequest(CamelModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = Field(default=None, max_length=5000)
    category: Optional[PostCategoryEnum] = None
    location: Optional[str] = Field(default=None, max_length=255)

    @field_validator("content", mode="before")
    @classmethod
    def _normalize_content(cls, value):
        if value is None:
            return None
        return _require_text(value, "content")

    @field_validator("title", "location", mode="before")
    @classmethod
    def _normalize_optional(cls, value):
        return _normalize_optional_text(value)


class PostResponse(CamelModel):
    id: int
    author_id: str
    college_id: int
    title: Optional[str] = None
    content: str
    category: PostCategoryEnum
    image_url: Optional[str] = None
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FeedPostResponse(PostResponse):
    author: UserResponse
    likes_count: int = 0
    comments_count: int = 0
    is_liked_by_user: Optional[bool] = None


class LikeToggleResponse(CamelModel):
    is_liked: bool


class CommentCreateRequest(CamelModel):
    content: str = Field(..., max_length=2000)

    @field_validator("content", mode="before")
    @classmethod
    def _normalize_content(cls, value):
        return _require_text(value, "content")


class CommentResponse(CamelModel):
    id: int
    content: str
    created_at: Optional[datetime] = None
    author: UserResponse


# Event Schemas
class EventCreateRequest(CamelModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., max_length=255)
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    location: Optional[str] = Field(default=None, max_length=255)
    category: str = Field(default="general", max_length=50)
    is_virtual: bool = False
    meeting_link: Optional[str] = None
    max_attendees: Optional[int] = Field(default=None, ge=1)

    @field_validator("title", mode="before")
    @classmethod
    def _normalize_title(cls, value):
        return _require_text(value, "title")

    @field_validator("description", "location", mode="before")
    @classmethod
    def _normalize_optional(cls, value):
        return _normalize_optional_text(value)

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value):
        return _normalize_optional_text(value) or "general"

    @field_validator("meeting_link", mode="before")
    @classmethod
    def _normalize_meeting_link(cls, value):
        return _normalize_optional_http_url(value, "meetingLink")

    @model_validator(mode="after")
    def _check_dates(self):
        if self.end_date and ensure_timezone(self.end_date) < ensure_timezone(self.start_date):
            raise ValueError("endDate must not be before startDate")
        return self


class EventUpdateRequest(CamelModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[str] = Field(default=None, max_length=255)
    category: Optional[str] = Field(default=None, max_length=50)
    is_virtual: Optional[bool] = None
    meeting_link: Optional[str] = None
    max_attendees: Optional[int] = Field(default=None, ge=1)

    @field_validator("title", "category", mode="before")
    @classmethod
    def _normalize_required(cls, value, info):
        if value is None:
            return None
        return _require_text(value, info.field_name)

    @field_validator("description", "location", mode="before")
    @classmethod
    def _normalize_optional(cls, value):
        return _normalize_optional_text(value)

    @field_validator("meeting_link", mode="before")
    @classmethod
    def _normalize_meeting_link(cls, value):
        return _normalize_optional_http_url(value, "meetingLink")

    @model_validator(mode="after")
    def _check_dates(self):
        if self.start_date and self.end_date and ensure_timezone(self.end_date) < ensure_timezone(self.start_date):
            raise ValueError("endDate must not be before startDate")
        return self


class EventResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    location: Optional[str] = None
    category: str
    is_virtual: bool = False
    meeting_link: Optional[str] = None
    max_attendees: Optional[int] = None
    organizer_id: str
    college_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EventDetailResponse(EventResponse):
    organizer: UserResponse
    attendees_count: int = 0
    user_attendance_status: Optional[AttendanceStatusEnum] = None


class AttendanceRequest(CamelModel):
    status: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        return str(value or "").strip().lower()


class AttendeeResponse(CamelModel):
    id: int
    status: AttendanceStatusEnum
    created_at: Optional[datetime] = None
    user: UserResponse


class MessageResponse(CamelModel):
    message: str


# Upload Schemas
class PresignRequest(CamelModel):
    filename: str = Field(..., min_length=1)
    content_type: str = Field(..., min_length=1)


class PresignResponse(CamelModel):
    upload_url: str
    public_url: str
    key: str
    content_type: str


POST_CATEGORY_VALUES: List[str] = [item.value for item in PostCategoryEnum]
ATTENDANCE_STATUS_VALUES: List[str] = [item.value for item in AttendanceStatusEnum]
