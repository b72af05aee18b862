"""
Game Catalog API — Pydantic Schemas
=====================================

What:  Pydantic models for the Game document and the API response envelopes.
How:   ``GameDocument`` is the write-side schema: repositories validate every
       inserted or updated document against it ("run validators") and store
       ``model_dump(mode="json", by_alias=True, exclude_none=True)``.
       Response models document the envelopes in OpenAPI.

Wire format uses camelCase keys (``releaseDate``, ``coverImage``,
``systemRequirements``); Python attributes are snake_case with aliases.
"""

from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Game Document (stored form)
# ══════════════════════════════════════════════════════════════════════════

Platform = Literal["PC", "PlayStation", "Xbox", "Nintendo", "Mobile"]

PLATFORMS = ("PC", "PlayStation", "Xbox", "Nintendo", "Mobile")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _coerce_datetime(value: Any) -> Any:
    """Accept date-only input as midnight UTC; naive values are UTC, aware ones are converted."""
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return value  # let pydantic report it
        return _as_utc(parsed)
    return value


class _DocumentModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RequirementProfile(_DocumentModel):
    os: Optional[str] = None
    processor: Optional[str] = None
    memory: Optional[str] = None
    graphics: Optional[str] = None
    storage: Optional[str] = None


class SystemRequirements(_DocumentModel):
    minimum: Optional[RequirementProfile] = None
    recommended: Optional[RequirementProfile] = None


class Price(_DocumentModel):
    amount: float = Field(
        ge=0,
        allow_inf_nan=False,
        description="Non-negative finite price; numeric strings are parsed",
    )
    currency: str = Field(default="USD")

    @field_validator("amount", mode="before")
    @classmethod
    def reject_booleans(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("Price amount must be a number")
        return v


class DLC(_DocumentModel):
    title: str
    description: str
    release_date: Optional[datetime] = Field(default=None, alias="releaseDate")
    release_status: Optional[str] = Field(default=None, alias="releaseStatus")

    @field_validator("release_date", mode="before")
    @classmethod
    def coerce_release_date(cls, v: Any) -> Any:
        return _coerce_datetime(v)


class GameDocument(_DocumentModel):
    """
    A Game as stored.

    Invariants enforced here:
        - platforms non-empty, every member in PLATFORMS, duplicates collapsed
        - genre non-empty
        - rating, if present, in [0, 10]
        - price.amount numeric, finite and non-negative
    Unknown keys (including ``_id``) are dropped.
    """

    title: str = Field(min_length=1)
    platforms: List[Platform] = Field(min_length=1)
    genre: List[str] = Field(min_length=1)
    developer: str
    publisher: str
    release_date: datetime = Field(alias="releaseDate")
    description: str
    cover_image: Optional[str] = Field(default=None, alias="coverImage")
    screenshots: Optional[List[str]] = None
    system_requirements: Optional[SystemRequirements] = Field(
        default=None, alias="systemRequirements"
    )
    price: Price
    rating: Optional[float] = Field(default=None, ge=0, le=10, allow_inf_nan=False)
    dlc: Optional[List[DLC]] = None

    @field_validator("platforms")
    @classmethod
    def collapse_duplicate_platforms(cls, v: List[str]) -> List[str]:
        seen: List[str] = []
        for platform in v:
            if platform not in seen:
                seen.append(platform)
        return seen

    @field_validator("release_date", mode="before")
    @classmethod
    def coerce_release_date(cls, v: Any) -> Any:
        return _coerce_datetime(v)

    def to_storage(self) -> Dict[str, Any]:
        """The JSON-ready mapping persisted by the repositories."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# Top-level document keys, in wire (camelCase) form
GAME_FIELDS = frozenset(
    field.alias or name for name, field in GameDocument.model_fields.items()
)


# ══════════════════════════════════════════════════════════════════════════
# Response Models (OpenAPI)
# ══════════════════════════════════════════════════════════════════════════


class GameListResponse(BaseModel):
    """Envelope returned by GET /api/games."""

    games: List[Dict[str, Any]] = Field(description="The requested page of games")
    total_pages: int = Field(alias="totalPages", description="ceil(totalCount / limit)")
    current_page: int = Field(alias="currentPage", description="Page served (clamped to >= 1)")
    total_count: int = Field(alias="totalCount", description="Games matching the filters")

    model_config = ConfigDict(populate_by_name=True)


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "message": "No screenshots found for this game",
            "error": "not_found",
            "request_id": "a1b2c3d4"
        }
    """

    message: str = Field(description="Human-readable error description")
    error: str = Field(description="Machine-readable error code")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    storage_backend: str = Field(description="postgres or memory")
    database: str = Field(description="connected, disconnected or not_used")
    uptime_seconds: float = Field(description="Seconds since service started")
