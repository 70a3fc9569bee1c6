"""Pydantic schemas for event requests and responses.

Field names are snake_case in Python and camelCase on the wire. Request
schemas enforce everything that can be checked without the database:
lengths, URL shapes, the end-after-start rule and the ordering of range
filters. Invariants that depend on stored state are enforced by the
service layer.
"""

from datetime import UTC, datetime
from typing import Annotated, Any, Literal
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from eventhub.core.config import settings
from eventhub.models.event import EventStatus, EventVisibility


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _check_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError("Invalid timezone") from e
    return value


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


Url = AnyHttpUrl


class Coordinates(CamelModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class PhysicalLocation(CamelModel):
    type: Literal["physical"]
    address: str = Field(min_length=5)
    city: str = Field(min_length=2)
    country: str = Field(min_length=2)
    coordinates: Coordinates | None = None


class VirtualLocation(CamelModel):
    type: Literal["virtual"]
    url: Url
    platform: str | None = None


Location = Annotated[PhysicalLocation | VirtualLocation, Field(discriminator="type")]


class EventPrice(CamelModel):
    amount: float = Field(ge=0, le=999999.99)
    currency: str = Field(pattern=r"^[A-Z]{3}$")
    type: Literal["free", "paid"]


class EventImages(CamelModel):
    thumbnail: Url
    banner: Url
    gallery: list[Url] | None = None


class NftAttribute(BaseModel):
    trait_type: str
    value: str


class NftDisplayMetadata(CamelModel):
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    image: Url
    attributes: list[NftAttribute] | None = None


class WalletNftAssociation(CamelModel):
    """Link between an event and an NFT minted for it.

    An event without an association stores NULL; this is the only other
    variant.
    """

    type: Literal["wallet-nft"] = "wallet-nft"
    mint_address: str = Field(min_length=32, max_length=44)
    collection_address: str | None = Field(default=None, min_length=32, max_length=44)
    metadata: NftDisplayMetadata


# Columns stored as JSON; their values are dumped in JSON mode before writes.
JSON_FIELDS = frozenset({"location", "price", "images", "nft_metadata"})


class EventBase(CamelModel):
    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10, max_length=5000)
    excerpt: str | None = Field(default=None, max_length=300)
    start_datetime: datetime = Field(alias="startDateTime")
    end_datetime: datetime = Field(alias="endDateTime")
    timezone: str = Field(min_length=1, max_length=50)
    location: Location
    capacity: int | None = Field(default=None, gt=0, le=1_000_000)
    visibility: EventVisibility = EventVisibility.PUBLIC
    price: EventPrice | None = None
    images: EventImages
    category_id: str | None = Field(default=None, max_length=36)
    nft_metadata: WalletNftAssociation | None = None

    @field_validator("title", "description", "excerpt", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator("start_datetime", "end_datetime")
    @classmethod
    def normalize_datetimes(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        return _check_timezone(value)


class EventCreate(EventBase):
    """Payload for creating an event; the caller becomes its organizer."""

    @model_validator(mode="after")
    def check_dates(self) -> "EventCreate":
        if self.end_datetime <= self.start_datetime:
            raise ValueError("End date must be after start date")
        return self


# Fields a PUT may not set to null even though they are optional in the body.
REQUIRED_ON_UPDATE = (
    "title",
    "description",
    "start_datetime",
    "end_datetime",
    "timezone",
    "location",
    "visibility",
    "images",
    "status",
)


class EventUpdate(CamelModel):
    """Partial update; only fields present in the body are applied."""

    title: str | None = Field(default=None, min_length=3, max_length=200)
    description: str | None = Field(default=None, min_length=10, max_length=5000)
    excerpt: str | None = Field(default=None, max_length=300)
    start_datetime: datetime | None = Field(default=None, alias="startDateTime")
    end_datetime: datetime | None = Field(default=None, alias="endDateTime")
    timezone: str | None = Field(default=None, min_length=1, max_length=50)
    location: Location | None = None
    capacity: int | None = Field(default=None, gt=0, le=1_000_000)
    visibility: EventVisibility | None = None
    price: EventPrice | None = None
    images: EventImages | None = None
    category_id: str | None = Field(default=None, max_length=36)
    nft_metadata: WalletNftAssociation | None = None
    status: EventStatus | None = None

    @field_validator("title", "description", "excerpt", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator("start_datetime", "end_datetime")
    @classmethod
    def normalize_datetimes(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value) if value is not None else None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str | None) -> str | None:
        return _check_timezone(value) if value is not None else None

    @model_validator(mode="after")
    def check_update(self) -> "EventUpdate":
        for name in REQUIRED_ON_UPDATE:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        if self.start_datetime and self.end_datetime:
            if self.end_datetime <= self.start_datetime:
                raise ValueError("End date must be after start date")
        return self


SortField = Literal["startDate", "createdAt", "title", "capacity"]
SortOrder = Literal["asc", "desc"]


class EventQuery(CamelModel):
    """Filters, sort and page window for an event listing.

    Every filter that is set must hold (AND). ``page`` and ``limit`` are
    clamped by the filter composer rather than rejected here.
    """

    page: int = 1
    limit: int = settings.default_page_size
    status: EventStatus | None = None
    visibility: EventVisibility | None = None
    category: str | None = None
    organizer_id: str | None = None
    search: str | None = Field(default=None, max_length=200)
    min_capacity: int | None = Field(default=None, gt=0)
    max_capacity: int | None = Field(default=None, gt=0)
    price_type: Literal["free", "paid"] | None = None
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    has_nft: bool | None = Field(default=None, alias="hasNFT")
    from_date: datetime | None = None
    to_date: datetime | None = None
    sort_by: SortField = "startDate"
    sort_order: SortOrder = "asc"

    @field_validator("search", mode="before")
    @classmethod
    def blank_search_is_none(cls, value: Any) -> Any:
        value = _strip(value)
        return value or None

    @field_validator("from_date", "to_date")
    @classmethod
    def normalize_dates(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value) if value is not None else None

    @model_validator(mode="after")
    def check_ranges(self) -> "EventQuery":
        if self.from_date and self.to_date and self.to_date < self.from_date:
            raise ValueError("To date must be after or equal to from date")
        if (
            self.min_capacity is not None
            and self.max_capacity is not None
            and self.max_capacity < self.min_capacity
        ):
            raise ValueError(
                "Maximum capacity must be greater than or equal to minimum capacity"
            )
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.max_price < self.min_price
        ):
            raise ValueError("Maximum price must be greater than or equal to minimum price")
        return self

    def applied_filters(self) -> list[str]:
        """Names of the filters set on this query, excluding paging and sorting."""
        skip = {"page", "limit", "sort_by", "sort_order"}
        return [
            name
            for name, value in self
            if name not in skip and value is not None
        ]


class EventRead(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: UUID
    slug: str
    title: str
    description: str
    excerpt: str | None
    start_datetime: datetime = Field(alias="startDateTime")
    end_datetime: datetime = Field(alias="endDateTime")
    timezone: str
    location: dict[str, Any]
    capacity: int | None
    current_attendees: int
    status: EventStatus
    visibility: EventVisibility
    organizer_id: str
    category_id: str | None
    price: dict[str, Any] | None
    images: dict[str, Any]
    nft_metadata: dict[str, Any] | None
    version: int
    created_at: datetime
    updated_at: datetime
    published_at: datetime | None

    @field_validator(
        "start_datetime", "end_datetime", "created_at", "updated_at", "published_at"
    )
    @classmethod
    def attach_utc(cls, value: datetime | None) -> datetime | None:
        # SQLite hands back naive datetimes; everything is stored in UTC
        return _as_utc(value) if value is not None else None


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class EventPage(CamelModel):
    data: list[EventRead]
    pagination: Pagination


class QueryStats(CamelModel):
    total_events: int
    filtered_events: int
    applied_filters: list[str]
    estimated_performance: Literal["fast", "medium", "slow"]
