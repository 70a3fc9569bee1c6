"""Event routes: listing, detail, create, update, archive and publish."""
from datetime import datetime
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlmodel import Session

from eventhub.core.config import settings
from eventhub.core.database import get_session
from eventhub.core.responses import success_response
from eventhub.core.security import Caller, get_caller, get_optional_caller
from eventhub.models import EventStatus, EventVisibility
from eventhub.schemas import EventCreate, EventPage, EventQuery, EventRead, EventUpdate, QueryStats
from eventhub.services.authorization import require_permission
from eventhub.services.event_service import EventService
from eventhub.services.event_store import EventStore

router = APIRouter(prefix="/api/events", tags=["events"])


def get_event_service(session: Session = Depends(get_session)) -> EventService:
    """Dependency building an EventService on the request's session."""
    return EventService(EventStore(session))


def event_query_params(
    page: int = Query(1),
    limit: int = Query(settings.default_page_size),
    status: EventStatus | None = Query(None),
    visibility: EventVisibility | None = Query(None),
    category: str | None = Query(None),
    organizer_id: str | None = Query(None, alias="organizerId"),
    search: str | None = Query(None),
    min_capacity: int | None = Query(None, alias="minCapacity"),
    max_capacity: int | None = Query(None, alias="maxCapacity"),
    price_type: Literal["free", "paid"] | None = Query(None, alias="priceType"),
    min_price: float | None = Query(None, alias="minPrice"),
    max_price: float | None = Query(None, alias="maxPrice"),
    has_nft: bool | None = Query(None, alias="hasNFT"),
    from_date: datetime | None = Query(None, alias="fromDate"),
    to_date: datetime | None = Query(None, alias="toDate"),
    sort_by: Literal["startDate", "createdAt", "title", "capacity"] = Query(
        "startDate", alias="sortBy"
    ),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
) -> EventQuery:
    """Collect listing query parameters into a validated EventQuery."""
    return EventQuery(
        page=page,
        limit=limit,
        status=status,
        visibility=visibility,
        category=category,
        organizer_id=organizer_id,
        search=search,
        min_capacity=min_capacity,
        max_capacity=max_capacity,
        price_type=price_type,
        min_price=min_price,
        max_price=max_price,
        has_nft=has_nft,
        from_date=from_date,
        to_date=to_date,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("")
async def list_events(
    query: EventQuery = Depends(event_query_params),
    caller: Caller | None = Depends(get_optional_caller),
    service: EventService = Depends(get_event_service),
):
    """
    List events visible to the caller.

    Anonymous callers and plain users see published public events,
    organizers see their own events in every status, admins see all.
    The caller's filters are applied on top of those constraints.
    """
    result = service.find_many_with_authorization(query, caller)
    page = EventPage.model_validate(result, from_attributes=True)
    return success_response(page, "Events retrieved successfully")


@router.post("", status_code=201)
async def create_event(
    data: EventCreate,
    caller: Caller = Depends(get_caller),
    service: EventService = Depends(get_event_service),
):
    """Create a draft event owned by the caller."""
    event = service.create(data, caller)
    return success_response(
        EventRead.model_validate(event), "Event created successfully", status_code=201
    )


@router.get("/stats")
async def query_stats(
    query: EventQuery = Depends(event_query_params),
    caller: Caller = Depends(get_caller),
    service: EventService = Depends(get_event_service),
):
    """Report how selective a set of filters is. Admin only."""
    require_permission(caller.role, "admin:all")
    stats = QueryStats.model_validate(service.get_query_stats(query))
    return success_response(stats, "Query statistics retrieved successfully")


@router.get("/{event_id}")
async def get_event(
    event_id: UUID,
    caller: Caller | None = Depends(get_optional_caller),
    service: EventService = Depends(get_event_service),
):
    """
    Get a single event.

    Events the caller may not read are reported as not found, the same as
    events that do not exist.
    """
    event = service.get_event(event_id, caller)
    return success_response(EventRead.model_validate(event), "Event retrieved successfully")


@router.put("/{event_id}")
async def update_event(
    event_id: UUID,
    data: EventUpdate,
    caller: Caller = Depends(get_caller),
    service: EventService = Depends(get_event_service),
):
    """
    Update an event.

    Only fields present in the body change. Each successful update bumps
    the event's version by one.
    """
    event = service.update(event_id, data, caller)
    return success_response(EventRead.model_validate(event), "Event updated successfully")


@router.post("/{event_id}/publish")
async def publish_event(
    event_id: UUID,
    caller: Caller = Depends(get_caller),
    service: EventService = Depends(get_event_service),
):
    """Publish an event owned by the caller."""
    event = service.publish(event_id, caller)
    return success_response(EventRead.model_validate(event), "Event published successfully")


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: UUID,
    caller: Caller = Depends(get_caller),
    service: EventService = Depends(get_event_service),
):
    """Archive an event. The event is kept with status "archived"."""
    service.delete(event_id, caller)
    return Response(status_code=204)
