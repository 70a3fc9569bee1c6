"""Translate an ``EventQuery`` into SQL conditions, ordering and a page window.

Every condition returned by ``build_filter_conditions`` is meant to be
combined with AND. The same list is used for the page query and the count
query, which keeps ``total`` consistent with the rows returned.
"""

import math
import re
from dataclasses import dataclass
from typing import Any

from sqlalchemy import and_, or_
from sqlalchemy.sql import ColumnElement

from eventhub.core.config import settings
from eventhub.models import Event
from eventhub.schemas.event import EventQuery

SORT_COLUMNS = {
    "startDate": Event.start_datetime,
    "createdAt": Event.created_at,
    "title": Event.title,
    "capacity": Event.capacity,
}


@dataclass(frozen=True)
class PageWindow:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_window(page: int | None, limit: int | None) -> PageWindow:
    """Clamp page to >= 1 and limit to 1..max_page_size."""
    page = max(1, page or 1)
    limit = settings.default_page_size if limit is None else limit
    limit = min(max(1, limit), settings.max_page_size)
    return PageWindow(page=page, limit=limit)


def pagination(window: PageWindow, total: int) -> dict[str, Any]:
    total_pages = math.ceil(total / window.limit)
    return {
        "page": window.page,
        "limit": window.limit,
        "total": total,
        "total_pages": total_pages,
        "has_next": window.page < total_pages,
        "has_prev": window.page > 1,
    }


def search_terms(search: str | None) -> list[str]:
    if not search:
        return []
    return [term for term in re.split(r"\s+", search.strip()) if term]


def _term_matches(term: str) -> ColumnElement[bool]:
    return or_(
        Event.title.icontains(term, autoescape=True),
        Event.description.icontains(term, autoescape=True),
        Event.excerpt.icontains(term, autoescape=True),
    )


def build_filter_conditions(query: EventQuery) -> list[ColumnElement[bool]]:
    """Build the list of conditions an event must all satisfy."""
    conditions: list[ColumnElement[bool]] = []

    if query.status is not None:
        conditions.append(Event.status == query.status)
    if query.organizer_id is not None:
        conditions.append(Event.organizer_id == query.organizer_id)
    if query.category is not None:
        conditions.append(Event.category_id == query.category)
    if query.visibility is not None:
        conditions.append(Event.visibility == query.visibility)

    if query.from_date is not None:
        conditions.append(Event.start_datetime >= query.from_date)
    if query.to_date is not None:
        conditions.append(Event.end_datetime <= query.to_date)

    if query.min_capacity is not None:
        conditions.append(Event.capacity >= query.min_capacity)
    if query.max_capacity is not None:
        conditions.append(Event.capacity <= query.max_capacity)

    if query.price_type == "free":
        conditions.append(
            or_(Event.price.is_(None), Event.price["type"].as_string() == "free")
        )
    elif query.price_type == "paid":
        conditions.append(Event.price["type"].as_string() == "paid")

    if query.min_price is not None:
        conditions.append(Event.price["amount"].as_float() >= query.min_price)
    if query.max_price is not None:
        conditions.append(Event.price["amount"].as_float() <= query.max_price)

    if query.has_nft is True:
        conditions.append(Event.nft_metadata.is_not(None))
    elif query.has_nft is False:
        conditions.append(Event.nft_metadata.is_(None))

    # Each term must appear in at least one of the text fields
    terms = search_terms(query.search)
    if terms:
        conditions.append(and_(*(_term_matches(term) for term in terms)))

    return conditions


def build_order_by(query: EventQuery) -> list[Any]:
    column = SORT_COLUMNS.get(query.sort_by, Event.start_datetime)
    if query.sort_order == "desc":
        return [column.desc(), Event.id.desc()]
    return [column.asc(), Event.id.asc()]
